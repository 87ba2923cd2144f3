"""
Maintenance helpers for the derived store: backups and CSV exports.
"""

import gzip
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from sqlalchemy import select

from shift_indexer.database.database import DatabaseManager


class DatabaseUtils:
    """Backup and export utilities around a DatabaseManager."""

    def __init__(self, config: Dict[str, Any], manager: DatabaseManager):
        """Initialize database utilities with configuration."""
        self.config = config['database']
        self.manager = manager
        self.backup_path = Path(self.config.get('backup', {}).get('path', 'data/backups'))
        self.logger = logging.getLogger(self.__class__.__name__)

    def _sqlite_path(self) -> Path:
        database = self.manager.engine.url.database
        if self.manager.engine.dialect.name != 'sqlite' or not database or database == ':memory:':
            raise ValueError("Backups are only supported for file-based SQLite stores")
        return Path(database)

    def create_backup(self, compress: bool = True) -> Path:
        """
        Create a backup of a SQLite store.

        Args:
            compress: Whether to compress the backup using gzip

        Returns:
            Path to backup file
        """
        db_path = self._sqlite_path()
        self.backup_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_file = self.backup_path / f"backup_{timestamp}.db"

        self.logger.info(f"Creating backup: {backup_file}")

        if compress:
            backup_file = backup_file.with_suffix('.db.gz')
            with open(db_path, 'rb') as f_in:
                with gzip.open(backup_file, 'wb') as f_out:
                    shutil.copyfileobj(f_in, f_out)
        else:
            shutil.copy2(db_path, backup_file)

        self.logger.info(f"Backup created successfully: {backup_file}")
        return backup_file

    def export_to_csv(self, entity: str, output_dir: Path) -> Path:
        """
        Export one derived table to a CSV file.

        Args:
            entity: Entity (table) name to export
            output_dir: Directory to save CSV

        Returns:
            Path to CSV file
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"{entity}_{datetime.now():%Y%m%d}.csv"

        model = self.manager._model(entity)
        with self.manager.engine.connect() as conn:
            df = pd.read_sql_query(select(model.__table__), conn)
        df.to_csv(output_file, index=False)
        self.logger.info(f"Exported {len(df)} {entity} rows to {output_file}")
        return output_file

    def export_all(self, output_dir: Path, entities: Optional[List[str]] = None) -> List[Path]:
        """Export every derived table (or the given ones) to CSV."""
        return [
            self.export_to_csv(entity, output_dir)
            for entity in (entities or list(self.manager.models))
        ]
