"""Replay a JSON-lines event dump into the derived store."""

import argparse
import json
import logging
import sys
from pathlib import Path

from shift_indexer.config import build_context, load_config
from shift_indexer.core import Projector, load_events
from shift_indexer.database import DatabaseManager, DatabaseUtils
from shift_indexer.exceptions import IndexerError
from shift_indexer.utils.logging_utils import setup_logging


def _count_lines(path: Path) -> int:
    with open(path) as f:
        return sum(1 for line in f if line.strip())


def replay(args):
    """Project every event of the dump, in file order."""
    config = load_config(args.config)
    if args.database_url:
        config['database']['url'] = args.database_url
    setup_logging(args.log_level or config['logging']['level'])
    logger = logging.getLogger('replay')

    manager = DatabaseManager(config)
    projector = Projector(manager, build_context(config))

    events_path = Path(args.events)
    try:
        stats = projector.replay(
            load_events(events_path),
            show_progress=not args.quiet,
            total=_count_lines(events_path)
        )
    except IndexerError as e:
        logger.error(f"Replay stopped: {e}")
        manager.dispose()
        return 1

    print(json.dumps({'stats': stats.to_dict(), 'tables': manager.table_counts()}, indent=2))

    if args.export_dir:
        DatabaseUtils(config, manager).export_all(Path(args.export_dir))
    manager.dispose()
    return 0


def main():
    parser = argparse.ArgumentParser(description="Replay chain events into the derived store")
    parser.add_argument('events', help='JSON-lines file with one decoded event per line')
    parser.add_argument('--config', '-c', help='YAML configuration file')
    parser.add_argument('--database-url', help='Override the database URL')
    parser.add_argument('--export-dir', help='Export every table to CSV after the replay')
    parser.add_argument('--log-level', help='Logging level (default from config)')
    parser.add_argument('--quiet', '-q', action='store_true', help='Hide the progress bar')
    parser.set_defaults(func=replay)

    args = parser.parse_args()
    sys.exit(args.func(args))


if __name__ == '__main__':
    main()
