"""
Derived store: connection management and policy-driven writes.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Type

from sqlalchemy import create_engine, delete, event, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shift_indexer.core.operations import Delete, Operation, UpsertPolicy, Write
from shift_indexer.database.models import ENTITY_MODELS, Base
from shift_indexer.exceptions import ConfigurationError, StoreError

_INSERTS = {
    'sqlite': sqlite.insert,
    'postgresql': postgresql.insert,
}


class DatabaseManager:
    """Manages the derived-store connection and applies write operations."""

    def __init__(
        self,
        config: Dict[str, Any],
        models: Optional[Dict[str, Type[Base]]] = None
    ):
        """
        Initialize database manager with configuration.

        Args:
            config: Configuration with a ``database`` section
            models: Entity name to model registry; defaults to ``ENTITY_MODELS``
        """
        self.config = config['database']
        self.url = self.config['url']
        self.models = dict(models if models is not None else ENTITY_MODELS)
        self.logger = logging.getLogger(self.__class__.__name__)

        # Create engine with configuration
        self.engine = self._create_engine()

        if self.engine.dialect.name not in _INSERTS:
            raise ConfigurationError(
                f"Unsupported database dialect: {self.engine.dialect.name}"
            )

        # Rows handed to callers stay readable after the session closes
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

        if self.config.get('create_tables', True):
            self._initialize_database()

    def _create_engine(self) -> Engine:
        """Create SQLAlchemy engine with proper configuration."""
        connection = self.config.get('connection', {})
        kwargs: Dict[str, Any] = {'echo': connection.get('echo', False)}

        if self.url.startswith('sqlite'):
            if ':memory:' in self.url or self.url.rstrip('/') == 'sqlite:':
                # One shared connection, otherwise every session sees an empty database
                kwargs['poolclass'] = StaticPool
                kwargs['connect_args'] = {'check_same_thread': False}
        else:
            kwargs.update(
                pool_size=connection.get('pool_size', 5),
                max_overflow=connection.get('max_overflow', 10),
                pool_timeout=connection.get('pool_timeout', 30)
            )

        engine = create_engine(self.url, **kwargs)

        pragmas = self.config.get('performance', {}).get('pragma', {})
        if engine.dialect.name == 'sqlite' and pragmas:
            @event.listens_for(engine, "connect")
            def set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                for pragma, value in pragmas.items():
                    cursor.execute(f"PRAGMA {pragma}={value}")
                cursor.close()

        return engine

    def _initialize_database(self) -> None:
        """Create derived tables if they don't exist."""
        Base.metadata.create_all(self.engine)
        self.logger.info("Database initialized successfully")

    @contextmanager
    def session_scope(self) -> Session:
        """Provide a transactional scope around operations."""
        session = self.Session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            self.logger.error(f"Database error: {str(e)}")
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()

    # --- Writes ---------------------------------------------------------------

    def _model(self, entity: str) -> Type[Base]:
        try:
            return self.models[entity]
        except KeyError:
            raise StoreError(f"Unknown entity: {entity}") from None

    def _execute(self, session: Session, operation: Operation) -> None:
        """Translate one operation into a statement under its conflict policy."""
        table = self._model(operation.entity).__table__

        if isinstance(operation, Delete):
            session.execute(delete(table).where(table.c.id == operation.key))
            return

        if operation.policy is UpsertPolicy.UPDATE_ONLY:
            if operation.fields:
                session.execute(
                    update(table).where(table.c.id == operation.key).values(operation.fields)
                )
            return

        values = dict(operation.fields)
        values['id'] = operation.key
        stmt = _INSERTS[self.engine.dialect.name](table).values(values)

        if operation.policy is UpsertPolicy.INSERT_OR_IGNORE:
            stmt = stmt.on_conflict_do_nothing(index_elements=[table.c.id])
        else:
            conflict = operation.on_conflict()
            if conflict:
                stmt = stmt.on_conflict_do_update(index_elements=[table.c.id], set_=conflict)
            else:
                stmt = stmt.on_conflict_do_nothing(index_elements=[table.c.id])

        session.execute(stmt)

    def apply_all(self, operations: Iterable[Operation]) -> None:
        """
        Apply a batch of operations in one transaction.

        Either every operation takes effect or none does.

        Raises:
            StoreError: If any statement fails; the transaction is rolled back
        """
        operations = list(operations)
        try:
            with self.session_scope() as session:
                for operation in operations:
                    self._execute(session, operation)
        except StoreError:
            raise
        except (SQLAlchemyError, OverflowError) as e:
            # sqlite3 raises OverflowError unwrapped for integers past 64 bits
            raise StoreError(f"Failed to apply {len(operations)} operations: {e}") from e

    def apply(
        self,
        entity: str,
        key: Any,
        policy: UpsertPolicy,
        fields: Dict[str, Any],
        conflict_fields: Optional[Dict[str, Any]] = None
    ) -> None:
        """Apply a single write under the given conflict policy."""
        self.apply_all([Write(entity, key, policy, fields, conflict_fields)])

    # --- Reads ----------------------------------------------------------------

    def get(self, entity: str, key: Any) -> Optional[Base]:
        """Get a row by id."""
        with self.session_scope() as session:
            return session.get(self._model(entity), key)

    def find(self, entity: str, order_by: Optional[str] = None, **filters) -> List[Base]:
        """
        Get rows matching column equality filters, e.g. ``draft_id=3``.

        Args:
            entity: Entity name
            order_by: Column to sort by; defaults to the id
            **filters: Column values to match
        """
        model = self._model(entity)
        stmt = select(model).filter_by(**filters)
        stmt = stmt.order_by(getattr(model, order_by or 'id'))
        with self.session_scope() as session:
            return list(session.scalars(stmt).all())

    def count(self, entity: str) -> int:
        """Get total number of rows for an entity."""
        model = self._model(entity)
        with self.session_scope() as session:
            return session.scalar(select(func.count()).select_from(model))

    def table_counts(self) -> Dict[str, int]:
        return {entity: self.count(entity) for entity in self.models}

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Serialize every table, ordered by id."""
        return {
            entity: [row.to_json() for row in self.find(entity)]
            for entity in self.models
        }
