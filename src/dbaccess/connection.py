"""
Connection handling with SQLAlchemy.

SQLAlchemy is used for URL parsing, driver loading and catalog
inspection only. Every engine is created with `NullPool`, so closing a
connection really closes the DBAPI connection and each operation works
on a fresh one. Pooling, if wanted, belongs to the driver.

Engines are kept in a thread-safe registry keyed by provider and
connection string so the URL is parsed once per data source.
"""
import atexit
import logging
import threading
from typing import TYPE_CHECKING, Any, Self

import sqlalchemy as sa
from dbaccess.exceptions import ConnectionFailure, DriverError
from dbaccess.exceptions import StatementFailure
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

if TYPE_CHECKING:
    from dbaccess.provider.base import ProviderHandle

__all__ = [
    'Connection',
    'Transaction',
    'get_engine',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[tuple[str, str], Engine] = {}
_engine_registry_lock = threading.RLock()


def get_engine(connection_string: str, provider: 'ProviderHandle',
               engine_factory=sa.create_engine) -> Engine:
    """Get or create a non-pooling SQLAlchemy engine for a data source.

    Args:
        connection_string: SQLAlchemy URL of the database
        provider: Provider the engine must belong to
        engine_factory: Function to create engines (defaults to sqlalchemy.create_engine)

    Returns
        sqlalchemy.engine.Engine

    Raises
        ConnectionFailure: If the URL is invalid, names another dialect or
        driver, or its driver is not installed
    """
    key = (str(provider.provider_id), connection_string)

    with _engine_registry_lock:
        if key in _engine_registry:
            return _engine_registry[key]

        try:
            engine = engine_factory(connection_string, poolclass=NullPool,
                                    **provider.get_engine_kwargs())
        except DriverError as exc:
            raise ConnectionFailure(f'Invalid connection string: {exc}') from exc
        except ImportError as exc:
            raise ConnectionFailure(f'Driver not available: {exc}') from exc

        target = f'{engine.dialect.name}+{engine.driver}'
        expected = f'{provider.dialect_name}+{provider.driver_name}'
        if target != expected:
            engine.dispose()
            raise ConnectionFailure(
                f'Connection string targets {target!r}, '
                f'provider {provider.provider_id!r} expects {expected!r}')

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {provider.provider_id}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry."""
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


class Transaction:
    """A single database transaction on an open connection.

    DBAPI drivers begin transactions implicitly; the provider decides
    whether an explicit BEGIN is needed so that every statement kind,
    DDL included, runs inside it.
    """

    def __init__(self, connection: 'Connection') -> None:
        self.connection = connection
        self.active = True
        connection.provider.begin(connection.dbapi_connection)
        logger.debug(f'Started transaction for connection {id(connection)}')

    def commit(self) -> None:
        self._finish('commit')

    def rollback(self) -> None:
        self._finish('rollback')

    def _finish(self, action: str) -> None:
        if not self.active:
            raise StatementFailure(f'Cannot {action}: transaction already completed')
        self.active = False
        try:
            getattr(self.connection.dbapi_connection, action)()
        except DriverError as exc:
            raise StatementFailure(f'Transaction {action} failed: {exc}') from exc
        logger.debug(f'Transaction {action} for connection {id(self.connection)}')


class Connection:
    """Scoped connection to one database instance.

    Assign `connection_string`, then `open()`. The connection tracks the
    statement count and execution time of the commands run on it, and
    releases the DBAPI connection on `close()` or when used as a
    context manager.
    """

    def __init__(self, provider: 'ProviderHandle') -> None:
        self.provider = provider
        self.connection_string: str | None = None
        self.sa_connection: sa.engine.Connection | None = None
        self.dbapi_connection: Any | None = None
        self.calls = 0
        self.time = 0.0

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self.sa_connection is not None and not self.sa_connection.closed

    def open(self) -> None:
        """Open the connection

        Raises
            ConnectionFailure: No connection string, a bad URL, or the
            driver refused to connect
        """
        if not self.connection_string:
            raise ConnectionFailure('No connection string given')
        if self.is_open:
            return

        engine = get_engine(self.connection_string, self.provider)
        try:
            self.sa_connection = engine.connect()
        except DriverError as exc:
            raise ConnectionFailure(str(exc)) from exc

        self.dbapi_connection = self.sa_connection.connection
        self.provider.configure_connection(self.dbapi_connection)
        logger.debug(f'Opened {self.provider.provider_id} connection {id(self)}')

    def require_open(self) -> None:
        if not self.is_open:
            raise ConnectionFailure('Connection is not open')

    def begin_transaction(self) -> Transaction:
        self.require_open()
        try:
            return Transaction(self)
        except DriverError as exc:
            raise StatementFailure(f'Could not begin transaction: {exc}') from exc

    def commit(self) -> None:
        self.require_open()
        try:
            self.dbapi_connection.commit()
        except DriverError as exc:
            raise StatementFailure(f'Commit failed: {exc}') from exc

    def get_table_names(self) -> list[str]:
        """Return the table names of the default schema.
        """
        self.require_open()
        try:
            return sa.inspect(self.sa_connection).get_table_names()
        except DriverError as exc:
            raise StatementFailure(f'Could not read table catalog: {exc}') from exc

    def addcall(self, elapsed: float) -> None:
        self.time += elapsed
        self.calls += 1

    def close(self) -> None:
        """Close the connection. Uncommitted work is rolled back by the pool reset.
        """
        if self.sa_connection is None:
            return
        try:
            if not self.sa_connection.closed:
                self.sa_connection.close()
        finally:
            self.sa_connection = None
            self.dbapi_connection = None
            logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s '
                         f'(avg: {self.time/max(1, self.calls):.3f}s per query)')
