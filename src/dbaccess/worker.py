"""
Data access object.

A `DataWorker` holds a data source configuration and the provider
resolved for it. Each operation opens its own session, runs one
statement and closes the session before returning, so nothing but the
configuration is shared between calls.

Every operation returns a `Result`. When the database cannot be reached
or rejects the statement, the Result carries the error and the
operation's fallback value:

=========================  ==================
operation                  fallback value
=========================  ==================
test_connection            False
table_exists               False
execute (and aliases)      False
read_scalar                None
read_table                 empty table
to_list                    []
read_one                   None
get_table_column_names     None
get_column_data_types      None
probe                      -1
=========================  ==================

Caller mistakes (odd-length parameter lists, unmappable target types)
raise instead.
"""
import logging
from collections.abc import Callable
from dataclasses import fields, replace
from functools import wraps
from typing import Any, TypeVar

from dbaccess.exceptions import OperationFailure, StatementFailure
from dbaccess.mapper import RowMapper
from dbaccess.options import DataSourceConfig
from dbaccess.provider import resolve
from dbaccess.result import Result
from dbaccess.schema import ColumnDescriptor, describe
from dbaccess.session import Session

from libb import load_options

logger = logging.getLogger(__name__)

T = TypeVar('T')


def fallback(default: Any):
    """Wrap an operation's return value in a Result, degrading failures.

    Args:
        default: Value carried on failure, or a callable taking the
            worker and returning it
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Result]:
        @wraps(func)
        def inner(self: 'DataWorker', *args: Any, **kwargs: Any) -> Result:
            try:
                value = func(self, *args, **kwargs)
            except OperationFailure as exc:
                logger.error(f'{func.__name__} failed: {exc}')
                value = default(self) if callable(default) else default
                return Result(value, error=exc)
            if isinstance(value, Result):
                return value
            return Result(value)
        return inner
    return decorator


class DataWorker:
    """Provider-agnostic access to one relational data source.

    Args:
        connection_string: SQLAlchemy URL of the database
        provider_id: Registered provider identifier, defaults to `postgresql`
        **kw: Further DataSourceConfig fields (e.g. `data_loader`)

    Raises
        UnknownProvider: If `provider_id` is not registered

    Parameters are passed as a flat sequence alternating name and value:

        worker.to_list(Person, 'SELECT * FROM person WHERE name = :name', 'name', 'Ada')
    """

    def __init__(self, connection_string: str | None = None,
                 provider_id: str | None = None, **kw: Any) -> None:
        self.options = DataSourceConfig(connection_string=connection_string,
                                        provider_id=provider_id, **kw)
        self.provider = resolve(self.options.provider_id)
        logger.debug(f'Resolved provider {self.provider!r}')

    @classmethod
    def from_options(cls, options: DataSourceConfig) -> 'DataWorker':
        return cls(**{f.name: getattr(options, f.name) for f in fields(options)})

    @property
    def connection_string(self) -> str | None:
        return self.options.connection_string

    @property
    def provider_id(self) -> str:
        return self.options.provider_id

    def session(self, with_command: bool = True) -> Session:
        return Session(self.provider, self.connection_string, with_command=with_command)

    def __repr__(self) -> str:
        return f'DataWorker(provider_id={self.provider_id!r})'

    @fallback(False)
    def test_connection(self) -> bool:
        """Open and close a connection.
        """
        with self.session(with_command=False):
            return True

    @fallback(False)
    def table_exists(self, table_name: str) -> bool:
        """Check the table catalog for an exact table name.
        """
        with self.session(with_command=False) as session:
            return table_name in session.connection.get_table_names()

    @fallback(False)
    def execute(self, sql: str, *params: Any) -> bool:
        """Run a non-query statement; True iff it affected at least one row.

        DDL statements report no affected rows on most drivers and so
        return False even when they succeed; check `Result.ok` for those.
        """
        with self.session() as session:
            session.prepare(sql, params)
            return session.command.execute_non_query() > 0

    insert_to_table = execute
    update_table = execute
    delete_from_table = execute
    alter_table = execute

    @fallback(None)
    def read_scalar(self, sql: str, *params: Any) -> Any:
        """First column of the first row; None if the query returned no rows.
        """
        with self.session() as session:
            session.prepare(sql, params)
            return session.command.execute_scalar()

    @fallback(lambda self: self.options.data_loader([], []))
    def read_table(self, sql: str, *params: Any) -> Any:
        """Load the whole result set with the configured data loader.
        """
        with self.session() as session:
            session.prepare(sql, params)
            cursor = session.command.execute_reader()
            columns = describe(cursor, self.provider)
            names = ColumnDescriptor.get_names(columns)
            data = [dict(zip(names, row)) for row in cursor.fetchall()]
            session.command.finish()
            logger.debug(f'read_table returned {len(data)} rows')
            return self.options.data_loader(data, columns)

    def _mapper(self, target_type: type[T], strict: bool) -> RowMapper[T]:
        return RowMapper(target_type, null_marker=self.provider.null_marker, strict=strict)

    @fallback(lambda self: [])
    def to_list(self, target_type: type[T], sql: str, *params: Any,
                strict: bool = False) -> list[T]:
        """Map every row of the result onto a new `target_type` instance.
        """
        mapper = self._mapper(target_type, strict)
        with self.session() as session:
            session.prepare(sql, params)
            cursor = session.command.execute_reader()
            columns = describe(cursor, self.provider)
            items = list(mapper.map_rows(cursor, columns))
            session.command.finish()
            return items

    @fallback(None)
    def read_one(self, target_type: type[T], sql: str, *params: Any,
                 strict: bool = False) -> T | None:
        """Map the first row of the result; None if there are no rows.

        Rows after the first are never read.
        """
        mapper = self._mapper(target_type, strict)
        with self.session() as session:
            session.prepare(sql, params)
            cursor = session.command.execute_reader()
            columns = describe(cursor, self.provider)
            item = mapper.map_one(cursor, columns)
            session.command.finish()
            return item

    def _describe_table(self, table_name: str) -> list[ColumnDescriptor]:
        with self.session() as session:
            session.prepare(f'SELECT * FROM {self.provider.quote_identifier(table_name)}')
            cursor = session.command.execute_reader()
            return describe(cursor, self.provider)

    @fallback(None)
    def get_table_column_names(self, table_name: str) -> list[str]:
        """Column names of a table in their defined order.
        """
        return ColumnDescriptor.get_names(self._describe_table(table_name))

    @fallback(None)
    def get_column_data_types(self, table_name: str) -> dict[str, str]:
        """Declared type of each column of a table, keyed by column name.
        """
        return ColumnDescriptor.get_column_types_dict(self._describe_table(table_name))

    @fallback(-1)
    def probe(self, sql: str, *params: Any) -> Result[int]:
        """Dry-run a statement: execute it in a transaction that is always rolled back.

        Returns the affected-row count the statement reported. Nothing is
        ever committed, even when the statement succeeds. A failed
        rollback is logged and recorded as `rollback_error` without
        changing the count.
        """
        with self.session() as session:
            transaction = session.connection.begin_transaction()
            session.command.transaction = transaction
            session.prepare(sql, params)
            try:
                rowcount = session.command.execute_non_query()
            except StatementFailure:
                self._rollback(transaction)
                raise
            rollback_error = self._rollback(transaction)
            return Result(rowcount, rollback_error=rollback_error)

    @staticmethod
    def _rollback(transaction) -> StatementFailure | None:
        try:
            transaction.rollback()
        except StatementFailure as exc:
            logger.error(f'Rollback failed: {exc}')
            return exc
        logger.warning('Rolled back dry-run transaction')
        return None


_options_from_config = load_options(cls=DataSourceConfig)(lambda options, config: options)


def connect(options: DataSourceConfig | dict[str, Any] | str | None = None,
            config: Any | None = None, **kw: Any) -> DataWorker:
    """Create a DataWorker from configuration.

    `options` is a ready DataSourceConfig, a dict of its fields, or the
    name of a settings section in `config`. Keyword arguments fill in or
    replace single fields:

        worker = connect({'connection_string': url}, provider_id='sqlite')

    Raises
        UnknownProvider: If the configured provider is not registered
    """
    if options is None:
        options = DataSourceConfig(**kw)
    elif isinstance(options, DataSourceConfig):
        options = replace(options, **kw)
    elif isinstance(options, dict):
        options = DataSourceConfig(**(options | kw))
    else:
        options = _options_from_config(options, config, **kw)
    return DataWorker.from_options(options)
