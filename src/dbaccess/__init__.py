"""
Provider-agnostic relational data access for PostgreSQL and SQLite.

All operations can be called either as:
- DataWorker methods: worker.to_list(Person, sql, 'id', 1)
- Module functions: dbaccess.to_list(worker, Person, sql, 'id', 1)

Parameters are a flat sequence alternating name and value. Every
operation opens and closes its own connection and returns a Result.
"""
__version__ = '0.1.0'

from typing import Any, TypeVar

from dbaccess.binder import bind_parameters
from dbaccess.convert import is_missing, to_datetime, to_decimal, to_float
from dbaccess.convert import to_int
from dbaccess.exceptions import ConnectionFailure, DatabaseError, DriverError
from dbaccess.exceptions import MappingError, OddLengthParameterList
from dbaccess.exceptions import OperationFailure, SchemaUnavailable
from dbaccess.exceptions import StatementFailure, UnknownProvider
from dbaccess.mapper import RowMapper
from dbaccess.options import DataSourceConfig
from dbaccess.provider import ProviderId, register_provider, resolve
from dbaccess.result import Result
from dbaccess.schema import ColumnDescriptor, describe
from dbaccess.session import Session
from dbaccess.worker import DataWorker, connect

T = TypeVar('T')


def test_connection(worker: DataWorker) -> Result[bool]:
    """Check that a connection can be opened.
    """
    return worker.test_connection()


def table_exists(worker: DataWorker, table_name: str) -> Result[bool]:
    """Check the table catalog for an exact table name.
    """
    return worker.table_exists(table_name)


def execute(worker: DataWorker, sql: str, *params: Any) -> Result[bool]:
    """Run a non-query statement; True iff it affected at least one row.
    """
    return worker.execute(sql, *params)


insert_to_table = execute
update_table = execute
delete_from_table = execute
alter_table = execute


def read_scalar(worker: DataWorker, sql: str, *params: Any) -> Result[Any]:
    """Return the first column of the first row.
    """
    return worker.read_scalar(sql, *params)


def read_table(worker: DataWorker, sql: str, *params: Any) -> Result[Any]:
    """Return the whole result set as a table.
    """
    return worker.read_table(sql, *params)


def to_list(worker: DataWorker, target_type: type[T], sql: str, *params: Any,
            strict: bool = False) -> Result[list[T]]:
    """Map every row onto a new instance of target_type.
    """
    return worker.to_list(target_type, sql, *params, strict=strict)


def read_one(worker: DataWorker, target_type: type[T], sql: str, *params: Any,
             strict: bool = False) -> Result[T | None]:
    """Map the first row onto a new instance of target_type.
    """
    return worker.read_one(target_type, sql, *params, strict=strict)


def get_table_column_names(worker: DataWorker, table_name: str) -> Result[list[str] | None]:
    """Return the column names of a table.
    """
    return worker.get_table_column_names(table_name)


def get_column_data_types(worker: DataWorker, table_name: str) -> Result[dict[str, str] | None]:
    """Return the declared column types of a table.
    """
    return worker.get_column_data_types(table_name)


def probe(worker: DataWorker, sql: str, *params: Any) -> Result[int]:
    """Dry-run a statement and return the rows it would affect.
    """
    return worker.probe(sql, *params)


__all__ = [
    'connect',
    'DataWorker',
    'DataSourceConfig',
    'Session',
    'Result',
    'RowMapper',
    'ColumnDescriptor',
    'ProviderId',
    'register_provider',
    'resolve',
    'describe',
    'bind_parameters',
    'test_connection',
    'table_exists',
    'execute',
    'insert_to_table',
    'update_table',
    'delete_from_table',
    'alter_table',
    'read_scalar',
    'read_table',
    'to_list',
    'read_one',
    'get_table_column_names',
    'get_column_data_types',
    'probe',
    'DatabaseError',
    'OperationFailure',
    'UnknownProvider',
    'ConnectionFailure',
    'StatementFailure',
    'OddLengthParameterList',
    'SchemaUnavailable',
    'MappingError',
    'DriverError',
    'is_missing',
    'to_int',
    'to_float',
    'to_decimal',
    'to_datetime',
]
