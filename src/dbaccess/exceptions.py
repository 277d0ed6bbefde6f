"""
Data access exception classes.
"""
import sqlite3

import psycopg
import sqlalchemy as sa


class DatabaseError(Exception):
    """Base class for all data access errors.
    """


class UnknownProvider(DatabaseError, LookupError):
    """No provider is registered under the requested identifier.
    """

    def __init__(self, provider_id: str, available: list[str] | None = None) -> None:
        self.provider_id = provider_id
        self.available = available or []
        super().__init__(f'Unknown provider: {provider_id!r}. Available: {self.available}')


class OddLengthParameterList(DatabaseError, ValueError):
    """Parameter sequence is not a flat list of name/value pairs.
    """

    def __init__(self, length: int) -> None:
        self.length = length
        super().__init__(f'Expected alternating name/value pairs, got {length} items')


class MappingError(DatabaseError, TypeError):
    """Target type cannot receive mapped column values.
    """


class OperationFailure(DatabaseError):
    """Failure raised while talking to the database.

    Public operations degrade these to a failed Result.
    """


class ConnectionFailure(OperationFailure):
    """Error opening a connection to the database.
    """


class StatementFailure(OperationFailure):
    """Driver reported an error executing a statement.
    """


class SchemaUnavailable(OperationFailure):
    """Cursor carries no readable result-set metadata.
    """


DriverError = (
    sqlite3.Error,
    psycopg.Error,
    sa.exc.SQLAlchemyError,
    )
