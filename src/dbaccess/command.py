"""
Single SQL statement bound to a connection.
"""
import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING, Any

from dbaccess.exceptions import ConnectionFailure, DriverError
from dbaccess.exceptions import StatementFailure

if TYPE_CHECKING:
    from dbaccess.connection import Connection, Transaction
    from dbaccess.provider.base import ProviderHandle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Parameter:
    """A named query parameter."""
    name: str = ''
    value: Any = None


def dumpsql(func):
    """Decorator for logging SQL, timing it and translating driver errors."""
    @wraps(func)
    def wrapper(self: 'Command', *args: Any, **kwargs: Any):
        self.validate()
        start = time.time()
        logger.debug(f'SQL:\n{self.text}\nparams: {self.parameters}')
        try:
            return func(self, *args, **kwargs)
        except DriverError as exc:
            logger.error(f'Error with query:\nSQL:\n{self.text}\nparams: {self.parameters}')
            raise StatementFailure(str(exc)) from exc
        finally:
            elapsed = time.time() - start
            self.connection.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class Command:
    """A SQL statement, its parameters and the connection it runs on.

    Statements are committed by `finish()` once their result is read,
    unless the command is enlisted in a `Transaction`, in which case the
    transaction owner decides.
    """

    def __init__(self, provider: 'ProviderHandle') -> None:
        self.provider = provider
        self.text = ''
        self.connection: Connection | None = None
        self.transaction: Transaction | None = None
        self.parameters: list[Parameter] = []
        self._cursors: list[Any] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def create_parameter(self) -> Parameter:
        return Parameter()

    def validate(self) -> None:
        if self.connection is None:
            raise ConnectionFailure('Command has no connection')
        self.connection.require_open()
        if not self.text:
            raise StatementFailure('Command has no SQL text')

    def bound_parameters(self) -> dict[str, Any] | None:
        """Parameters in the form the driver accepts, or None when unparameterized.
        """
        if not self.parameters:
            return None
        return self.provider.build_params(self.parameters)

    def _execute(self) -> Any:
        cursor = self.connection.dbapi_connection.cursor()
        self._cursors.append(cursor)
        params = self.bound_parameters()
        if params is None:
            cursor.execute(self.text)
        else:
            cursor.execute(self.text, params)
        return cursor

    @dumpsql
    def execute_non_query(self) -> int:
        """Execute and return the affected-row count reported by the driver.
        """
        cursor = self._execute()
        rowcount = cursor.rowcount
        self.finish()
        logger.debug(f'Statement affected {rowcount} rows')
        return rowcount

    @dumpsql
    def execute_reader(self) -> Any:
        """Execute and return the open DBAPI cursor positioned before the first row.

        Call `finish()` once the rows have been read.
        """
        return self._execute()

    @dumpsql
    def execute_scalar(self) -> Any:
        """Execute and return the first column of the first row, None if no rows.
        """
        cursor = self._execute()
        row = cursor.fetchone() if cursor.description is not None else None
        self.finish()
        if row is None:
            return None
        return row[0]

    def finish(self) -> None:
        """Release the cursors and commit, unless enlisted in a transaction.

        Called once the result has been read, so statements that write
        and return rows (`INSERT ... RETURNING`) keep their changes.
        """
        self.close()
        if self.transaction is None:
            self.connection.commit()

    def close(self) -> None:
        while self._cursors:
            cursor = self._cursors.pop()
            try:
                cursor.close()
            except DriverError as exc:
                logger.debug(f'Error closing cursor: {exc}')
