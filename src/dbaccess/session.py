"""
Scoped connection/command lifecycle.

    with Session(provider, 'sqlite:///app.db') as session:
        session.prepare('SELECT * FROM t WHERE id = :id', ('id', 1))
        cursor = session.command.execute_reader()

The connection is opened on entry and, together with the command, closed
on every exit path: normal return, early return or exception.
"""
import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Self

from dbaccess.binder import bind_parameters
from dbaccess.exceptions import DriverError

if TYPE_CHECKING:
    from dbaccess.command import Command
    from dbaccess.connection import Connection
    from dbaccess.provider.base import ProviderHandle

logger = logging.getLogger(__name__)


class Session:
    """One connection and, optionally, one command bound to it.

    Args:
        provider: Provider creating the connection and command
        connection_string: Connection string assigned before opening
        with_command: Also create a command bound to the connection
    """

    def __init__(self, provider: 'ProviderHandle', connection_string: str | None,
                 with_command: bool = True) -> None:
        self.provider = provider
        self.connection_string = connection_string
        self.with_command = with_command
        self.connection: Connection | None = None
        self.command: Command | None = None
        self._start = 0.0

    def __enter__(self) -> Self:
        self._start = time.time()
        self.connection = self.provider.new_connection()
        self.connection.connection_string = self.connection_string
        try:
            self.connection.open()
            if self.with_command:
                self.command = self.provider.new_command()
                self.command.connection = self.connection
        except BaseException:
            self.close()
            raise
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def prepare(self, sql: str, params: Sequence[Any] | None = None) -> 'Command':
        """Set the command text and bind its parameters.
        """
        self.command.text = sql
        self.command.parameters.clear()
        bind_parameters(self.command, params)
        return self.command

    def close(self) -> None:
        try:
            if self.command is not None:
                self.command.close()
        finally:
            self.command = None
            if self.connection is not None:
                try:
                    self.connection.close()
                except DriverError as exc:
                    logger.debug(f'Error closing connection: {exc}')
                self.connection = None
                logger.debug(f'Session closed after {time.time() - self._start:.4f}s')
