"""
Base provider interface.

A provider is the pluggable piece that knows one database system: how
to build its connections and commands, what its null marker is, how
parameter names are spelled for its driver, and how to render cursor
type codes. Everything above this layer works with any provider through
this interface.
"""
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from dbaccess.command import Command
from dbaccess.connection import Connection

if TYPE_CHECKING:
    from dbaccess.command import Parameter


class ProviderId(StrEnum):
    """Identifiers of the built-in providers."""
    POSTGRESQL = 'postgresql'
    SQLITE = 'sqlite'


DEFAULT_PROVIDER = ProviderId.POSTGRESQL

# Registry of provider identifier -> provider class
# Defined here to avoid circular imports (concrete providers import from base)
_PROVIDER_REGISTRY: dict[str, type['ProviderHandle']] = {}


def register_provider(provider_id: str):
    """Decorator to register a provider class under an identifier.

    Usage:
        @register_provider(ProviderId.SQLITE)
        class SQLiteProvider(ProviderHandle):
            ...
    """
    def decorator(cls: type['ProviderHandle']) -> type['ProviderHandle']:
        cls.provider_id = provider_id
        _PROVIDER_REGISTRY[str(provider_id)] = cls
        return cls
    return decorator


class ProviderHandle(ABC):
    """Connection and command factory for one database system.
    """

    provider_id: str = ''

    #: Value bound in place of absent parameters and read back for NULL cells
    null_marker: Any = None

    #: Prefixes accepted in front of parameter names and stripped before binding
    parameter_sigils: str = '@:$'

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """SQLAlchemy dialect name the connection string must resolve to."""

    @property
    @abstractmethod
    def driver_name(self) -> str:
        """SQLAlchemy driver name the connection string must resolve to."""

    def new_connection(self) -> Connection:
        return Connection(self)

    def new_command(self) -> Command:
        return Command(self)

    def get_engine_kwargs(self) -> dict[str, Any]:
        """Return extra SQLAlchemy create_engine kwargs."""
        return {}

    def configure_connection(self, dbapi_connection: Any) -> None:
        """Apply provider settings to a freshly opened DBAPI connection."""

    def begin(self, dbapi_connection: Any) -> None:
        """Start a transaction explicitly where the driver would not.

        DBAPI drivers open a transaction implicitly before the first
        statement, so the default does nothing.
        """

    def parameter_name(self, name: Any) -> str:
        """Normalize a caller-supplied parameter name for the driver.
        """
        return str(name).lstrip(self.parameter_sigils)

    def build_params(self, parameters: Sequence['Parameter']) -> dict[str, Any]:
        """Turn bound parameters into the mapping passed to `cursor.execute`.

        Parameters keep their binding order; a name bound twice takes the
        later value, as the driver would see it.
        """
        return {param.name: param.value for param in parameters}

    def quote_identifier(self, identifier: str) -> str:
        """Safely quote a table or column name.
        """
        return '"' + identifier.replace('"', '""') + '"'

    @abstractmethod
    def declared_type(self, type_code: Any) -> str:
        """Render a cursor description type code as a type name.

        Args:
            type_code: Second item of a cursor.description entry

        Returns
            Declared type name, or an empty string when the driver reports none
        """

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.provider_id!r})'
