"""
Provider registry: resolves driver identifiers to provider handles.
"""
from functools import lru_cache

from dbaccess.exceptions import UnknownProvider
from dbaccess.provider.base import _PROVIDER_REGISTRY
from dbaccess.provider.base import DEFAULT_PROVIDER as DEFAULT_PROVIDER
from dbaccess.provider.base import ProviderHandle as ProviderHandle
from dbaccess.provider.base import ProviderId as ProviderId
from dbaccess.provider.base import register_provider as register_provider
from dbaccess.provider.postgres import PostgresProvider as PostgresProvider
from dbaccess.provider.sqlite import SQLiteProvider as SQLiteProvider


@lru_cache(maxsize=8)
def _get_provider(provider_id: str) -> ProviderHandle:
    """Get cached provider instance for an identifier."""
    if provider_id not in _PROVIDER_REGISTRY:
        raise UnknownProvider(provider_id, get_available_providers())
    return _PROVIDER_REGISTRY[provider_id]()


def resolve(provider_id: str | None = None) -> ProviderHandle:
    """Resolve a provider identifier to its handle.

    An empty or missing identifier resolves to the default provider.

    Raises
        UnknownProvider: If nothing is registered under the identifier
    """
    return _get_provider(str(provider_id or DEFAULT_PROVIDER))


def get_available_providers() -> list[str]:
    """Return list of registered provider identifiers."""
    return list(_PROVIDER_REGISTRY.keys())


def is_supported_provider(provider_id: str) -> bool:
    """Check if a provider identifier is registered."""
    return str(provider_id) in _PROVIDER_REGISTRY
