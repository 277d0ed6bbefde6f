"""
PostgreSQL provider using psycopg 3.

Named parameters are written `%(name)s` in SQL. Cursor descriptions
carry type OIDs, rendered through psycopg's builtin type registry.
Connection strings must name the driver: `postgresql+psycopg://...`.
"""
import logging
from typing import Any

import psycopg.postgres
from dbaccess.provider.base import ProviderHandle, ProviderId
from dbaccess.provider.base import register_provider

logger = logging.getLogger(__name__)


@register_provider(ProviderId.POSTGRESQL)
class PostgresProvider(ProviderHandle):
    """PostgreSQL through psycopg.
    """

    @property
    def dialect_name(self) -> str:
        return 'postgresql'

    @property
    def driver_name(self) -> str:
        return 'psycopg'

    def declared_type(self, type_code: Any) -> str:
        if type_code is None:
            return ''
        info = psycopg.postgres.types.get(type_code)
        if info is None:
            logger.debug(f'No builtin type for oid {type_code}')
            return str(type_code)
        return info.name
