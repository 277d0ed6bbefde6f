"""
SQLite provider.

SQLite specifics handled here:
- The sqlite3 module does not report column types in cursor.description
- Legacy transaction control only opens a transaction before DML, so an
  explicit BEGIN is issued to cover DDL as well
- Named parameters are written `:name` in SQL
"""
import sqlite3
from typing import Any

from dbaccess.provider.base import ProviderHandle, ProviderId
from dbaccess.provider.base import register_provider


@register_provider(ProviderId.SQLITE)
class SQLiteProvider(ProviderHandle):
    """SQLite through the standard library sqlite3 driver.
    """

    @property
    def dialect_name(self) -> str:
        return 'sqlite'

    @property
    def driver_name(self) -> str:
        return 'pysqlite'

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            'connect_args': {
                'detect_types': sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES
            }
        }

    def begin(self, dbapi_connection: Any) -> None:
        if dbapi_connection.in_transaction:
            return
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute('BEGIN')
        finally:
            cursor.close()

    def declared_type(self, type_code: Any) -> str:
        if type_code is None:
            return ''
        return str(type_code)
