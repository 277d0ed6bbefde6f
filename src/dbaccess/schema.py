"""
Result-set schema introspection.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from dbaccess.exceptions import DriverError, SchemaUnavailable

if TYPE_CHECKING:
    from dbaccess.provider.base import ProviderHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """Name, position and declared type of one result column.

    Built fresh for every executed query; schemas are not assumed stable
    between statements.
    """
    name: str
    ordinal: int
    declared_type: str = ''

    @staticmethod
    def get_names(columns: list['ColumnDescriptor']) -> list[str]:
        """Get column names from a list of descriptors.
        """
        return [col.name for col in columns]

    @staticmethod
    def get_column_types_dict(columns: list['ColumnDescriptor']) -> dict[str, str]:
        """Get declared types indexed by column name.
        """
        return {col.name: col.declared_type for col in columns}


def describe(cursor: Any, provider: 'ProviderHandle | None' = None) -> list[ColumnDescriptor]:
    """Extract ordered column descriptors from an executed cursor.

    Only the cursor's description is read, so this works before any row
    has been fetched and on result sets with no rows.

    Args:
        cursor: DBAPI cursor after execute
        provider: Provider used to render type codes

    Returns
        Column descriptors in result order

    Raises
        SchemaUnavailable: If the statement produced no result set or the
        metadata cannot be read
    """
    try:
        description = cursor.description
    except DriverError as exc:
        raise SchemaUnavailable(f'Could not read result metadata: {exc}') from exc

    if description is None:
        raise SchemaUnavailable('Statement did not produce a result set')

    columns = []
    for ordinal, item in enumerate(description):
        type_code = item[1] if len(item) > 1 else None
        if provider is not None:
            declared = provider.declared_type(type_code)
        else:
            declared = '' if type_code is None else str(type_code)
        columns.append(ColumnDescriptor(str(item[0]), ordinal, declared))

    logger.debug(f'Result has {len(columns)} columns: {ColumnDescriptor.get_names(columns)}')
    return columns
