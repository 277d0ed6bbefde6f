"""
Projection of result rows onto caller-supplied types.

Mapping is a best-effort, name-keyed projection:

- a new default instance of the target type is built for each row
- every settable field whose name exactly matches a column name
  (case-sensitive) receives the raw cell value
- NULL cells leave the field at its default
- fields without a column keep their default, columns without a field
  are ignored

Partial coverage is intended. Pass `strict=True` to require a column
for every field instead.

The settable fields of a type are worked out once and reused for every
row and every later query against the same type. A type can take over
assignment entirely by defining `set_field(name, value)`; it is then
offered every non-null column of the row.
"""
import dataclasses
import inspect
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, TypeVar

from dbaccess.exceptions import MappingError
from dbaccess.schema import ColumnDescriptor

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True, slots=True)
class FieldMap:
    """Settable fields of a target type, in declaration order."""
    target_type: type
    names: tuple[str, ...]
    uses_set_field: bool = False


def _is_public(name: str) -> bool:
    return not name.startswith('_')


def _class_settable_names(target_type: type, instance: Any) -> list[str]:
    """Annotated attributes, class-level defaults, writable properties and
    instance attributes.
    """
    names: dict[str, None] = {}
    for klass in reversed(target_type.__mro__):
        if klass is object:
            continue
        for name in inspect.get_annotations(klass):
            names.setdefault(name)
        for name in vars(klass):
            names.setdefault(name)
    for name in getattr(instance, '__dict__', {}):
        names.setdefault(name)

    settable = []
    for name in names:
        if not _is_public(name):
            continue
        attr = inspect.getattr_static(target_type, name, None)
        if isinstance(attr, property):
            if attr.fset is None:
                continue
        elif callable(attr) or isinstance(attr, (classmethod, staticmethod)):
            continue
        settable.append(name)
    return settable


@lru_cache(maxsize=128)
def field_map(target_type: type) -> FieldMap:
    """Build the field map for a type.

    Raises
        MappingError: If the type cannot be constructed without arguments
        or its instances cannot be assigned to
    """
    try:
        instance = target_type()
    except TypeError as exc:
        raise MappingError(
            f'{target_type.__name__} must be constructible without arguments: {exc}') from exc

    if callable(getattr(instance, 'set_field', None)):
        return FieldMap(target_type, (), uses_set_field=True)

    if dataclasses.is_dataclass(target_type):
        if target_type.__dataclass_params__.frozen:
            raise MappingError(f'{target_type.__name__} is a frozen dataclass')
        names = tuple(f.name for f in dataclasses.fields(target_type) if _is_public(f.name))
    else:
        names = tuple(_class_settable_names(target_type, instance))

    logger.debug(f'Field map for {target_type.__name__}: {names}')
    return FieldMap(target_type, names)


class RowMapper(Generic[T]):
    """Maps DBAPI rows onto new instances of `target_type`.

    Args:
        target_type: Class with a parameterless constructor
        null_marker: Cell value treated as NULL
        strict: Require a matching column for every field
    """

    def __init__(self, target_type: type[T], null_marker: Any = None,
                 strict: bool = False) -> None:
        self.target_type = target_type
        self.null_marker = null_marker
        self.strict = strict
        self.fields = field_map(target_type)

    def positions(self, columns: Sequence[ColumnDescriptor]) -> dict[str, int]:
        """Index of each column name; the first of duplicated names wins.

        Raises
            MappingError: In strict mode, if a field has no column
        """
        positions: dict[str, int] = {}
        for col in columns:
            positions.setdefault(col.name, col.ordinal)

        if self.strict and not self.fields.uses_set_field:
            missing = [name for name in self.fields.names if name not in positions]
            if missing:
                raise MappingError(
                    f'No column for {self.target_type.__name__} fields: {missing}')
        return positions

    def _project(self, row: Sequence[Any], positions: dict[str, int]) -> T:
        instance = self.target_type()

        if self.fields.uses_set_field:
            for name, pos in positions.items():
                value = row[pos]
                if value is not self.null_marker:
                    instance.set_field(name, value)
            return instance

        for name in self.fields.names:
            pos = positions.get(name)
            if pos is None:
                continue
            value = row[pos]
            if value is self.null_marker:
                continue
            setattr(instance, name, value)
        return instance

    def map_row(self, row: Sequence[Any], columns: Sequence[ColumnDescriptor]) -> T:
        """Map one row given the columns of its result set.
        """
        return self._project(row, self.positions(columns))

    def map_rows(self, cursor: Any, columns: Sequence[ColumnDescriptor]) -> Iterator[T]:
        """Map every remaining row of a cursor.
        """
        positions = self.positions(columns)
        while (row := cursor.fetchone()) is not None:
            yield self._project(row, positions)

    def map_one(self, cursor: Any, columns: Sequence[ColumnDescriptor]) -> T | None:
        """Advance the cursor exactly one row and map it; None if there is none.
        """
        positions = self.positions(columns)
        row = cursor.fetchone()
        if row is None:
            return None
        return self._project(row, positions)
