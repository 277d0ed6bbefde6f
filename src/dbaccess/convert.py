"""
Lenient conversion of cell values.

Each helper returns the converted value, or None when the input is
null, empty or not convertible. NumPy scalars, pandas missing values
(NaN, NaT, pd.NA) and strings are all accepted, so values read back
from a DataFrame convert the same way as raw cells.
"""
import datetime
import decimal
import logging
import math
from typing import Any

import dateutil.parser
import numpy as np
import pandas as pd

__all__ = [
    'is_missing',
    'to_int',
    'to_float',
    'to_decimal',
    'to_datetime',
]

logger = logging.getLogger(__name__)


def is_missing(value: Any) -> bool:
    """Check whether a value is null, NaN/NaT or a blank string.

    >>> is_missing(None), is_missing(''), is_missing(float('nan')), is_missing(0)
    (True, True, True, False)
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if pd.api.types.is_scalar(value):
        return bool(pd.isna(value))
    return False


def _as_python(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value


def to_int(value: Any) -> int | None:
    """Convert to int; integral strings only, no truncation of fractions.

    >>> to_int('42'), to_int(' 7 '), to_int('4.2'), to_int(None)
    (42, 7, None, None)
    """
    if is_missing(value) or isinstance(value, bool):
        return None
    value = _as_python(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float | decimal.Decimal):
        if not math.isfinite(value) or value != int(value):
            return None
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def to_float(value: Any) -> float | None:
    """Convert to float; NaN and infinities give None.

    >>> to_float('2.5'), to_float('abc'), to_float(np.float64('nan'))
    (2.5, None, None)
    """
    if is_missing(value) or isinstance(value, bool):
        return None
    try:
        result = float(str(_as_python(value)).strip())
    except ValueError:
        return None
    if not math.isfinite(result):
        return None
    return result


def to_decimal(value: Any) -> decimal.Decimal | None:
    """Convert to Decimal, preserving the digits of the input.

    >>> to_decimal('10.10'), to_decimal('x')
    (Decimal('10.10'), None)
    """
    if is_missing(value) or isinstance(value, bool):
        return None
    try:
        result = decimal.Decimal(str(_as_python(value)).strip())
    except decimal.InvalidOperation:
        return None
    if not result.is_finite():
        return None
    return result


def to_datetime(value: Any) -> datetime.datetime | None:
    """Convert to datetime; strings are parsed with dateutil.

    >>> to_datetime('2024-03-01 10:30')
    datetime.datetime(2024, 3, 1, 10, 30)
    >>> to_datetime(datetime.date(2024, 3, 1))
    datetime.datetime(2024, 3, 1, 0, 0)
    >>> to_datetime('not a date') is None
    True
    """
    if is_missing(value):
        return None
    if isinstance(value, pd.Timestamp | np.datetime64):
        return pd.Timestamp(value).to_pydatetime()
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    try:
        return dateutil.parser.parse(str(value))
    except (ValueError, OverflowError) as exc:
        logger.debug(f'Could not parse {value!r} as datetime: {exc}')
        return None
