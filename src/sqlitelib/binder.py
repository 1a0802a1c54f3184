"""Value binding: turn a live object's field values into SQLite parameters.

Each field is read through its getter. A getter raising AttributeError or
KeyError means the field is absent, which is not the same as a field whose
value is None:

- None binds NULL for every scalar field type
- an absent STRING field binds NULL
- any other absent field is unreadable and raises BindError
"""

import datetime
import numbers
import operator
from typing import Any, Callable

import numpy as np
import pandas as pd

from .exceptions import BindError
from .fields import FieldType, SQLiteField


class _Missing:
    """Marker for a field the object does not expose."""

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()

# SQLite INTEGER is a signed 64-bit value
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1


def read_value(field: SQLiteField, obj: Any) -> Any:
    """
    Read the value of ``field`` from ``obj``.

    Returns:
        The value (possibly None), or MISSING if the field is absent
    """
    try:
        return field.getter(obj)
    except (AttributeError, KeyError):
        return MISSING


def _mismatch(field: SQLiteField, value: Any, expected: str) -> BindError:
    return BindError(
        f"Field '{field.name}' is declared {field.type.name} but holds "
        f"{type(value).__name__} value {value!r} (expected {expected})"
    )


def bind_boolean(field: SQLiteField, value: Any) -> int:
    """Booleans are stored as 0/1 integers."""
    if isinstance(value, (bool, np.bool_)):
        return 1 if value else 0
    if isinstance(value, numbers.Integral):
        return 1 if int(value) else 0
    raise _mismatch(field, value, "a bool")


def bind_integer(field: SQLiteField, value: Any) -> int:
    if isinstance(value, np.bool_):
        return int(value)
    try:
        value = operator.index(value)
    except TypeError:
        raise _mismatch(field, value, "an integer") from None
    if not INTEGER_MIN <= value <= INTEGER_MAX:
        raise _mismatch(field, value, "a 64-bit integer")
    return value


def bind_float(field: SQLiteField, value: Any) -> float:
    if isinstance(value, numbers.Real):
        return float(value)
    raise _mismatch(field, value, "a real number")


def bind_string(field: SQLiteField, value: Any) -> str:
    if not isinstance(value, str):
        raise _mismatch(field, value, "a str")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise _mismatch(field, value, "UTF-8 encodable text") from None
    return str(value)


def bind_datetime(field: SQLiteField, value: Any) -> str | None:
    """
    Datetimes are stored as ISO-8601 text.

    Accepts datetime.datetime, datetime.date, pandas.Timestamp and
    numpy.datetime64. NaT binds NULL.
    """
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        value = pd.Timestamp(value)
    if value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    raise _mismatch(field, value, "a datetime")


_BINDERS: dict[FieldType, Callable[[SQLiteField, Any], Any]] = {
    FieldType.BOOLEAN: bind_boolean,
    FieldType.INTEGER: bind_integer,
    FieldType.FLOAT: bind_float,
    FieldType.STRING: bind_string,
    FieldType.DATETIME: bind_datetime,
}


def bind_value(field: SQLiteField, obj: Any) -> Any:
    """
    Convert one field of ``obj`` into a SQLite parameter value.

    Raises:
        BindError: If the field is unreadable or holds a value of the wrong kind
    """
    binder = _BINDERS.get(field.type)
    if binder is None:
        raise BindError(f"Field '{field.name}' of type {field.type.name} has no column")

    value = read_value(field, obj)
    if value is MISSING:
        if field.type is FieldType.STRING:
            return None
        raise BindError(
            f"Field '{field.name}' cannot be read from {type(obj).__name__}"
        )
    if value is None:
        return None
    return binder(field, value)


def bind_parameters(fields: tuple[SQLiteField, ...] | list[SQLiteField], obj: Any) -> list:
    """
    Positional parameters for ``obj``, in field declaration order.

    ARRAY fields have no column and are skipped.

    Args:
        fields: The type's field descriptors
        obj: The instance being inserted

    Returns:
        list of values ready for sqlite3 (int, float, str or None)
    """
    return [bind_value(f, obj) for f in fields if f.type is not FieldType.ARRAY]


def relation_items(field: SQLiteField, obj: Any) -> list:
    """
    The nested objects held by a relation field.

    An absent or None value means no nested objects.

    Raises:
        BindError: If the value is not a sequence of item_class instances
    """
    items = read_value(field, obj)
    if items is MISSING or items is None:
        return []
    if isinstance(items, (str, bytes)) or not hasattr(items, "__iter__"):
        raise _mismatch(field, items, "a sequence of nested objects")

    items = list(items)
    item_class = field.item_class
    for item in items:
        if not isinstance(item, item_class):
            raise BindError(
                f"Field '{field.name}' holds {type(item).__name__}, "
                f"expected {item_class.__name__} items"
            )
    return items
