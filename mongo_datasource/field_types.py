"""
Field-type codes and runtime value classification.

``FieldType`` is the integer enumeration exposed to table consumers; its
values are published and must never be renumbered.

``classify_value`` maps one raw BSON-decoded value onto the closed
``ValueCategory`` set used by schema inference:

    NULL        — ``None``
    SEQUENCE    — list / tuple
    TEMPORAL    — datetime, date, BSON Timestamp
    BOOLEAN     — bool
    NUMERIC     — int, float, Decimal, Decimal128
    TEXT        — str
    STRUCTURED  — embedded documents and anything else (ObjectId, binary, …)
"""

import calendar
import datetime as _dt
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Optional

from bson.decimal128 import Decimal128
from bson.timestamp import Timestamp


class FieldType(IntEnum):
    TEXT = 1
    NUMBER = 2
    SINGLE_SELECT = 3
    MULTI_SELECT = 4
    DATE = 5
    BARCODE = 6
    CHECKBOX = 7
    CURRENCY = 8
    PHONE = 9
    URL = 10
    PROGRESS = 11
    RATING = 12
    OBJECT = 13
    ARRAY = 14


class ValueCategory(Enum):
    NULL = "null"
    SEQUENCE = "sequence"
    TEMPORAL = "temporal"
    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    TEXT = "text"
    STRUCTURED = "structured"


CATEGORY_FIELD_TYPES = {
    ValueCategory.TEXT: FieldType.TEXT,
    ValueCategory.NUMERIC: FieldType.NUMBER,
    ValueCategory.BOOLEAN: FieldType.CHECKBOX,
    ValueCategory.TEMPORAL: FieldType.DATE,
    ValueCategory.STRUCTURED: FieldType.OBJECT,
    ValueCategory.SEQUENCE: FieldType.ARRAY,
}


def is_temporal(value: Any) -> bool:
    return isinstance(value, (_dt.datetime, _dt.date, Timestamp))


def classify_value(value: Any) -> ValueCategory:
    """Classify a single value. Order matters: sequences and temporals are
    checked before primitives, and bool before int (bool subclasses int)."""
    if value is None:
        return ValueCategory.NULL
    if isinstance(value, (list, tuple)):
        return ValueCategory.SEQUENCE
    if is_temporal(value):
        return ValueCategory.TEMPORAL
    if isinstance(value, bool):
        return ValueCategory.BOOLEAN
    if isinstance(value, (int, float, Decimal, Decimal128)):
        return ValueCategory.NUMERIC
    if isinstance(value, str):
        return ValueCategory.TEXT
    return ValueCategory.STRUCTURED


def field_type_for_category(category: Optional[ValueCategory]) -> FieldType:
    """Unmapped categories (a field only ever seen as null) become OBJECT."""
    return CATEGORY_FIELD_TYPES.get(category, FieldType.OBJECT)


def to_epoch_millis(value: Any) -> int:
    """Convert a temporal value to integer milliseconds since the Unix epoch.

    Naive datetimes are UTC, which is how pymongo decodes BSON dates.
    """
    if isinstance(value, Timestamp):
        return value.time * 1000
    if isinstance(value, _dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(_dt.timezone.utc)
        return calendar.timegm(value.timetuple()) * 1000 + value.microsecond // 1000
    if isinstance(value, _dt.date):
        return calendar.timegm(value.timetuple()) * 1000
    raise TypeError(f"Not a temporal value: {type(value).__name__}")
