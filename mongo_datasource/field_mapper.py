"""
Field mapper: project a raw document through caller field mappings.

Coercion per target ``FieldType``:

    TEXT, SINGLE_SELECT                      — unchanged
    NUMBER, CURRENCY, PROGRESS, RATING       — numeric (``None`` when not convertible)
    MULTI_SELECT                             — wrapped into a list
    DATE                                     — temporal → epoch milliseconds
    BARCODE, PHONE, URL                      — text
    CHECKBOX                                 — boolean
    anything else / unset                    — temporal → epoch milliseconds,
                                               otherwise unchanged
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from bson.decimal128 import Decimal128

from field_types import FieldType, is_temporal, to_epoch_millis
from models import FieldMapping, Record

PASSTHROUGH_TYPES = (FieldType.TEXT, FieldType.SINGLE_SELECT)
NUMERIC_TYPES = (FieldType.NUMBER, FieldType.CURRENCY, FieldType.PROGRESS, FieldType.RATING)
TEXT_TYPES = (FieldType.BARCODE, FieldType.PHONE, FieldType.URL)

_INT_PATTERN = re.compile(r"^[+-]?\d+$")


# ---------------------- COERCION ----------------------


def to_number(value: Any) -> Optional[Any]:
    """Best-effort numeric conversion; ``None`` when not convertible."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    if isinstance(value, Decimal):
        return float(value) if value.is_finite() else None
    if is_temporal(value):
        return to_epoch_millis(value)
    if isinstance(value, str):
        text = value.strip()
        if _INT_PATTERN.match(text):
            return int(text)
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
        return float(number) if number.is_finite() else None
    return None


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def to_multi_select(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def coerce_value(value: Any, target_field_type: Optional[int]) -> Any:
    """Coerce *value* for the given target field type code."""
    if target_field_type in PASSTHROUGH_TYPES:
        return value
    if target_field_type in NUMERIC_TYPES:
        return to_number(value)
    if target_field_type == FieldType.MULTI_SELECT:
        return to_multi_select(value)
    if target_field_type in TEXT_TYPES:
        return to_text(value)
    if target_field_type == FieldType.CHECKBOX:
        return bool(value)
    # DATE and every unrecognised code share the same rule.
    if is_temporal(value):
        return to_epoch_millis(value)
    return value


# ---------------------- PROJECTION ----------------------


def lookup_field(doc: Dict[str, Any], path: Optional[str]) -> Any:
    """Return ``doc[path]``, resolving dot-notation into embedded documents
    when no literal key of that name exists."""
    if not path:
        return None
    if path in doc:
        return doc[path]
    if "." not in path:
        return None
    current: Any = doc
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def resolve_source_value(doc: Dict[str, Any], mapping: FieldMapping) -> Any:
    """Look the value up by source field name, then by source field id."""
    value = lookup_field(doc, mapping.source_field_name)
    if value is None:
        value = lookup_field(doc, mapping.source_field_id)
    return value


def map_document(
    doc: Dict[str, Any],
    field_mappings: List[FieldMapping],
    identity_field: str = "_id",
) -> Record:
    """Build a ``Record`` from *doc* using only the enabled mappings."""
    identity = doc.get(identity_field)
    record = Record(primary_id="" if identity is None else str(identity))
    for mapping in field_mappings:
        if not mapping.enabled:
            continue
        value = resolve_source_value(doc, mapping)
        record.data[mapping.source_field_id] = coerce_value(value, mapping.target_field_type)
    return record
