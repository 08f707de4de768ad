import datetime as dt
from decimal import Decimal

import pytest
from bson import ObjectId
from bson.decimal128 import Decimal128
from bson.timestamp import Timestamp

from field_types import (
    FieldType,
    ValueCategory,
    classify_value,
    field_type_for_category,
    to_epoch_millis,
)


def test_field_type_codes_are_stable():
    assert [t.value for t in FieldType] == list(range(1, 15))
    assert FieldType.MULTI_SELECT == 4
    assert FieldType.CHECKBOX == 7
    assert FieldType.OBJECT == 13
    assert FieldType.ARRAY == 14


@pytest.mark.parametrize("value,expected", [
    (None, ValueCategory.NULL),
    ([1, 2], ValueCategory.SEQUENCE),
    ((), ValueCategory.SEQUENCE),
    (dt.datetime(2024, 1, 1), ValueCategory.TEMPORAL),
    (dt.date(2024, 1, 1), ValueCategory.TEMPORAL),
    (Timestamp(1700000000, 1), ValueCategory.TEMPORAL),
    (True, ValueCategory.BOOLEAN),
    (0, ValueCategory.NUMERIC),
    (2.5, ValueCategory.NUMERIC),
    (Decimal("1.10"), ValueCategory.NUMERIC),
    (Decimal128("9.99"), ValueCategory.NUMERIC),
    ("hello", ValueCategory.TEXT),
    ({"a": 1}, ValueCategory.STRUCTURED),
    (ObjectId(), ValueCategory.STRUCTURED),
])
def test_classify_value(value, expected):
    assert classify_value(value) is expected


def test_category_mapping_defaults_to_object():
    assert field_type_for_category(ValueCategory.TEXT) == FieldType.TEXT
    assert field_type_for_category(ValueCategory.BOOLEAN) == FieldType.CHECKBOX
    assert field_type_for_category(ValueCategory.SEQUENCE) == FieldType.ARRAY
    assert field_type_for_category(ValueCategory.NULL) == FieldType.OBJECT
    assert field_type_for_category(None) == FieldType.OBJECT


class TestEpochMillis:
    def test_naive_datetime_is_utc(self):
        assert to_epoch_millis(dt.datetime(1970, 1, 1, 0, 0, 1, 500000)) == 1500

    def test_aware_datetime(self):
        tz = dt.timezone(dt.timedelta(hours=8))
        assert to_epoch_millis(dt.datetime(1970, 1, 1, 8, 0, tzinfo=tz)) == 0

    def test_date_and_timestamp(self):
        assert to_epoch_millis(dt.date(1970, 1, 2)) == 86_400_000
        assert to_epoch_millis(Timestamp(10, 0)) == 10_000

    def test_rejects_non_temporal(self):
        with pytest.raises(TypeError):
            to_epoch_millis("2024-01-01")
