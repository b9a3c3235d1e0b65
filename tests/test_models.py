from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from healthdash.models import (
    Category,
    DietRecord,
    HydrationRecord,
    SleepRecord,
    WeightRecord,
    WorkoutKind,
    WorkoutRecord,
    record_adapter,
)


def test_decimals_are_kept_to_two_places():
    assert WeightRecord(kilograms="70.255").kilograms == Decimal("70.26")
    assert HydrationRecord(liters="1.5").liters == Decimal("1.50")


def test_timestamp_drops_subseconds():
    rec = SleepRecord(duration_minutes=1, timestamp=datetime(2025, 1, 1, 7, 30, 15, 999999))
    assert rec.timestamp == datetime(2025, 1, 1, 7, 30, 15)


def test_aware_timestamp_becomes_naive():
    rec = SleepRecord(duration_minutes=1, timestamp=datetime(2025, 1, 1, 7, 30, tzinfo=timezone.utc))
    assert rec.timestamp.tzinfo is None


def test_timestamp_defaults_to_now():
    before = datetime.now().replace(microsecond=0)
    rec = SleepRecord(duration_minutes=480)
    assert before <= rec.timestamp <= datetime.now()


@pytest.mark.parametrize("build", [
    lambda: SleepRecord(duration_minutes=-1),
    lambda: WorkoutRecord(workout_kind=WorkoutKind.GYM, duration_minutes="ten"),
    lambda: WeightRecord(kilograms="-72"),
    lambda: HydrationRecord(liters="lots"),
    lambda: DietRecord(food_item="two\nlines", quantity_grams=10),
    lambda: DietRecord(food_item="x, Quantity: 5", quantity_grams=10),
    lambda: DietRecord(food_item="apple", quantity_grams=-3),
])
def test_out_of_range_or_non_numeric_fields_are_rejected(build):
    with pytest.raises(ValidationError):
        build()


def test_adapter_dispatches_on_category():
    rec = record_adapter.validate_python({"category": Category.WORKOUT, "workout_kind": "Running",
                                          "duration_minutes": "30"})
    assert isinstance(rec, WorkoutRecord)
    assert rec.workout_kind is WorkoutKind.RUNNING
    assert rec.duration_minutes == 30


def test_category_parse_is_case_insensitive():
    assert Category.parse("sleep") is Category.SLEEP
    assert Category.parse(" WEIGHT ") is Category.WEIGHT
    with pytest.raises(ValueError):
        Category.parse("mood")


def test_oversized_decimal_is_a_validation_error():
    with pytest.raises(ValidationError):
        WeightRecord(kilograms="1e30")
    with pytest.raises(ValidationError):
        HydrationRecord(liters="100000000000000000000000000000")


def test_years_before_1000_rejected():
    with pytest.raises(ValidationError):
        SleepRecord(duration_minutes=480, timestamp=datetime(999, 12, 31, 23, 0, 0))
