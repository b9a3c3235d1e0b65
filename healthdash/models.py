from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Annotated, Literal, NamedTuple, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TWO_PLACES = Decimal("0.01")

# --- Categories ---

class Category(str, Enum):
    HYDRATION = "Hydration"
    DIET = "Diet"
    WORKOUT = "Workout"
    SLEEP = "Sleep"
    WEIGHT = "Weight"
    STEPS = "Steps"

    @classmethod
    def parse(cls, name: str) -> "Category":
        for member in cls:
            if member.value.lower() == name.strip().lower():
                return member
        raise ValueError(f"Unknown category: {name}")


class WorkoutKind(str, Enum):
    CARDIO = "Cardio"
    YOGA = "Yoga"
    GYM = "Gym"
    RUNNING = "Running"
    SPORT = "Sport"
    UNKNOWN = "Unknown"

# --- Record Types ---

def _now() -> datetime:
    return datetime.now().replace(microsecond=0)


class _BaseRecord(BaseModel):
    timestamp: datetime = Field(default_factory=_now)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        # stored lines carry neither sub-seconds nor an offset
        if v.tzinfo is not None:
            v = v.astimezone().replace(tzinfo=None)
        if v.year < 1000:
            raise ValueError("year must have four digits")
        return v.replace(microsecond=0)


def _two_places(v: Decimal) -> Decimal:
    try:
        return v.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"value too large: {v}") from None


class WorkoutRecord(_BaseRecord):
    category: Literal[Category.WORKOUT] = Category.WORKOUT
    workout_kind: WorkoutKind = WorkoutKind.UNKNOWN
    duration_minutes: int = Field(ge=0)


# Separator that ends the free-text food item in a stored line.
FOOD_SEPARATOR = ", Quantity: "


class DietRecord(_BaseRecord):
    category: Literal[Category.DIET] = Category.DIET
    food_item: str
    quantity_grams: int = Field(ge=0)

    @field_validator("food_item")
    @classmethod
    def check_food_item(cls, v: str) -> str:
        if "\n" in v or "\r" in v:
            raise ValueError("food item must be a single line")
        if FOOD_SEPARATOR in v:
            raise ValueError(f"food item may not contain {FOOD_SEPARATOR!r}")
        return v


class HydrationRecord(_BaseRecord):
    category: Literal[Category.HYDRATION] = Category.HYDRATION
    liters: Decimal = Field(ge=0)

    @field_validator("liters")
    @classmethod
    def quantize_liters(cls, v: Decimal) -> Decimal:
        return _two_places(v)


class WeightRecord(_BaseRecord):
    category: Literal[Category.WEIGHT] = Category.WEIGHT
    kilograms: Decimal = Field(ge=0)

    @field_validator("kilograms")
    @classmethod
    def quantize_kilograms(cls, v: Decimal) -> Decimal:
        return _two_places(v)


class SleepRecord(_BaseRecord):
    category: Literal[Category.SLEEP] = Category.SLEEP
    duration_minutes: int = Field(ge=0)


class StepsRecord(_BaseRecord):
    category: Literal[Category.STEPS] = Category.STEPS
    count: int = Field(ge=0)


Record = Annotated[
    Union[WorkoutRecord, DietRecord, HydrationRecord, WeightRecord, SleepRecord, StepsRecord],
    Field(discriminator="category"),
]

RECORD_TYPES = {
    Category.WORKOUT: WorkoutRecord,
    Category.DIET: DietRecord,
    Category.HYDRATION: HydrationRecord,
    Category.WEIGHT: WeightRecord,
    Category.SLEEP: SleepRecord,
    Category.STEPS: StepsRecord,
}

record_adapter = TypeAdapter(Record)

# --- Export rows ---

class CsvRow(NamedTuple):
    timestamp: str
    value: str
