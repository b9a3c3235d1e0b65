"""
Line codec for stored records.

Every category has a fixed one-line template ending in ``DateTime: ...``.
Decoding anchors on the literal separators of the template, so a free-text
field may hold commas and colons as long as it does not contain the
separator that follows it.
"""
import re
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import ValidationError

from healthdash.errors import ParseError
from healthdash.models import RECORD_TYPES, TIMESTAMP_FORMAT, Category

_INT = r"-?\d+"
_DECIMAL = r"-?\d+(?:\.\d+)?"
_DATETIME = r", DateTime:\s*(?P<timestamp>.*?)\s*"

TEMPLATES = {
    Category.WORKOUT: "Workout: {workout_kind}, Duration: {duration_minutes} minutes, DateTime: {timestamp}",
    Category.DIET: "Food: {food_item}, Quantity: {quantity_grams} grams, DateTime: {timestamp}",
    Category.HYDRATION: "Hydration: {liters} liters, DateTime: {timestamp}",
    Category.WEIGHT: "Weight: {kilograms} kg, DateTime: {timestamp}",
    Category.SLEEP: "Sleep: {duration_minutes} minutes, DateTime: {timestamp}",
    Category.STEPS: "Steps: {count} steps, DateTime: {timestamp}",
}

PATTERNS = {
    Category.WORKOUT: re.compile(
        rf"Workout: (?P<workout_kind>[^,]*), Duration: (?P<duration_minutes>{_INT}) minutes{_DATETIME}"
    ),
    Category.DIET: re.compile(
        rf"Food: (?P<food_item>.*?), Quantity: (?P<quantity_grams>{_INT}) grams{_DATETIME}"
    ),
    Category.HYDRATION: re.compile(rf"Hydration: (?P<liters>{_DECIMAL}) liters{_DATETIME}"),
    Category.WEIGHT: re.compile(rf"Weight: (?P<kilograms>{_DECIMAL}) kg{_DATETIME}"),
    Category.SLEEP: re.compile(rf"Sleep: (?P<duration_minutes>{_INT}) minutes{_DATETIME}"),
    Category.STEPS: re.compile(rf"Steps: (?P<count>{_INT}) steps{_DATETIME}"),
}


def _render(value) -> str:
    if isinstance(value, datetime):
        return value.strftime(TIMESTAMP_FORMAT)
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def encode(record) -> str:
    """Render ``record`` as a single line, without a line terminator."""
    template = TEMPLATES[record.category]
    fields = {name: _render(getattr(record, name)) for name in type(record).model_fields}
    return template.format(**fields)


def decode(line: str, category: Category):
    """
    Parse one stored line of ``category`` back into a record.

    Raises ParseError for anything that is not a well-formed line of that
    category: wrong template, out-of-range numbers or a bad timestamp.
    """
    return decode_with_timestamp(line, category)[0]


def decode_with_timestamp(line: str, category: Category):
    """Like decode, but also return the timestamp text as written (trimmed)."""
    match = PATTERNS[category].fullmatch(line.rstrip("\r\n"))
    if match is None:
        raise ParseError(category, line, "template mismatch")

    fields = match.groupdict()
    raw_timestamp = fields["timestamp"]
    try:
        fields["timestamp"] = datetime.strptime(raw_timestamp, TIMESTAMP_FORMAT)
    except ValueError as e:
        raise ParseError(category, line, str(e)) from e

    try:
        record = RECORD_TYPES[category].model_validate(fields)
    except ValidationError as e:
        raise ParseError(category, line, f"{e.error_count()} invalid field(s)") from e
    return record, raw_timestamp
