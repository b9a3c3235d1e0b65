from datetime import datetime
from typing import Dict, List, Optional, Tuple

from healthdash.errors import NotFoundError
from healthdash.models import Category, record_adapter
from healthdash.storage.recordstore import RecordStore


def build_record(category: Category, at: Optional[datetime] = None, **fields):
    """Validate caller fields into a record; raises pydantic's ValidationError."""
    data = {"category": category, **fields}
    if at is not None:
        data["timestamp"] = at
    return record_adapter.validate_python(data)


def add(store: RecordStore, username: str, category: Category, at: Optional[datetime] = None, **fields):
    rec = build_record(category, at, **fields)
    store.append(username, category, rec)
    return rec


def add_workout(store: RecordStore, username: str, kind, minutes: int, at=None):
    return add(store, username, Category.WORKOUT, at, workout_kind=kind, duration_minutes=minutes)


def add_diet(store: RecordStore, username: str, food_item: str, grams: int, at=None):
    return add(store, username, Category.DIET, at, food_item=food_item, quantity_grams=grams)


def add_hydration(store: RecordStore, username: str, liters, at=None):
    return add(store, username, Category.HYDRATION, at, liters=liters)


def add_weight(store: RecordStore, username: str, kg, at=None):
    return add(store, username, Category.WEIGHT, at, kilograms=kg)


def add_sleep(store: RecordStore, username: str, minutes: int, at=None):
    return add(store, username, Category.SLEEP, at, duration_minutes=minutes)


def add_steps(store: RecordStore, username: str, count: int, at=None):
    return add(store, username, Category.STEPS, at, count=count)


def view_all(store: RecordStore, username: str) -> Dict[Category, List[Tuple[int, str]]]:
    """Every existing record file of a user, in category order."""
    out = {}
    for category in Category:
        try:
            out[category] = list(store.list_all(username, category))
        except NotFoundError:
            continue
    return out
