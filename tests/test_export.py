"""Tests for the sleep/weight CSV export."""
from decimal import Decimal

import pytest

from healthdash import export as exporter
from healthdash.domains import tracker as tracker_domain
from healthdash.errors import NotFoundError, StorageError
from healthdash.models import Category, CsvRow
from tests.conftest import TEST_USER


def _write_sleep_file(store, lines):
    path = store.path_for(TEST_USER, Category.SLEEP)
    path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    return path


def test_export_skips_malformed_lines(store, export_dir):
    _write_sleep_file(store, ["Sleep: 480 minutes, DateTime: 2025-02-21 10:45:32", "garbage line"])

    result = exporter.export(store, TEST_USER, Category.SLEEP, export_dir)

    assert result.rows == [CsvRow("2025-02-21 10:45:32", "480")]
    assert result.path == export_dir / "sleep_data.csv"
    assert result.path.read_text(encoding="utf-8") == (
        "DateTime, SleepDuration_minutes\n"
        "2025-02-21 10:45:32,480\n"
    )


def test_weight_export_scenario(store, export_dir, ts):
    tracker_domain.add_weight(store, TEST_USER, Decimal("72.5"), at=ts("2025-03-01 08:00:00"))
    tracker_domain.add_weight(store, TEST_USER, Decimal("70.25"), at=ts("2025-03-02 08:00:00"))

    result = exporter.export(store, TEST_USER, Category.WEIGHT, export_dir)

    assert (export_dir / "weight_data.csv").read_text(encoding="utf-8") == (
        "DateTime, Weight_kg\n"
        "2025-03-01 08:00:00,72.50\n"
        "2025-03-02 08:00:00,70.25\n"
    )
    assert [r.value for r in result.rows] == ["72.50", "70.25"]


def test_export_does_not_touch_source(store, export_dir):
    path = _write_sleep_file(store, [
        "Sleep: 480 minutes, DateTime: 2025-02-21 10:45:32",
        "not a record",
        "Sleep: 400 minutes, DateTime:    2025-02-22 10:45:32",
    ])
    before = path.read_bytes()

    result = exporter.export(store, TEST_USER, Category.SLEEP, export_dir)

    assert path.read_bytes() == before
    assert result.rows[1] == CsvRow("2025-02-22 10:45:32", "400")


def test_export_overwrites_previous_file(store, export_dir):
    target = export_dir / "sleep_data.csv"
    target.write_text("stale\nstale\nstale\n", encoding="utf-8")
    _write_sleep_file(store, [])

    exporter.export(store, TEST_USER, Category.SLEEP, export_dir)

    assert target.read_text(encoding="utf-8") == "DateTime, SleepDuration_minutes\n"


def test_export_missing_source_keeps_old_export(store, export_dir):
    target = export_dir / "weight_data.csv"
    target.write_text("previous\n", encoding="utf-8")

    with pytest.raises(NotFoundError):
        exporter.export(store, TEST_USER, Category.WEIGHT, export_dir)
    assert target.read_text(encoding="utf-8") == "previous\n"


def test_export_unwritable_destination(store, tmp_path):
    _write_sleep_file(store, ["Sleep: 480 minutes, DateTime: 2025-02-21 10:45:32"])
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(StorageError):
        exporter.export(store, TEST_USER, Category.SLEEP, blocker)


@pytest.mark.parametrize("category", [Category.DIET, Category.HYDRATION, Category.WORKOUT, Category.STEPS])
def test_only_sleep_and_weight_export(store, export_dir, category):
    with pytest.raises(ValueError):
        exporter.export(store, TEST_USER, category, export_dir)


def test_export_copies_timestamp_text_as_written(store, export_dir):
    _write_sleep_file(store, ["Sleep: 480 minutes, DateTime: 2025-2-1 9:5:3"])

    result = exporter.export(store, TEST_USER, Category.SLEEP, export_dir)

    assert result.rows == [CsvRow("2025-2-1 9:5:3", "480")]
    assert result.path.read_text(encoding="utf-8").splitlines()[1] == "2025-2-1 9:5:3,480"


def test_export_skips_oversized_weight(store, export_dir):
    path = store.path_for(TEST_USER, Category.WEIGHT)
    path.write_text(
        "Weight: 72.50 kg, DateTime: 2025-03-01 08:00:00\n"
        "Weight: 100000000000000000000000000000 kg, DateTime: 2025-03-02 08:00:00\n",
        encoding="utf-8",
    )

    result = exporter.export(store, TEST_USER, Category.WEIGHT, export_dir)

    assert result.rows == [CsvRow("2025-03-01 08:00:00", "72.50")]
