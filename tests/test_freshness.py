from datetime import datetime, timedelta, timezone

import pytest

from fxdash.services.rates.freshness import needs_refresh, parse_timestamp

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "age",
    [timedelta(0), timedelta(minutes=1), timedelta(hours=23, minutes=59, seconds=59)],
)
def test_recent_rows_are_fresh(age):
    assert needs_refresh(NOW - age, NOW) is False


@pytest.mark.parametrize("age", [timedelta(hours=24), timedelta(hours=25), timedelta(days=30)])
def test_rows_at_least_a_day_old_are_stale(age):
    assert needs_refresh(NOW - age, NOW) is True


def test_exact_boundary_is_stale():
    assert needs_refresh("2024-05-09T12:00:00+00:00", NOW) is True
    assert needs_refresh("2024-05-09T12:00:01+00:00", NOW) is False


def test_iso_strings_with_z_suffix_and_naive_values_are_utc():
    assert needs_refresh("2024-05-10T11:00:00Z", NOW) is False
    assert needs_refresh(datetime(2024, 5, 10, 11, 0), NOW) is False
    assert parse_timestamp("2024-05-10T11:00:00.123Z") == datetime(
        2024, 5, 10, 11, 0, 0, 123000, tzinfo=timezone.utc
    )


def test_offsets_are_normalized():
    # 13:30 at +02:00 is 11:30 UTC
    assert parse_timestamp("2024-05-10T13:30:00+02:00") == datetime(
        2024, 5, 10, 11, 30, tzinfo=timezone.utc
    )


@pytest.mark.parametrize("value", [None, "", "yesterday", "2024-13-45", 12345])
def test_missing_or_unparsable_timestamps_are_stale(value):
    assert needs_refresh(value, NOW) is True


def test_custom_max_age():
    assert needs_refresh(NOW - timedelta(minutes=10), NOW, timedelta(minutes=5)) is True
    assert needs_refresh(NOW - timedelta(minutes=4), NOW, timedelta(minutes=5)) is False
