from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from macscan_core.diagnostics.backup import backup_age_days, parse_timestamp


@pytest.mark.core
def test_backup_age_rounds_up(now):
    assert backup_age_days((now - timedelta(days=3)).isoformat(), now) == 3
    assert backup_age_days((now - timedelta(days=3, seconds=1)).isoformat(), now) == 4
    assert backup_age_days(now.isoformat(), now) == 0


@pytest.mark.core
def test_backup_age_uses_absolute_difference(now):
    assert backup_age_days((now + timedelta(hours=2)).isoformat(), now) == 1


@pytest.mark.core
@pytest.mark.parametrize("value", ["Never", "Unknown", "", "yesterday", None, 12])
def test_backup_age_unparseable_is_zero(value, now):
    assert backup_age_days(value, now) == 0


@pytest.mark.core
def test_parse_timestamp_formats():
    expected = datetime(2026, 1, 20, 8, 30, tzinfo=timezone.utc)
    assert parse_timestamp("2026-01-20T08:30:00Z") == expected
    assert parse_timestamp("2026-01-20T08:30:00+00:00") == expected
    assert parse_timestamp("2026-01-20T08:30:00") == expected
    assert parse_timestamp("2026-01-20 08:30:00 +0000") == expected
    assert parse_timestamp("2026-01-20-083000") == expected
    assert parse_timestamp("2026-01-20") == datetime(2026, 1, 20, tzinfo=timezone.utc)


@pytest.mark.core
def test_parse_timestamp_normalizes_offsets():
    parsed = parse_timestamp("2026-01-20T10:30:00+02:00")
    assert parsed == datetime(2026, 1, 20, 8, 30, tzinfo=timezone.utc)


@pytest.mark.core
def test_backup_age_accepts_naive_now():
    naive_now = datetime(2026, 1, 27, 12, 0)
    assert backup_age_days("2026-01-17T12:00:00Z", naive_now) == 10


@pytest.mark.core
@pytest.mark.parametrize(
    "value", ["0001-01-01T00:00:00+14:00", "9999-12-31T23:00:00-14:00"]
)
def test_out_of_range_offsets_are_unparseable(value, now):
    assert parse_timestamp(value) is None
    assert backup_age_days(value, now) == 0
