"""Unit tests for local-time window helpers."""

from datetime import UTC, datetime, time
from zoneinfo import ZoneInfo

from django.test import override_settings

import pytest

from core.services.time_windows import (
    get_zone,
    in_inclusive_window,
    in_wrapping_window,
    local_weekday,
    next_boundary,
)


class TestWindows:
    """Window membership checks."""

    @pytest.mark.parametrize(
        ("moment", "expected"),
        [
            (time(21, 59), False),
            (time(22, 0), True),
            (time(23, 30), True),
            (time(0, 0), True),
            (time(6, 59), True),
            (time(7, 0), False),
            (time(12, 0), False),
        ],
    )
    def test_wrapping_window(self, moment, expected):
        assert in_wrapping_window(moment, time(22, 0), time(7, 0)) is expected

    def test_same_day_window(self):
        assert in_wrapping_window(time(13, 0), time(12, 0), time(14, 0))
        assert not in_wrapping_window(time(14, 0), time(12, 0), time(14, 0))

    def test_equal_bounds_are_empty(self):
        assert not in_wrapping_window(time(9, 0), time(9, 0), time(9, 0))

    def test_inclusive_window_includes_both_ends(self):
        assert in_inclusive_window(time(9, 0), time(9, 0), time(21, 0))
        assert in_inclusive_window(time(21, 0), time(9, 0), time(21, 0))
        assert not in_inclusive_window(time(21, 1), time(9, 0), time(21, 0))


class TestZones:
    """Timezone resolution and boundaries."""

    def test_unknown_zone_falls_back_to_default(self):
        with override_settings(DEFAULT_NOTIFICATION_TIMEZONE="Europe/Berlin"):
            assert get_zone("Mars/Olympus_Mons") == ZoneInfo("Europe/Berlin")

    def test_missing_zone_uses_default(self):
        with override_settings(DEFAULT_NOTIFICATION_TIMEZONE="UTC"):
            assert get_zone(None) == ZoneInfo("UTC")

    def test_next_boundary_rolls_to_tomorrow(self):
        moment = datetime(2024, 3, 6, 8, 0, tzinfo=UTC)

        boundary = next_boundary(moment, time(7, 0), ZoneInfo("UTC"))

        assert boundary == datetime(2024, 3, 7, 7, 0, tzinfo=UTC)

    def test_next_boundary_across_dst_change(self):
        # New York springs forward on 2024-03-10; 07:00 EDT is 11:00 UTC.
        moment = datetime(2024, 3, 10, 3, 0, tzinfo=UTC)

        boundary = next_boundary(moment, time(7, 0), ZoneInfo("America/New_York"))

        assert boundary == datetime(2024, 3, 10, 11, 0, tzinfo=UTC)

    def test_local_weekday_counts_from_sunday(self):
        sunday = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)
        saturday = datetime(2024, 3, 9, 12, 0, tzinfo=UTC)

        assert local_weekday(sunday, ZoneInfo("UTC")) == 0
        assert local_weekday(saturday, ZoneInfo("UTC")) == 6

    def test_local_weekday_uses_local_date(self):
        # Monday 02:00 UTC is still Sunday evening in Los Angeles.
        moment = datetime(2024, 3, 11, 2, 0, tzinfo=UTC)

        assert local_weekday(moment, ZoneInfo("America/Los_Angeles")) == 0
