"""Tests for the uptime views."""
from datetime import date, datetime, timedelta

import pytest

from maxywatch.models import CheckRecord, Incident
from maxywatch.services.uptime import UptimeService, describe_incident, summarize_days, uptime_percent

NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def uptime(store) -> UptimeService:
    return UptimeService(store=store)


class TestUptimePercent:
    def test_no_data_is_healthy(self) -> None:
        assert uptime_percent(0, 0) == 100.0

    def test_rounding(self) -> None:
        assert uptime_percent(2, 3) == 66.67
        assert uptime_percent(1, 3) == 33.33

    def test_all_down(self) -> None:
        assert uptime_percent(0, 5) == 0.0


class TestRollingUptime:
    @pytest.mark.parametrize("hours", [1, 24, 24 * 7, 24 * 30])
    async def test_empty_window(self, uptime, hours) -> None:
        assert await uptime.rolling_uptime(hours, NOW) == 100.0

    async def test_window_excludes_older_records(self, uptime, store) -> None:
        await store.append_check(False, NOW - timedelta(hours=30))
        for minutes, up in [(50, True), (40, True), (30, False), (20, True)]:
            await store.append_check(up, NOW - timedelta(minutes=minutes))

        assert await uptime.rolling_uptime(24, NOW) == 75.0
        assert await uptime.rolling_uptime(48, NOW) == 60.0

    async def test_window_with_only_old_records(self, uptime, store) -> None:
        await store.append_check(False, NOW - timedelta(days=3))
        assert await uptime.rolling_uptime(24, NOW) == 100.0


class TestDailySummary:
    def test_always_thirty_entries_oldest_first(self) -> None:
        summary = summarize_days([], NOW.date())
        assert len(summary) == 30
        assert summary[0].day == date(2026, 9, 20)
        assert summary[-1].day == date(2026, 10, 19)
        assert all(d.uptime == 100.0 and d.checks == 0 for d in summary)

    def test_buckets_by_calendar_day(self) -> None:
        records = [
            CheckRecord(checked_at=datetime(2026, 10, 19, 0, 0, 1), up=True),
            CheckRecord(checked_at=datetime(2026, 10, 18, 23, 59, 59), up=False),
            CheckRecord(checked_at=datetime(2026, 10, 18, 1, 0, 0), up=True),
        ]
        summary = summarize_days(records, NOW.date())
        assert (summary[-1].uptime, summary[-1].checks) == (100.0, 1)
        assert (summary[-2].uptime, summary[-2].checks) == (50.0, 2)

    async def test_five_days_of_data(self, uptime, store) -> None:
        for offset in range(5):
            await store.append_check(True, NOW - timedelta(days=offset))
            await store.append_check(offset != 0, NOW - timedelta(days=offset, minutes=5))

        summary = await uptime.daily_summary(30, NOW)

        assert len(summary) == 30
        empty = [d for d in summary if d.checks == 0]
        assert len(empty) == 25
        assert all(d.uptime == 100.0 for d in empty)
        assert summary[-1].checks == 2
        assert summary[-1].uptime == 50.0
        assert [d.checks for d in summary[-5:]] == [2, 2, 2, 2, 2]

    async def test_records_before_window_are_ignored(self, uptime, store) -> None:
        await store.append_check(False, NOW - timedelta(days=45))
        summary = await uptime.daily_summary(30, NOW)
        assert sum(d.checks for d in summary) == 0


class TestCurrentStatus:
    async def test_down_without_checks(self, uptime) -> None:
        assert await uptime.current_status() == "down"

    async def test_from_last_check(self, uptime, store) -> None:
        await store.append_check(False, NOW - timedelta(minutes=2))
        assert await uptime.current_status() == "down"
        await store.append_check(True, NOW - timedelta(minutes=1))
        assert await uptime.current_status() == "online"

    async def test_override_takes_precedence(self, uptime, store) -> None:
        await store.append_check(True)
        await store.set_status_override("maintenance")
        assert await uptime.current_status() == "maintenance"


class TestIncidentViews:
    async def test_latest_incident(self, uptime, store) -> None:
        assert await uptime.latest_incident() is None
        opened = await store.open_incident(NOW)
        assert (await uptime.latest_incident()).id == opened.id

    def test_describe_incident(self) -> None:
        assert describe_incident(None) == "No incidents recorded"
        ongoing = Incident(id=1, start_ts=NOW, end_ts=None)
        assert describe_incident(ongoing) == "Ongoing since 2026-10-19 12:00:00 UTC"
        closed = Incident(id=1, start_ts=NOW, end_ts=NOW + timedelta(minutes=3))
        assert describe_incident(closed) == (
            "Last incident: 2026-10-19 12:00:00 UTC (ended 2026-10-19 12:03:00 UTC)"
        )

    async def test_health_summary(self, uptime, store) -> None:
        text = await uptime.health_summary("Maxy")
        assert text.splitlines() == [
            "Maxy health summary",
            "24h: 100.0%  •  7d: 100.0%  •  30d: 100.0%",
            "No incidents recorded",
        ]
