"""Uptime views derived from the check log. Read-only."""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from ..models import CheckRecord, Incident
from .store import MonitorStore, monitor_store


@dataclass
class DailyUptime:
    """Uptime for one UTC calendar day."""
    day: date
    uptime: float
    checks: int


def uptime_percent(up_count: int, total: int) -> float:
    """Percentage of up checks, 100.0 when there are none."""
    if total == 0:
        return 100.0
    return round(up_count / total * 100, 2)


def summarize_days(records: Iterable[CheckRecord], today: date, days: int = 30) -> List[DailyUptime]:
    """Bucket records per UTC day for the ``days`` days ending ``today``, oldest first.

    Days without checks are reported as 100% with 0 checks.
    """
    buckets = {}
    for record in records:
        day = record.checked_at.date()
        up, total = buckets.get(day, (0, 0))
        buckets[day] = (up + (1 if record.up else 0), total + 1)

    summary = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        up, total = buckets.get(day, (0, 0))
        summary.append(DailyUptime(day=day, uptime=uptime_percent(up, total), checks=total))
    return summary


def _format_ts(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%d %H:%M:%S UTC")


def describe_incident(incident: Optional[Incident]) -> str:
    if incident is None:
        return "No incidents recorded"
    if incident.end_ts is None:
        return f"Ongoing since {_format_ts(incident.start_ts)}"
    return f"Last incident: {_format_ts(incident.start_ts)} (ended {_format_ts(incident.end_ts)})"


class UptimeService:
    """Status and uptime queries for the dashboard."""

    def __init__(self, store: Optional[MonitorStore] = None):
        self.store = store or monitor_store

    async def rolling_uptime(self, hours: float, now: Optional[datetime] = None) -> float:
        """Uptime percentage over the trailing ``hours``."""
        since = (now or datetime.utcnow()) - timedelta(hours=hours)
        records = await self.store.get_checks_since(since)
        up_count = sum(1 for r in records if r.up)
        return uptime_percent(up_count, len(records))

    async def daily_summary(self, days: int = 30, now: Optional[datetime] = None) -> List[DailyUptime]:
        today = (now or datetime.utcnow()).date()
        first_day = today - timedelta(days=days - 1)
        records = await self.store.get_checks_since(datetime.combine(first_day, datetime.min.time()))
        return summarize_days(records, today, days)

    async def latest_incident(self) -> Optional[Incident]:
        return await self.store.get_latest_incident()

    async def current_status(self) -> str:
        """Status override if set, otherwise derived from the last check."""
        config = await self.store.get_settings()
        if config.status_override:
            return config.status_override
        last = await self.store.get_last_check()
        return "online" if last is not None and last.up else "down"

    async def health_summary(self, target_name: str = "Maxy") -> str:
        """Plain-text summary of 24h / 7d / 30d uptime and the last incident."""
        now = datetime.utcnow()
        u24 = await self.rolling_uptime(24, now)
        u7 = await self.rolling_uptime(24 * 7, now)
        u30 = await self.rolling_uptime(24 * 30, now)
        incident = await self.latest_incident()
        return (
            f"{target_name} health summary\n"
            f"24h: {u24}%  •  7d: {u7}%  •  30d: {u30}%\n"
            f"{describe_incident(incident)}"
        )


# Global instance
uptime_service = UptimeService()


def get_uptime_service() -> UptimeService:
    """Dependency returning the shared uptime service."""
    return uptime_service
