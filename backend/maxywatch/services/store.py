"""Persistence access layer for settings, check records and incidents.

Every operation runs in its own session so a scheduled probe and a manual
"run check now" can interleave safely. Driver errors are wrapped in
``StoreError`` and raised to the caller.
"""
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import async_session
from ..models import Alert, CheckRecord, Incident, MonitorSettings
from ..models.settings import DEFAULT_SETTINGS
from ..utils.db_utils import retry_on_lock

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A read or write against the monitor database failed."""


class MonitorStore:
    """Async access to the monitor tables."""

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        self.session_factory = session_factory or async_session

    async def _run(self, operation: str, work):
        """Run ``work(session)`` in a fresh session, retrying transient lock errors."""
        async def attempt():
            async with self.session_factory() as session:
                return await work(session)

        try:
            return await retry_on_lock(attempt)
        except SQLAlchemyError as e:
            logger.error(f"Store operation '{operation}' failed: {e}")
            raise StoreError(f"{operation} failed: {e}") from e

    # -- Settings ------------------------------------------------------------

    @staticmethod
    async def _load_settings(session: AsyncSession) -> MonitorSettings:
        row = await session.get(MonitorSettings, 1)
        if row is None:
            row = MonitorSettings(id=1, **DEFAULT_SETTINGS)
            session.add(row)
            await session.commit()
        return row

    async def get_settings(self) -> MonitorSettings:
        """Current probe settings, creating the default row on first use."""
        return await self._run("get_settings", self._load_settings)

    async def update_settings(self, **changes: Any) -> MonitorSettings:
        """Apply a partial update. Unknown keys are rejected."""
        unknown = set(changes) - set(DEFAULT_SETTINGS)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        async def work(session: AsyncSession) -> MonitorSettings:
            row = await self._load_settings(session)
            for key, value in changes.items():
                setattr(row, key, value)
            await session.commit()
            return row

        return await self._run("update_settings", work)

    async def set_status_override(self, status: Optional[str]) -> MonitorSettings:
        return await self.update_settings(status_override=status or None)

    # -- Check records -------------------------------------------------------

    async def append_check(self, up: bool, checked_at: Optional[datetime] = None) -> CheckRecord:
        """Append one check outcome."""
        async def work(session: AsyncSession) -> CheckRecord:
            record = CheckRecord(up=bool(up), checked_at=checked_at or datetime.utcnow())
            session.add(record)
            await session.commit()
            return record

        return await self._run("append_check", work)

    async def get_last_check(self) -> Optional[CheckRecord]:
        async def work(session: AsyncSession) -> Optional[CheckRecord]:
            result = await session.execute(
                select(CheckRecord)
                .order_by(CheckRecord.checked_at.desc(), CheckRecord.id.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

        return await self._run("get_last_check", work)

    async def get_checks_since(self, since: datetime) -> List[CheckRecord]:
        """Check records at or after ``since``, oldest first."""
        async def work(session: AsyncSession) -> List[CheckRecord]:
            result = await session.execute(
                select(CheckRecord)
                .where(CheckRecord.checked_at >= since)
                .order_by(CheckRecord.checked_at.asc(), CheckRecord.id.asc())
            )
            return list(result.scalars().all())

        return await self._run("get_checks_since", work)

    async def prune_checks(self, older_than: datetime) -> int:
        """Delete check records older than ``older_than``. Returns the count."""
        async def work(session: AsyncSession) -> int:
            result = await session.execute(
                delete(CheckRecord).where(CheckRecord.checked_at < older_than)
            )
            await session.commit()
            return result.rowcount or 0

        return await self._run("prune_checks", work)

    # -- Incidents -----------------------------------------------------------

    @staticmethod
    async def _latest_incident(session: AsyncSession) -> Optional[Incident]:
        result = await session.execute(
            select(Incident).order_by(Incident.id.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_latest_incident(self) -> Optional[Incident]:
        return await self._run("get_latest_incident", self._latest_incident)

    async def get_open_incident(self) -> Optional[Incident]:
        async def work(session: AsyncSession) -> Optional[Incident]:
            result = await session.execute(
                select(Incident)
                .where(Incident.end_ts.is_(None))
                .order_by(Incident.id.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

        return await self._run("get_open_incident", work)

    async def open_incident(self, start_ts: Optional[datetime] = None) -> Incident:
        """Open a new incident, or return the one already open."""
        async def work(session: AsyncSession) -> Incident:
            latest = await self._latest_incident(session)
            if latest is not None and latest.end_ts is None:
                logger.warning(f"Incident {latest.id} is already open, not opening another")
                return latest
            incident = Incident(start_ts=start_ts or datetime.utcnow(), end_ts=None)
            session.add(incident)
            await session.commit()
            return incident

        return await self._run("open_incident", work)

    async def close_latest_incident(self, end_ts: Optional[datetime] = None) -> Optional[Incident]:
        """Close the most recent incident if it is open. Returns it, or None."""
        async def work(session: AsyncSession) -> Optional[Incident]:
            latest = await self._latest_incident(session)
            if latest is None or latest.end_ts is not None:
                return None
            latest.end_ts = end_ts or datetime.utcnow()
            await session.commit()
            return latest

        return await self._run("close_latest_incident", work)

    # -- Alerts --------------------------------------------------------------

    async def record_alert(self, alert_type: str, payload: str, success: bool) -> Alert:
        async def work(session: AsyncSession) -> Alert:
            alert = Alert(alert_type=alert_type, payload=payload, success=1 if success else 0)
            session.add(alert)
            await session.commit()
            return alert

        return await self._run("record_alert", work)

    async def list_alerts(self) -> List[Alert]:
        async def work(session: AsyncSession) -> List[Alert]:
            result = await session.execute(select(Alert).order_by(Alert.id.asc()))
            return list(result.scalars().all())

        return await self._run("list_alerts", work)


# Global instance
monitor_store = MonitorStore()


def get_store() -> MonitorStore:
    """Dependency returning the shared store."""
    return monitor_store
