"""State transition policy - opens/closes incidents and notifies on status changes.

The policy keeps an in-memory mirror of the last known status so a probe
cycle can decide whether the status changed without re-reading the store.
The mirror is rebuilt from the store on startup rather than assumed online.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .alerter import AlerterService, alerter_service
from .store import MonitorStore, monitor_store

logger = logging.getLogger(__name__)

DOWN = "down"
UP = "up"


@dataclass
class MonitorState:
    """Last known status. ``was_online`` is None until the first outcome is known."""
    was_online: Optional[bool] = None
    downtime_start: Optional[datetime] = None


def decide_transition(was_online: Optional[bool], outcome: bool) -> Optional[str]:
    """Return DOWN, UP or None for an unchanged status.

    An unknown previous status counts as online, so the very first failed
    probe opens an incident while the first successful one is silent.
    """
    if outcome:
        return UP if was_online is False else None
    return DOWN if was_online is not False else None


class TransitionPolicy:
    """Applies probe outcomes to the monitor state."""

    def __init__(
        self,
        store: Optional[MonitorStore] = None,
        alerter: Optional[AlerterService] = None,
    ):
        self.store = store or monitor_store
        self.alerter = alerter or alerter_service
        self.state = MonitorState()
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self):
        """Rebuild the mirrored state from the open incident or the last check."""
        incident = await self.store.get_open_incident()
        if incident is not None:
            self.state = MonitorState(was_online=False, downtime_start=incident.start_ts)
        else:
            last = await self.store.get_last_check()
            self.state = MonitorState(was_online=None if last is None else bool(last.up))
        self._initialized = True
        logger.info(f"Transition policy initialized: was_online={self.state.was_online}")

    async def ensure_initialized(self):
        """Initialize once. Must run before the current cycle writes its check record."""
        async with self._lock:
            if not self._initialized:
                await self.initialize()

    async def apply(self, outcome: bool, reason: Optional[str] = None) -> Optional[str]:
        """Apply one probe outcome. Returns the transition taken, if any.

        Serialised so two overlapping probes that both fail open one incident
        and send one notification.
        """
        async with self._lock:
            if not self._initialized:
                await self.initialize()

            transition = decide_transition(self.state.was_online, outcome)
            now = datetime.utcnow()

            if transition is None:
                if self.state.was_online is None:
                    self.state.was_online = True
                return None

            if transition == DOWN:
                incident = await self.store.open_incident(now)
                self.state = MonitorState(was_online=False, downtime_start=incident.start_ts)
                logger.warning(f"Target went DOWN, incident {incident.id} opened")
                await self.alerter.notify_down(reason)
                return DOWN

            incident = await self.store.close_latest_incident(now)
            if incident is not None:
                downtime = incident.duration_seconds
            elif self.state.downtime_start is not None:
                downtime = int((now - self.state.downtime_start).total_seconds())
            else:
                downtime = None
            self.state = MonitorState(was_online=True, downtime_start=None)
            logger.info(f"Target is BACK UP (downtime: {downtime}s)")
            await self.alerter.notify_up(downtime)
            return UP


# Global instance
transition_policy = TransitionPolicy()
