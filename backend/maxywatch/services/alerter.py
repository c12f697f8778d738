"""Alerter service - direct-messages the owner when the target changes state."""
import logging
from typing import Optional

from ..config import settings
from .discord_gateway import discord_gateway
from .messaging import Messenger
from .store import MonitorStore, StoreError, monitor_store

logger = logging.getLogger(__name__)


class AlerterService:
    """Sends DOWN / BACK UP notifications. Never raises."""

    def __init__(
        self,
        messenger: Optional[Messenger] = None,
        store: Optional[MonitorStore] = None,
        owner_user_id: Optional[str] = None,
        target_name: Optional[str] = None,
    ):
        self.messenger = messenger or discord_gateway
        self.store = store or monitor_store
        self.owner_user_id = owner_user_id or settings.owner_user_id
        self.target_name = target_name or settings.target_name

    def build_down_message(self, reason: Optional[str] = None) -> str:
        if reason:
            return f"❌ **{self.target_name} is DOWN ({reason})**"
        return f"❌ **{self.target_name} is DOWN**"

    def build_up_message(self, downtime_seconds: Optional[int]) -> str:
        if downtime_seconds is None:
            return f"✅ **{self.target_name} is BACK UP**"
        return f"✅ **{self.target_name} is BACK UP** (downtime: {downtime_seconds}s)"

    async def send_alert(self, alert_type: str, text: str) -> bool:
        """Direct-message the owner and log the attempt."""
        if not self.owner_user_id:
            logger.warning(f"No owner configured; dropping {alert_type} alert")
            return False

        try:
            success = await self.messenger.send_direct_message(self.owner_user_id, text)
        except Exception:
            logger.exception(f"Failed to send {alert_type} alert")
            success = False

        if success:
            logger.info(f"Sent {alert_type} alert to owner")
        else:
            logger.error(f"{alert_type} alert was not delivered")

        try:
            await self.store.record_alert(alert_type, text, success)
        except StoreError:
            logger.exception("Failed to record alert")

        return success

    async def notify_down(self, reason: Optional[str] = None) -> bool:
        return await self.send_alert("down", self.build_down_message(reason))

    async def notify_up(self, downtime_seconds: Optional[int]) -> bool:
        return await self.send_alert("up", self.build_up_message(downtime_seconds))


# Global instance
alerter_service = AlerterService()
