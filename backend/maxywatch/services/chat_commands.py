"""Chat commands - answers ``!health`` and ``!status`` with the health summary."""
import asyncio
import logging
from typing import Optional, Set

from ..config import settings
from .discord_gateway import discord_gateway
from .messaging import InboundMessage, MessageStream, Messenger, Unsubscribe, message_hub
from .uptime import UptimeService, uptime_service

logger = logging.getLogger(__name__)

HEALTH_COMMANDS = ("!health", "!status")
SUMMARY_ERROR_TEXT = "Error generating health summary"


class HealthCommandHandler:
    """Replies in the same channel when a human asks for the health summary."""

    def __init__(
        self,
        stream: Optional[MessageStream] = None,
        messenger: Optional[Messenger] = None,
        uptime: Optional[UptimeService] = None,
        target_name: Optional[str] = None,
    ):
        self.stream = stream or message_hub
        self.messenger = messenger or discord_gateway
        self.uptime = uptime or uptime_service
        self.target_name = target_name or settings.target_name
        self._unsubscribe: Optional[Unsubscribe] = None
        self._pending: Set[asyncio.Task] = set()

    def start(self):
        if self._unsubscribe is None:
            self._unsubscribe = self.stream.subscribe(self._on_message)
            logger.info(f"Listening for {', '.join(HEALTH_COMMANDS)}")

    async def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()

    def _on_message(self, message: InboundMessage):
        if message.author_is_bot or not message.channel_id:
            return
        if (message.body or "").strip().lower() not in HEALTH_COMMANDS:
            return
        task = asyncio.get_running_loop().create_task(self.reply(message.channel_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def reply(self, channel_id: str) -> bool:
        """Post the health summary to ``channel_id``."""
        try:
            text = await self.uptime.health_summary(self.target_name)
        except Exception as e:
            logger.error(f"Health summary failed: {e}")
            text = SUMMARY_ERROR_TEXT
        return await self.messenger.send_to_channel(channel_id, text)


# Global instance
health_command_handler = HealthCommandHandler()
