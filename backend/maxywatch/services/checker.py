"""Checker service - runs one probe cycle against the target bot."""
import logging
from typing import Optional

from ..config import settings
from .correlator import ResponseCorrelator, response_correlator
from .discord_gateway import discord_gateway
from .messaging import Messenger
from .store import MonitorStore, monitor_store
from .transitions import TransitionPolicy, transition_policy

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_MATCH = "pong"
DEFAULT_TIMEOUT_MS = 5000

SEND_FAILED_REASON = "error sending test message"


def build_probe_message(probe_mode: str, command: str, target_bot_id: str) -> str:
    """Build the probe text for the configured mode.

    ``prefix`` and ``raw`` send the command as-is, ``mention`` addresses the
    target bot first. Unknown modes fall back to the raw command.
    """
    if probe_mode == "mention":
        return f"<@{target_bot_id}> {command}"
    return command


class CheckerService:
    """Sends a probe, waits for the reply, records the outcome and applies transitions."""

    def __init__(
        self,
        store: Optional[MonitorStore] = None,
        messenger: Optional[Messenger] = None,
        correlator: Optional[ResponseCorrelator] = None,
        policy: Optional[TransitionPolicy] = None,
        target_bot_id: Optional[str] = None,
    ):
        self.store = store or monitor_store
        self.messenger = messenger or discord_gateway
        self.correlator = correlator or response_correlator
        self.policy = policy or transition_policy
        self.target_bot_id = target_bot_id or settings.target_bot_id or ""

    async def _send_probe(self, channel_id: str, text: str) -> bool:
        try:
            return bool(await self.messenger.send_to_channel(channel_id, text))
        except Exception as e:
            logger.error(f"Sending probe to channel {channel_id} failed: {e}")
            return False

    async def run_check(self) -> bool:
        """Run one probe cycle. Returns True if the target answered.

        Raises StoreError if the outcome could not be recorded.
        """
        config = await self.store.get_settings()
        if not config.channel_id:
            logger.info("No channel configured; skipping check")
            return False

        # The previous status must be read before this cycle's record exists
        await self.policy.ensure_initialized()

        text = build_probe_message(config.probe_mode, config.command or "", self.target_bot_id)
        reason = None

        waiter = self.correlator.arm(self.target_bot_id, config.response_match or DEFAULT_RESPONSE_MATCH)
        try:
            if await self._send_probe(config.channel_id, text):
                up = await waiter.wait(config.response_timeout_ms or DEFAULT_TIMEOUT_MS)
            else:
                # No reply can arrive for a probe that was never sent
                up = False
                reason = SEND_FAILED_REASON
        finally:
            waiter.release()

        await self.store.append_check(up)
        logger.debug(f"Check result: {'up' if up else 'down'}")

        await self.policy.apply(up, reason=reason)
        return up


# Global instance
checker_service = CheckerService()


def get_checker() -> CheckerService:
    """Dependency returning the shared checker."""
    return checker_service
