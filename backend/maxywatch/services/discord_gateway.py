"""Discord adapter for the messaging capabilities.

Runs a discord.py client in the background, publishes every inbound message
to the message hub and implements channel sends and owner direct messages.
"""
import asyncio
import logging
from typing import Optional

import discord

from ..config import settings
from .messaging import InboundMessage, MessageHub, message_hub

logger = logging.getLogger(__name__)


class DiscordGateway:
    """discord.py client wrapper implementing ``Messenger``."""

    def __init__(self, bot_token: str = "", hub: Optional[MessageHub] = None):
        self.bot_token = bot_token or settings.monitor_bot_token or ""
        self.hub = hub or message_hub
        self._client: Optional[discord.Client] = None
        self._task: Optional[asyncio.Task] = None
        self._ready = asyncio.Event()

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def _build_client(self) -> discord.Client:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.guild_messages = True
        intents.dm_messages = True
        intents.message_content = True
        client = discord.Client(intents=intents)

        @client.event
        async def on_ready():
            logger.info(f"Monitor bot ready as {client.user}")
            self._ready.set()

        @client.event
        async def on_message(message: discord.Message):
            if message.author is None:
                return
            self.hub.publish(InboundMessage(
                author_id=str(message.author.id),
                body=message.content or "",
                channel_id=str(message.channel.id),
                author_is_bot=bool(message.author.bot),
                timestamp=message.created_at.replace(tzinfo=None),
            ))

        return client

    async def start(self):
        """Log in and connect in the background."""
        if self._task is not None:
            return
        self._client = self._build_client()
        self._task = asyncio.create_task(self._client.start(self.bot_token), name="discord-gateway")
        logger.info("Discord gateway starting")

    async def wait_until_ready(self, timeout: Optional[float] = None):
        """Wait for the gateway connection, failing fast if login failed."""
        ready = asyncio.create_task(self._ready.wait())
        waiters = {ready}
        if self._task is not None:
            waiters.add(self._task)
        done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        if ready not in done:
            ready.cancel()
        if self._task in done:
            # client.start() only returns on shutdown or failure
            self._task.result()
            raise RuntimeError("Discord gateway stopped before becoming ready")
        if not done:
            raise asyncio.TimeoutError("Discord gateway did not become ready in time")

    async def stop(self):
        if self._client is not None:
            await self._client.close()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Discord gateway task failed")
        self._task = None
        self._ready.clear()
        logger.info("Discord gateway stopped")

    async def send_to_channel(self, channel_id: str, text: str) -> bool:
        """Post ``text`` in a channel. Returns False if the channel is unreachable."""
        if self._client is None:
            logger.error("Discord gateway not started; cannot send to channel")
            return False
        try:
            channel = self._client.get_channel(int(channel_id))
            if channel is None:
                channel = await self._client.fetch_channel(int(channel_id))
            await channel.send(text)
            return True
        except (discord.DiscordException, ValueError) as e:
            logger.error(f"Sending to channel {channel_id} failed: {e}")
            return False

    async def send_direct_message(self, user_id: str, text: str) -> bool:
        if self._client is None:
            logger.error("Discord gateway not started; cannot send direct message")
            return False
        try:
            user = await self._client.fetch_user(int(user_id))
            await user.send(text)
            return True
        except (discord.DiscordException, ValueError) as e:
            logger.error(f"Direct message to {user_id} failed: {e}")
            return False


# Global instance
discord_gateway = DiscordGateway()
