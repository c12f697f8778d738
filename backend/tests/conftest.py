"""Shared test fixtures."""
import asyncio
from typing import List, Optional, Tuple

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from maxywatch import models  # noqa: F401
from maxywatch.database import Base
from maxywatch.services.alerter import AlerterService
from maxywatch.services.checker import CheckerService
from maxywatch.services.correlator import ResponseCorrelator
from maxywatch.services.messaging import InboundMessage, MessageHub
from maxywatch.services.store import MonitorStore
from maxywatch.services.transitions import TransitionPolicy

TARGET_ID = "111"
OWNER_ID = "999"
CHANNEL_ID = "555"


class FakeMessenger:
    """Records outbound messages and optionally makes the target bot reply."""

    def __init__(self, hub: Optional[MessageHub] = None):
        self.hub = hub
        self.channel_messages: List[Tuple[str, str]] = []
        self.direct_messages: List[Tuple[str, str]] = []
        self.channel_ok = True
        self.channel_error: Optional[Exception] = None
        self.dm_ok = True
        self.dm_error: Optional[Exception] = None
        self.reply: Optional[str] = None
        self.reply_author = TARGET_ID
        self.reply_delay = 0.0
        # Deliver the reply before send_to_channel returns
        self.reply_during_send = False

    async def send_to_channel(self, channel_id: str, text: str) -> bool:
        self.channel_messages.append((channel_id, text))
        if self.channel_error is not None:
            raise self.channel_error
        if not self.channel_ok:
            return False
        if self.reply is not None and self.hub is not None:
            message = InboundMessage(author_id=self.reply_author, body=self.reply, channel_id=channel_id)
            if self.reply_during_send:
                self.hub.publish(message)
                await asyncio.sleep(0)
                return True
            asyncio.get_running_loop().call_later(self.reply_delay, self.hub.publish, message)
        return True

    async def send_direct_message(self, user_id: str, text: str) -> bool:
        self.direct_messages.append((user_id, text))
        if self.dm_error is not None:
            raise self.dm_error
        return self.dm_ok


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def store(session_factory) -> MonitorStore:
    return MonitorStore(session_factory=session_factory)


@pytest.fixture
def hub() -> MessageHub:
    return MessageHub()


@pytest.fixture
def messenger(hub) -> FakeMessenger:
    return FakeMessenger(hub)


@pytest.fixture
def alerter(messenger, store) -> AlerterService:
    return AlerterService(messenger=messenger, store=store, owner_user_id=OWNER_ID, target_name="Maxy")


@pytest.fixture
def policy(store, alerter) -> TransitionPolicy:
    return TransitionPolicy(store=store, alerter=alerter)


@pytest.fixture
def checker(store, messenger, hub, policy) -> CheckerService:
    return CheckerService(
        store=store,
        messenger=messenger,
        correlator=ResponseCorrelator(hub),
        policy=policy,
        target_bot_id=TARGET_ID,
    )
