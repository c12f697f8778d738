"""Tests for the state transition policy and owner notifications."""
import asyncio
import re
from datetime import datetime, timedelta

import pytest

from maxywatch.services.transitions import DOWN, UP, MonitorState, decide_transition

from conftest import OWNER_ID


async def count_incidents(store) -> int:
    latest = await store.get_latest_incident()
    return 0 if latest is None else latest.id


# ── decide_transition ────────────────────────────────────────────────────────


class TestDecideTransition:
    @pytest.mark.parametrize(
        ("was_online", "outcome", "expected"),
        [
            (True, False, DOWN),
            (False, True, UP),
            (True, True, None),
            (False, False, None),
            (None, False, DOWN),
            (None, True, None),
        ],
    )
    def test_table(self, was_online, outcome, expected) -> None:
        assert decide_transition(was_online, outcome) == expected


# ── initialize ───────────────────────────────────────────────────────────────


class TestInitialize:
    async def test_empty_store_is_unknown(self, policy) -> None:
        await policy.initialize()
        assert policy.state == MonitorState(was_online=None, downtime_start=None)

    async def test_from_last_check(self, policy, store) -> None:
        await store.append_check(True)
        await store.append_check(False)
        await policy.initialize()
        assert policy.state.was_online is False

    async def test_open_incident_wins(self, policy, store) -> None:
        start = datetime.utcnow() - timedelta(minutes=5)
        await store.open_incident(start)
        await store.append_check(True)
        await policy.initialize()
        assert policy.state.was_online is False
        assert policy.state.downtime_start == start

    async def test_ensure_initialized_runs_once(self, policy, store) -> None:
        await store.append_check(True)
        await policy.ensure_initialized()
        await store.append_check(False)
        await policy.ensure_initialized()

        assert policy.initialized is True
        assert policy.state.was_online is True


# ── apply ────────────────────────────────────────────────────────────────────


class TestApply:
    async def test_up_to_down_opens_incident_and_notifies(self, policy, store, messenger) -> None:
        await store.append_check(True)

        assert await policy.apply(False) == DOWN

        incident = await store.get_open_incident()
        assert incident is not None
        assert await count_incidents(store) == 1
        assert messenger.direct_messages == [(OWNER_ID, "❌ **Maxy is DOWN**")]
        assert policy.state.was_online is False
        assert policy.state.downtime_start == incident.start_ts

    async def test_down_reason_in_message(self, policy, store, messenger) -> None:
        await store.append_check(True)
        await policy.apply(False, reason="error sending test message")
        assert messenger.direct_messages[0][1] == "❌ **Maxy is DOWN (error sending test message)**"

    async def test_down_to_up_closes_incident(self, policy, store, messenger) -> None:
        start = datetime.utcnow() - timedelta(seconds=30)
        await store.open_incident(start)
        await store.append_check(False)

        assert await policy.apply(True) == UP

        incident = await store.get_latest_incident()
        assert incident.end_ts is not None
        assert incident.duration_seconds == int((incident.end_ts - incident.start_ts).total_seconds())
        assert await store.get_open_incident() is None
        assert len(messenger.direct_messages) == 1
        text = messenger.direct_messages[0][1]
        assert re.fullmatch(r"✅ \*\*Maxy is BACK UP\*\* \(downtime: 3[01]s\)", text)
        assert f"downtime: {incident.duration_seconds}s" in text

    async def test_repeated_down_is_debounced(self, policy, store, messenger) -> None:
        await store.append_check(True)

        await policy.apply(False)
        assert await policy.apply(False) is None
        assert await policy.apply(False) is None

        assert await count_incidents(store) == 1
        assert len(messenger.direct_messages) == 1

    async def test_repeated_up_is_silent(self, policy, store, messenger) -> None:
        await store.append_check(True)

        assert await policy.apply(True) is None
        assert await policy.apply(True) is None

        assert await store.get_latest_incident() is None
        assert messenger.direct_messages == []

    async def test_first_success_on_empty_store_is_silent(self, policy, store, messenger) -> None:
        assert await policy.apply(True) is None
        assert policy.state.was_online is True
        assert messenger.direct_messages == []

    async def test_first_failure_on_empty_store_opens_incident(self, policy, store, messenger) -> None:
        assert await policy.apply(False) == DOWN
        assert await count_incidents(store) == 1
        assert len(messenger.direct_messages) == 1

    async def test_concurrent_failures_open_one_incident(self, policy, store, messenger) -> None:
        await store.append_check(True)
        await policy.initialize()

        results = await asyncio.gather(policy.apply(False), policy.apply(False))

        assert results.count(DOWN) == 1
        assert results.count(None) == 1
        assert await count_incidents(store) == 1
        assert len(messenger.direct_messages) == 1

    async def test_recovery_without_open_incident(self, policy, store, messenger) -> None:
        await store.append_check(False)

        assert await policy.apply(True) == UP
        assert messenger.direct_messages[0][1] == "✅ **Maxy is BACK UP**"


# ── notifications ────────────────────────────────────────────────────────────


class TestNotifications:
    async def test_failed_dm_is_swallowed(self, policy, store, messenger) -> None:
        messenger.dm_ok = False
        await store.append_check(True)

        assert await policy.apply(False) == DOWN

        alerts = await store.list_alerts()
        assert [(a.alert_type, a.success) for a in alerts] == [("down", 0)]

    async def test_raising_dm_is_swallowed(self, policy, store, messenger) -> None:
        messenger.dm_error = RuntimeError("gateway closed")
        await store.append_check(True)

        assert await policy.apply(False) == DOWN
        assert await store.get_open_incident() is not None

    async def test_successful_alert_is_logged(self, policy, store) -> None:
        await store.append_check(True)
        await policy.apply(False)
        await policy.apply(True)

        alerts = await store.list_alerts()
        assert [(a.alert_type, a.success) for a in alerts] == [("down", 1), ("up", 1)]

    async def test_no_owner_configured(self, alerter, messenger) -> None:
        alerter.owner_user_id = None
        assert await alerter.notify_down() is False
        assert messenger.direct_messages == []
