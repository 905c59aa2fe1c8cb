"""Tests for the alert triage store."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from filterdesk.domain.models import (
    Alert,
    ErrorCode,
    ServerRejection,
    Severity,
    TransportError,
)
from filterdesk.presentation.alert_board import (
    DISMISS_FAILED,
    RESOLVE_FAILED,
    AlertTriageBoard,
)


def alert(alert_id, severity=Severity.LOW, resolved=False):
    return Alert(
        id=alert_id,
        title=f"alert-{alert_id}",
        severity=severity,
        timestamp=datetime(2024, 5, 1, 10, 0, tzinfo=UTC),
        resolved=resolved,
    )


@pytest.fixture
def gateway():
    """Gateway double with async alert endpoints."""
    gateway = MagicMock()
    gateway.alerts.list = AsyncMock(return_value=[alert(1), alert(7), alert(9)])
    gateway.alerts.resolve = AsyncMock(return_value=None)
    gateway.alerts.dismiss = AsyncMock(return_value=None)
    return gateway


@pytest.fixture
def board(gateway):
    board = AlertTriageBoard(gateway)
    board._alerts = [alert(1), alert(7), alert(9)]
    return board


class TestListing:
    """Test visibility-filtered listing."""

    @pytest.mark.asyncio
    async def test_list_fetches_for_flag(self, gateway):
        board = AlertTriageBoard(gateway)

        outcome = await board.list(False)

        assert outcome.ok
        assert [a.id for a in board.alerts] == [1, 7, 9]
        gateway.alerts.list.assert_awaited_once_with(False)

    @pytest.mark.asyncio
    async def test_switching_flag_replaces_list(self, board, gateway):
        gateway.alerts.list.return_value = [alert(2, resolved=True)]

        await board.list(True)

        assert board.show_resolved is True
        assert [a.id for a in board.alerts] == [2]
        gateway.alerts.list.assert_awaited_once_with(True)

    @pytest.mark.asyncio
    async def test_every_switch_issues_one_fetch(self, board, gateway):
        await board.toggle_show_resolved()
        await board.toggle_show_resolved()
        await board.set_show_resolved(False)

        assert gateway.alerts.list.await_count == 3
        assert [c.args for c in gateway.alerts.list.await_args_list] == [
            (True,),
            (False,),
            (False,),
        ]

    @pytest.mark.asyncio
    async def test_superseded_listing_is_dropped(self, gateway):
        release = {True: asyncio.Event(), False: asyncio.Event()}
        results = {True: [alert(2, resolved=True)], False: [alert(1)]}

        async def slow_list(show_resolved):
            await release[show_resolved].wait()
            return results[show_resolved]

        gateway.alerts.list = AsyncMock(side_effect=slow_list)
        board = AlertTriageBoard(gateway)

        first = asyncio.create_task(board.list(True))
        await asyncio.sleep(0)
        second = asyncio.create_task(board.list(False))
        await asyncio.sleep(0)

        release[False].set()
        assert (await second).ok
        release[True].set()
        stale = await first

        assert stale.error.code == ErrorCode.STALE_RESPONSE
        assert [a.id for a in board.alerts] == [1]
        assert board.last_error is None

    @pytest.mark.asyncio
    async def test_failed_listing_surfaces_error(self, board, gateway):
        gateway.alerts.list.side_effect = TransportError("down")

        outcome = await board.load()

        assert not outcome.ok
        assert board.last_error == outcome.message
        assert [a.id for a in board.alerts] == [1, 7, 9]

    def test_empty_message_depends_on_flag(self, gateway):
        assert AlertTriageBoard(gateway).empty_message == "No active alerts"
        assert (
            AlertTriageBoard(gateway, show_resolved=True).empty_message
            == "No resolved alerts"
        )

    def test_counts_by_severity(self, gateway):
        board = AlertTriageBoard(gateway)
        board._alerts = [
            alert(1, Severity.HIGH),
            alert(2, Severity.HIGH),
            alert(3, Severity.LOW),
            alert(4, Severity.MEDIUM, resolved=True),
        ]

        assert board.counts_by_severity() == {
            Severity.LOW: 1,
            Severity.MEDIUM: 0,
            Severity.HIGH: 2,
        }


class TestResolve:
    """Test optimistic resolve."""

    @pytest.mark.asyncio
    async def test_flag_flips_before_server_answers(self, board, gateway):
        seen = {}

        async def check_local_state(alert_id):
            seen["resolved"] = board.get(alert_id).resolved

        gateway.alerts.resolve.side_effect = check_local_state

        outcome = await board.resolve(7)

        assert outcome.ok
        assert seen["resolved"] is True
        assert board.get(7).resolved is True
        assert board.get(1).resolved is False

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self, board, gateway):
        gateway.alerts.resolve.side_effect = TransportError("down")

        outcome = await board.resolve(7)

        assert not outcome.ok
        assert board.get(7).resolved is False
        assert board.last_error == outcome.message

    @pytest.mark.asyncio
    async def test_unknown_id_surfaces_rejection(self, board, gateway):
        gateway.alerts.resolve.side_effect = ServerRejection(404)
        before = board.alerts

        outcome = await board.resolve(12345)

        assert outcome.error.code == ErrorCode.SERVER_REJECTED
        assert outcome.message == RESOLVE_FAILED
        assert board.alerts == before
        gateway.alerts.resolve.assert_awaited_once_with(12345)

    @pytest.mark.asyncio
    async def test_no_rollback_after_list_replaced(self, board, gateway):
        release = asyncio.Event()

        async def slow_fail(alert_id):
            await release.wait()
            raise TransportError("down")

        gateway.alerts.resolve.side_effect = slow_fail
        gateway.alerts.list.return_value = [alert(7, resolved=True)]

        pending = asyncio.create_task(board.resolve(7))
        await asyncio.sleep(0)
        await board.load()
        release.set()
        outcome = await pending

        assert not outcome.ok
        assert board.get(7).resolved is True


class TestDismiss:
    """Test optimistic dismiss."""

    @pytest.mark.asyncio
    async def test_alert_removed_before_server_answers(self, board, gateway):
        seen = {}

        async def check_local_state(alert_id):
            seen["present"] = board.get(alert_id) is not None

        gateway.alerts.dismiss.side_effect = check_local_state

        outcome = await board.dismiss(7)

        assert outcome.ok
        assert seen["present"] is False
        assert [a.id for a in board.alerts] == [1, 9]

    @pytest.mark.asyncio
    async def test_failure_restores_position(self, board, gateway):
        gateway.alerts.dismiss.side_effect = ServerRejection(500, "backend busy")

        outcome = await board.dismiss(7)

        assert outcome.message == "backend busy"
        assert [a.id for a in board.alerts] == [1, 7, 9]

    @pytest.mark.asyncio
    async def test_restore_follows_earlier_neighbour(self, gateway):
        release = asyncio.Event()

        async def dismiss(alert_id):
            if alert_id == 9:
                await release.wait()
                raise TransportError("down")

        gateway.alerts.dismiss.side_effect = dismiss
        board = AlertTriageBoard(gateway)
        board._alerts = [alert(1), alert(7), alert(9), alert(11)]

        pending = asyncio.create_task(board.dismiss(9))
        await asyncio.sleep(0)
        assert (await board.dismiss(1)).ok
        release.set()
        outcome = await pending

        assert not outcome.ok
        assert [a.id for a in board.alerts] == [7, 9, 11]

    @pytest.mark.asyncio
    async def test_restore_at_top_when_no_neighbour_left(self, gateway):
        release = asyncio.Event()

        async def dismiss(alert_id):
            if alert_id == 7:
                await release.wait()
                raise TransportError("down")

        gateway.alerts.dismiss.side_effect = dismiss
        board = AlertTriageBoard(gateway)
        board._alerts = [alert(1), alert(7), alert(9)]

        pending = asyncio.create_task(board.dismiss(7))
        await asyncio.sleep(0)
        await board.dismiss(1)
        release.set()
        await pending

        assert [a.id for a in board.alerts] == [7, 9]

    @pytest.mark.asyncio
    async def test_repeated_dismiss_is_well_defined(self, board, gateway):
        await board.dismiss(7)
        gateway.alerts.dismiss.side_effect = ServerRejection(404, "Alert not found")

        outcome = await board.dismiss(7)

        assert outcome.message == "Alert not found"
        assert [a.id for a in board.alerts] == [1, 9]

    @pytest.mark.asyncio
    async def test_dismiss_failure_message_fallback(self, board, gateway):
        gateway.alerts.dismiss.side_effect = ServerRejection(500)

        outcome = await board.dismiss(1)

        assert outcome.message == DISMISS_FAILED
