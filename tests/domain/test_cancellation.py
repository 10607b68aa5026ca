"""Tests for CancellationToken."""

import asyncio

import pytest

from missionguard.domain.cancellation import CancellationToken
from missionguard.domain.exceptions import MissionCancelled


class TestCancellationToken:
    """Tests for hierarchical cancellation."""

    def test_cancel_reaches_children(self) -> None:
        """Cancelling a parent cancels every descendant."""
        root = CancellationToken()
        child = root.child()
        grandchild = child.child()

        root.cancel("mission cancelled")

        assert child.cancelled
        assert grandchild.cancelled
        assert grandchild.reason == "mission cancelled"

    def test_child_cancel_does_not_reach_parent(self) -> None:
        """A per-call token can be cancelled on its own."""
        root = CancellationToken()
        child = root.child()
        child.cancel("timeout")
        assert not root.cancelled

    def test_child_of_cancelled_parent_starts_cancelled(self) -> None:
        root = CancellationToken()
        root.cancel("done")
        assert root.child().cancelled

    def test_first_reason_wins(self) -> None:
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"

    def test_detached_child_is_not_cancelled(self) -> None:
        """detach() removes a finished call from its parent."""
        root = CancellationToken()
        child = root.child()
        child.detach()
        root.cancel()
        assert not child.cancelled

    def test_raise_if_cancelled(self) -> None:
        token = CancellationToken()
        token.raise_if_cancelled()
        token.cancel("stop")
        with pytest.raises(MissionCancelled, match="stop"):
            token.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_wait_returns_after_cancel(self) -> None:
        """wait() suspends until the token is cancelled."""
        token = CancellationToken()
        waiter = asyncio.create_task(token.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        token.cancel()
        await asyncio.wait_for(waiter, timeout=1)
        assert waiter.done()
