"""
Cooperative cancellation token.

A token is threaded through the call chain of a mission. Cancelling a
token cancels all of its children, so cancelling the mission token reaches
every in-flight agent call.
"""

import asyncio

from missionguard.domain.exceptions import MissionCancelled


class CancellationToken:
    """Hierarchical cancellation flag with an awaitable wait()."""

    def __init__(self, parent: "CancellationToken | None" = None) -> None:
        self._event = asyncio.Event()
        self._children: list[CancellationToken] = []
        self._reason = ""
        self._parent = parent
        if parent is not None:
            parent._children.append(self)
            if parent.cancelled:
                self.cancel(parent.reason)

    def child(self) -> "CancellationToken":
        """Create a token that is cancelled whenever this one is."""
        return CancellationToken(parent=self)

    def detach(self) -> None:
        """Remove this token from its parent once the call is over."""
        if self._parent is not None and self in self._parent._children:
            self._parent._children.remove(self)

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        for child in list(self._children):
            child.cancel(reason)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise MissionCancelled(self._reason)
