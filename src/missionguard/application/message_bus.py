"""
In-process message bus for agent-to-agent communication.

Provides:
- Direct messages (topic "message") and broadcasts (topic "broadcast")
- Callback subscriptions and bounded async channels
- Request/reply with correlation ids and explicit timeouts
- A bounded history of recent traffic

Delivery is single-process and in order for each listener.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from missionguard.domain.exceptions import RequestTimeout
from missionguard.domain.interfaces import MessageBusInterface
from missionguard.domain.models import Message

logger = logging.getLogger(__name__)

TOPIC_MESSAGE = "message"
TOPIC_BROADCAST = "broadcast"
TOPICS = (TOPIC_MESSAGE, TOPIC_BROADCAST)

DEFAULT_HISTORY_SIZE = 100
DEFAULT_REQUEST_TIMEOUT_MS = 30000
DEFAULT_QUEUE_SIZE = 100

MessageHandler = Callable[[Message], None]


@dataclass(frozen=True)
class _Subscription:
    id: str
    topic: str
    handler: MessageHandler
    recipient: str | None = None

    def matches(self, message: Message) -> bool:
        return self.recipient is None or message.recipient in (None, self.recipient)


class MessageChannel:
    """
    Bounded async channel fed by the bus.

    When the channel is full the oldest queued message is dropped, so a slow
    listener never blocks publishers.
    """

    def __init__(self, topic: str, maxsize: int, recipient: str | None = None):
        self.topic = topic
        self.recipient = recipient
        self._queue: asyncio.Queue[Message] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def _offer(self, message: Message) -> None:
        if self._queue.full():
            dropped = self._queue.get_nowait()
            self.dropped += 1
            logger.warning(
                f"Channel '{self.topic}' full, dropped oldest message {dropped.id}"
            )
        self._queue.put_nowait(message)

    async def receive(self) -> Message:
        return await self._queue.get()

    def receive_nowait(self) -> Message | None:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def __len__(self) -> int:
        return self._queue.qsize()


class MessageBus(MessageBusInterface):
    """Pub/sub and request/reply between agents of one mission."""

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY_SIZE,
        request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        """
        Args:
            history_size: Number of recent messages retained
            request_timeout_ms: Default timeout for request()
            queue_size: Per-recipient bound for undelivered direct messages
        """
        self._history: deque[Message] = deque(maxlen=history_size)
        self._subscriptions: dict[str, _Subscription] = {}
        self._channels: list[tuple[MessageChannel, _Subscription]] = []
        self._pending: dict[str, tuple[asyncio.Future[Any], Message]] = {}
        self._undelivered: dict[str, deque[Message]] = {}
        self._queue_size = queue_size
        self.request_timeout_ms = request_timeout_ms

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(
        self, topic: str, handler: MessageHandler, recipient: str | None = None
    ) -> str:
        """Register a handler for a topic.

        Args:
            topic: "message" or "broadcast"
            handler: Called synchronously with each matching message
            recipient: Only deliver direct messages addressed to this agent

        Returns:
            Subscription id for unsubscribe()
        """
        if topic not in TOPICS:
            raise ValueError(f"Unknown topic '{topic}', expected one of {TOPICS}")
        sub = _Subscription(
            id=str(uuid.uuid4()), topic=topic, handler=handler, recipient=recipient
        )
        self._subscriptions[sub.id] = sub
        if topic == TOPIC_MESSAGE and recipient is not None:
            self._deliver_queued(recipient)
        return sub.id

    def unsubscribe(self, subscription_id: str) -> bool:
        return self._subscriptions.pop(subscription_id, None) is not None

    def channel(
        self,
        topic: str,
        maxsize: int = DEFAULT_QUEUE_SIZE,
        recipient: str | None = None,
    ) -> MessageChannel:
        """Open a bounded channel receiving messages on ``topic``."""
        channel = MessageChannel(topic, maxsize, recipient)
        sub_id = self.subscribe(topic, channel._offer, recipient)
        self._channels.append((channel, self._subscriptions[sub_id]))
        return channel

    def close_channel(self, channel: MessageChannel) -> None:
        for ch, sub in list(self._channels):
            if ch is channel:
                self.unsubscribe(sub.id)
                self._channels.remove((ch, sub))

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def _new_message(
        self,
        sender: str,
        content: Any,
        recipient: str | None = None,
        broadcast: bool = False,
        correlation_id: str | None = None,
    ) -> Message:
        return Message(
            id=str(uuid.uuid4()),
            sender=sender,
            content=content,
            timestamp=datetime.now(UTC).isoformat(),
            recipient=recipient,
            broadcast=broadcast,
            correlation_id=correlation_id,
        )

    def _dispatch(self, topic: str, message: Message) -> int:
        self._history.append(message)
        delivered = 0
        for sub in list(self._subscriptions.values()):
            if sub.topic != topic or not sub.matches(message):
                continue
            try:
                sub.handler(message)
                delivered += 1
            except Exception as e:
                logger.error(f"Handler {sub.id} failed on message {message.id}: {e}")
        return delivered

    def send(
        self,
        sender: str,
        recipient: str,
        content: Any,
        correlation_id: str | None = None,
    ) -> Message:
        """Send a direct message. Returns the message with its generated id."""
        message = self._new_message(
            sender, content, recipient=recipient, correlation_id=correlation_id
        )
        self._publish_direct(message)
        return message

    def _publish_direct(self, message: Message) -> None:
        logger.debug(f"{message.sender} -> {message.recipient}: {message.id}")
        delivered = self._dispatch(TOPIC_MESSAGE, message)
        if delivered == 0 and message.recipient is not None:
            queue = self._undelivered.setdefault(
                message.recipient, deque(maxlen=self._queue_size)
            )
            queue.append(message)

    def broadcast(self, sender: str, content: Any) -> Message:
        message = self._new_message(sender, content, broadcast=True)
        logger.debug(f"{sender} -> *: {message.id}")
        self._dispatch(TOPIC_BROADCAST, message)
        return message

    def _deliver_queued(self, recipient: str) -> None:
        queue = self._undelivered.pop(recipient, None)
        if not queue:
            return
        for message in queue:
            for sub in list(self._subscriptions.values()):
                if sub.topic == TOPIC_MESSAGE and sub.recipient == recipient:
                    try:
                        sub.handler(message)
                    except Exception as e:
                        logger.error(
                            f"Handler {sub.id} failed on queued message "
                            f"{message.id}: {e}"
                        )

    # ------------------------------------------------------------------
    # Request / reply
    # ------------------------------------------------------------------

    async def request(
        self,
        sender: str,
        recipient: str,
        content: Any,
        timeout_ms: int | None = None,
    ) -> Any:
        """Send a message and wait for its reply.

        The pending entry is registered before the message is dispatched, so
        a handler replying synchronously is never missed.

        Raises:
            RequestTimeout: If no reply arrives within ``timeout_ms``
        """
        timeout_ms = self.request_timeout_ms if timeout_ms is None else timeout_ms
        message = self._new_message(sender, content, recipient=recipient)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[message.id] = (future, message)
        try:
            self._publish_direct(message)
            async with asyncio.timeout(timeout_ms / 1000):
                return await future
        except TimeoutError as e:
            raise RequestTimeout(message.id, recipient, timeout_ms) from e
        finally:
            self._pending.pop(message.id, None)

    def reply(self, message_id: str, sender: str, content: Any) -> bool:
        """Resolve a pending request.

        Returns:
            True if this call resolved the request; False if it was already
            resolved, timed out, or never existed
        """
        entry = self._pending.pop(message_id, None)
        if entry is None:
            return False
        future, original = entry
        if future.done():
            return False
        future.set_result(content)
        self.send(sender, original.sender, content, correlation_id=message_id)
        return True

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_history(
        self, sender: str | None = None, recipient: str | None = None
    ) -> list[Message]:
        return [
            m
            for m in self._history
            if (sender is None or m.sender == sender)
            and (recipient is None or m.recipient == recipient)
        ]

    def get_undelivered(self, recipient: str) -> list[Message]:
        return list(self._undelivered.get(recipient, ()))

    @property
    def pending_requests(self) -> int:
        return len(self._pending)

    def stats(self) -> dict[str, int]:
        return {
            "subscriptions": len(self._subscriptions),
            "channels": len(self._channels),
            "pending_requests": len(self._pending),
            "undelivered": sum(len(q) for q in self._undelivered.values()),
            "history": len(self._history),
        }

    def clear(self) -> None:
        """Drop history and undelivered messages. Pending requests are kept."""
        self._history.clear()
        self._undelivered.clear()
