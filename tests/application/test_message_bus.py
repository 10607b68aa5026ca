"""Tests for the in-process message bus."""

import asyncio

import pytest

from missionguard.application.message_bus import (
    TOPIC_BROADCAST,
    TOPIC_MESSAGE,
    MessageBus,
)
from missionguard.domain.exceptions import RequestTimeout
from missionguard.domain.models import Message


class TestSendAndBroadcast:
    """Tests for direct messages and broadcasts."""

    def test_message_ids_are_unique(self) -> None:
        """1000 sends produce 1000 distinct ids."""
        bus = MessageBus(history_size=1000)
        ids = {bus.send("pm", "architect", i).id for i in range(1000)}
        assert len(ids) == 1000

    def test_direct_message_reaches_recipient_only(self) -> None:
        bus = MessageBus()
        architect: list[Message] = []
        designer: list[Message] = []
        bus.subscribe(TOPIC_MESSAGE, architect.append, recipient="architect")
        bus.subscribe(TOPIC_MESSAGE, designer.append, recipient="designer")

        message = bus.send("product_manager", "architect", {"prd": "ready"})

        assert architect == [message]
        assert designer == []
        assert not message.broadcast

    def test_broadcast_has_no_recipient(self) -> None:
        bus = MessageBus()
        received: list[Message] = []
        bus.subscribe(TOPIC_BROADCAST, received.append)

        message = bus.broadcast("orchestrator", {"type": "phase_changed"})

        assert received == [message]
        assert message.broadcast
        assert message.recipient is None

    def test_unknown_topic_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown topic"):
            MessageBus().subscribe("events", lambda m: None)

    def test_unsubscribe_stops_delivery(self) -> None:
        bus = MessageBus()
        received: list[Message] = []
        sub_id = bus.subscribe(TOPIC_BROADCAST, received.append)
        assert bus.unsubscribe(sub_id)
        bus.broadcast("orchestrator", "x")
        assert received == []
        assert not bus.unsubscribe(sub_id)

    def test_failing_handler_does_not_stop_others(self) -> None:
        bus = MessageBus()
        received: list[Message] = []

        def broken(message: Message) -> None:
            raise RuntimeError("handler bug")

        bus.subscribe(TOPIC_BROADCAST, broken)
        bus.subscribe(TOPIC_BROADCAST, received.append)
        bus.broadcast("orchestrator", "x")
        assert len(received) == 1

    def test_undelivered_messages_wait_for_subscriber(self) -> None:
        """A message to an agent with no listener is delivered on subscribe."""
        bus = MessageBus()
        bus.send("architect", "qa_engineer", "contract ready")
        assert len(bus.get_undelivered("qa_engineer")) == 1

        received: list[Message] = []
        bus.subscribe(TOPIC_MESSAGE, received.append, recipient="qa_engineer")

        assert [m.content for m in received] == ["contract ready"]
        assert bus.get_undelivered("qa_engineer") == []


class TestHistory:
    """Tests for the bounded history."""

    def test_history_keeps_most_recent(self) -> None:
        """150 sends with a bound of 100 keep the last 100."""
        bus = MessageBus(history_size=100)
        sent = [bus.send("pm", "architect", i) for i in range(150)]

        history = bus.get_history()

        assert len(history) == 100
        assert history[0].id == sent[50].id
        assert history[-1].id == sent[-1].id

    def test_history_filters(self) -> None:
        bus = MessageBus()
        bus.send("pm", "architect", 1)
        bus.send("designer", "architect", 2)
        bus.send("pm", "qa_engineer", 3)

        assert [m.content for m in bus.get_history(sender="pm")] == [1, 3]
        assert [m.content for m in bus.get_history(recipient="architect")] == [1, 2]

    def test_clear(self) -> None:
        bus = MessageBus()
        bus.send("pm", "architect", 1)
        bus.clear()
        assert bus.get_history() == []
        assert bus.stats()["undelivered"] == 0


class TestChannels:
    """Tests for bounded async channels."""

    @pytest.mark.asyncio
    async def test_channel_receives_messages(self) -> None:
        bus = MessageBus()
        channel = bus.channel(TOPIC_BROADCAST)
        sent = bus.broadcast("orchestrator", "hello")

        received = await asyncio.wait_for(channel.receive(), timeout=1)

        assert received.id == sent.id

    def test_full_channel_drops_oldest(self) -> None:
        bus = MessageBus()
        channel = bus.channel(TOPIC_BROADCAST, maxsize=2)
        for i in range(3):
            bus.broadcast("orchestrator", i)

        assert channel.dropped == 1
        assert len(channel) == 2
        first = channel.receive_nowait()
        assert first is not None and first.content == 1

    def test_closed_channel_stops_receiving(self) -> None:
        bus = MessageBus()
        channel = bus.channel(TOPIC_BROADCAST)
        bus.close_channel(channel)
        bus.broadcast("orchestrator", "x")
        assert channel.receive_nowait() is None
        assert bus.stats()["channels"] == 0


class TestRequestReply:
    """Tests for request/reply correlation."""

    @pytest.mark.asyncio
    async def test_request_resolves_with_reply(self) -> None:
        bus = MessageBus()

        def architect(message: Message) -> None:
            bus.reply(message.id, "architect", {"endpoints": 3})

        bus.subscribe(TOPIC_MESSAGE, architect, recipient="architect")

        reply = await bus.request("product_manager", "architect", "how many?")

        assert reply == {"endpoints": 3}
        assert bus.pending_requests == 0

    @pytest.mark.asyncio
    async def test_reply_is_sent_back_with_correlation_id(self) -> None:
        bus = MessageBus()
        replies: list[Message] = []

        def architect(message: Message) -> None:
            bus.reply(message.id, "architect", "ok")

        bus.subscribe(TOPIC_MESSAGE, architect, recipient="architect")
        bus.subscribe(TOPIC_MESSAGE, replies.append, recipient="product_manager")

        await bus.request("product_manager", "architect", "ping")

        [reply] = replies
        request_id = bus.get_history(sender="product_manager")[0].id
        assert reply.correlation_id == request_id

    @pytest.mark.asyncio
    async def test_request_times_out(self) -> None:
        """No reply within 100ms raises RequestTimeout."""
        bus = MessageBus()

        with pytest.raises(RequestTimeout) as excinfo:
            await bus.request("product_manager", "architect", "hello?", timeout_ms=100)

        assert excinfo.value.recipient == "architect"
        assert excinfo.value.timeout_ms == 100
        assert bus.pending_requests == 0

    @pytest.mark.asyncio
    async def test_late_reply_is_a_no_op(self) -> None:
        """Replying after the timeout returns False."""
        bus = MessageBus()
        with pytest.raises(RequestTimeout):
            await bus.request("product_manager", "architect", "hello?", timeout_ms=50)

        request_id = bus.get_history(sender="product_manager")[0].id
        assert not bus.reply(request_id, "architect", "too late")

    def test_reply_to_unknown_message(self) -> None:
        assert not MessageBus().reply("missing", "architect", "x")

    @pytest.mark.asyncio
    async def test_second_reply_is_a_no_op(self) -> None:
        bus = MessageBus()
        outcomes: list[bool] = []

        def architect(message: Message) -> None:
            outcomes.append(bus.reply(message.id, "architect", "first"))
            outcomes.append(bus.reply(message.id, "architect", "second"))

        bus.subscribe(TOPIC_MESSAGE, architect, recipient="architect")

        assert await bus.request("product_manager", "architect", "?") == "first"
        assert outcomes == [True, False]
