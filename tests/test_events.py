"""
Tests for the event emitter and global event bus.
"""

import asyncio

import pytest

from lazy_hydrate.events import (
    AsyncEventEmitter,
    Event,
    EventBus,
    EventPriority,
    EventType,
    GateFiredEvent,
    HydrationCompleteEvent,
    HydrationFailedEvent,
    get_event_bus,
    on_event,
)


class TestAsyncEventEmitter:
    """Tests for AsyncEventEmitter."""

    @pytest.mark.asyncio
    async def test_priority_order(self):
        """Test that higher priority handlers run first."""
        emitter = AsyncEventEmitter()
        order = []
        emitter.on("x", lambda: order.append("normal"))
        emitter.on("x", lambda: order.append("high"), priority=EventPriority.HIGH)
        emitter.on("x", lambda: order.append("low"), priority=EventPriority.LOW)

        await emitter.emit("x")
        assert order == ["high", "normal", "low"]

    @pytest.mark.asyncio
    async def test_once(self):
        """Test that once handlers run a single time."""
        emitter = AsyncEventEmitter()
        calls = []
        emitter.once("x", lambda: calls.append(1))

        await emitter.emit("x")
        await emitter.emit("x")
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_once_with_filter_waits_for_match(self):
        """Test that a filtered once handler survives non-matching events."""
        emitter = AsyncEventEmitter()
        calls = []
        emitter.once(
            EventType.GATE_FIRED,
            lambda e: calls.append(e.data["gate"]),
            filter=lambda e: e.data["gate"] == "idle",
        )

        await emitter.emit(GateFiredEvent(gate="interaction"))
        assert emitter.listener_count(EventType.GATE_FIRED) == 1
        await emitter.emit(GateFiredEvent(gate="idle"))
        assert calls == ["idle"]
        assert emitter.listener_count(EventType.GATE_FIRED) == 0

    @pytest.mark.asyncio
    async def test_off_removes_handler(self):
        """Test removing one handler by identity."""
        emitter = AsyncEventEmitter()
        calls = []

        def keep():
            calls.append("keep")

        def drop():
            calls.append("drop")

        emitter.on("x", keep).on("x", drop)
        emitter.off("x", drop)
        await emitter.emit("x")
        assert calls == ["keep"]

    @pytest.mark.asyncio
    async def test_stop_propagation(self):
        """Test that a handler can stop later handlers."""
        emitter = AsyncEventEmitter()
        calls = []

        def first(event):
            calls.append("first")
            event.stop_propagation()

        emitter.on("x", first, priority=EventPriority.HIGH)
        emitter.on("x", lambda e: calls.append("second"))
        await emitter.emit(Event(type="x"))
        assert calls == ["first"]

    @pytest.mark.asyncio
    async def test_handler_errors_are_reported(self):
        """Test that a failing handler does not stop the others."""
        emitter = AsyncEventEmitter()
        errors = []
        calls = []
        emitter.set_error_handler(lambda exc, key: errors.append((type(exc), key)))

        def broken():
            raise RuntimeError("boom")

        emitter.on("x", broken, priority=EventPriority.HIGH)
        emitter.on("x", lambda: calls.append("ok"))
        await emitter.emit("x")

        assert errors == [(RuntimeError, "x")]
        assert calls == ["ok"]

    def test_emit_sync_skips_coroutines(self):
        """Test that emit_sync only runs plain handlers."""
        emitter = AsyncEventEmitter()
        calls = []

        async def async_handler():
            calls.append("async")

        emitter.on("x", async_handler)
        emitter.on("x", lambda: calls.append("sync"))
        assert emitter.emit_sync("x") is True
        assert calls == ["sync"]

    @pytest.mark.asyncio
    async def test_wait_for(self):
        """Test waiting for an event."""
        emitter = AsyncEventEmitter()

        async def later():
            await asyncio.sleep(0)
            await emitter.emit(HydrationCompleteEvent(manifest="a.js", load_time_ms=1.0))

        task = asyncio.ensure_future(later())
        event = await emitter.wait_for(EventType.HYDRATION_COMPLETE, timeout=1)
        await task

        assert event.data == {"manifest": "a.js", "load_time_ms": 1.0}
        assert emitter.listener_count(EventType.HYDRATION_COMPLETE) == 0

    @pytest.mark.asyncio
    async def test_wait_for_timeout(self):
        """Test that wait_for times out and cleans up."""
        emitter = AsyncEventEmitter()
        with pytest.raises(asyncio.TimeoutError):
            await emitter.wait_for("never", timeout=0.01)
        assert emitter.listener_count("never") == 0


class TestEventBus:
    """Tests for the global EventBus."""

    def test_singleton(self):
        """Test that the bus is shared."""
        assert EventBus() is EventBus()
        assert get_event_bus() is EventBus.get_instance()

    def test_constructor_keeps_handlers(self):
        """Test that calling EventBus() again keeps registrations."""
        get_event_bus().on("x", lambda: None)
        assert EventBus().listener_count("x") == 1

    def test_reset(self):
        """Test that reset drops the instance and its handlers."""
        bus = get_event_bus()
        bus.on("x", lambda: None)
        EventBus.reset()
        assert get_event_bus() is not bus
        assert get_event_bus().listener_count("x") == 0

    @pytest.mark.asyncio
    async def test_on_event_decorator(self):
        """Test registering through the decorator."""
        failures = []

        @on_event(EventType.HYDRATION_FAILED)
        async def record(event):
            failures.append(event.data["error"])

        await get_event_bus().emit(
            HydrationFailedEvent(manifest="x.js", error=ValueError("bad"))
        )
        assert failures == ["bad"]
