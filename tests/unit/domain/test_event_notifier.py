"""Tests for src/domain/events/notifier.py"""

from __future__ import annotations

import asyncio
import logging

import pytest

from domain.events import EventNotifier
from domain.exceptions import NotifierCompletedError


@pytest.fixture
def notifier() -> EventNotifier[str]:
    return EventNotifier("test")


class TestSubscribeEmit:
    def test_emit_reaches_every_subscriber(self, notifier):
        first, second = [], []
        notifier.subscribe(first.append)
        notifier.subscribe(second.append)
        notifier.emit("a")
        assert first == ["a"]
        assert second == ["a"]

    def test_handlers_run_in_registration_order(self, notifier):
        order = []
        notifier.subscribe(lambda v: order.append(1))
        notifier.subscribe(lambda v: order.append(2))
        notifier.subscribe(lambda v: order.append(3))
        notifier.emit("x")
        assert order == [1, 2, 3]

    def test_unsubscribe_stops_delivery(self, notifier):
        received = []
        unsubscribe = notifier.subscribe(received.append)
        notifier.emit("a")
        unsubscribe()
        notifier.emit("b")
        assert received == ["a"]
        assert notifier.subscriber_count == 0

    def test_unsubscribe_is_idempotent(self, notifier):
        unsubscribe = notifier.subscribe(lambda v: None)
        unsubscribe()
        unsubscribe()
        assert notifier.subscriber_count == 0

    def test_same_handler_registered_once(self, notifier):
        received = []
        notifier.subscribe(received.append)
        notifier.subscribe(received.append)
        notifier.emit("a")
        assert received == ["a"]
        assert notifier.subscriber_count == 1

    def test_emission_count(self, notifier):
        notifier.emit("a")
        notifier.emit("b")
        assert notifier.emission_count == 2

    def test_has_subscribers(self, notifier):
        assert notifier.has_subscribers is False
        notifier.subscribe(lambda v: None)
        assert notifier.has_subscribers is True

    def test_handler_removed_mid_emission_is_skipped(self, notifier):
        received = []
        unsubscribe_second = None

        def first(value):
            unsubscribe_second()

        notifier.subscribe(first)
        unsubscribe_second = notifier.subscribe(received.append)
        notifier.emit("a")
        assert received == []


class TestHandlerFailures:
    def test_raising_handler_does_not_stop_others(self, notifier):
        received = []

        def boom(value):
            raise RuntimeError("boom")

        notifier.subscribe(boom)
        notifier.subscribe(received.append)
        notifier.emit("a")
        assert received == ["a"]

    def test_raising_handler_does_not_propagate(self, notifier):
        notifier.subscribe(lambda v: 1 / 0)
        notifier.emit("a")

    def test_raising_handler_is_logged(self, notifier, caplog):
        notifier.subscribe(lambda v: 1 / 0)
        with caplog.at_level(logging.ERROR, logger="domain.events.notifier"):
            notifier.emit("a")
        assert "Error in notifier test handler" in caplog.text


class TestComplete:
    def test_complete_releases_subscribers(self, notifier):
        notifier.subscribe(lambda v: None)
        notifier.complete()
        assert notifier.closed is True
        assert notifier.subscriber_count == 0

    def test_complete_is_idempotent(self, notifier):
        notifier.complete()
        notifier.complete()
        assert notifier.closed is True

    def test_emit_after_complete_is_noop(self, notifier):
        received = []
        notifier.subscribe(received.append)
        notifier.complete()
        notifier.emit("a")
        assert received == []
        assert notifier.emission_count == 0

    def test_subscribe_after_complete_returns_inert_unsubscribe(self, notifier):
        notifier.complete()
        unsubscribe = notifier.subscribe(lambda v: None)
        unsubscribe()
        assert notifier.subscriber_count == 0

    def test_debug_mode_warns_on_completed_use(self, caplog):
        notifier = EventNotifier("dbg", debug=True)
        notifier.complete()
        with caplog.at_level(logging.DEBUG, logger="domain.events.notifier"):
            notifier.subscribe(lambda v: None)
            notifier.emit("a")
        assert "Cannot subscribe to completed notifier dbg" in caplog.text
        assert "Cannot emit on completed notifier dbg" in caplog.text

    def test_no_warning_without_debug(self, notifier, caplog):
        notifier.complete()
        with caplog.at_level(logging.DEBUG, logger="domain.events.notifier"):
            notifier.emit("a")
        assert caplog.text == ""


class TestOptions:
    def test_max_subscribers_logs_but_registers(self, caplog):
        notifier = EventNotifier("limited", max_subscribers=2)
        notifier.subscribe(lambda v: None)
        notifier.subscribe(lambda v: None)
        with caplog.at_level(logging.ERROR, logger="domain.events.notifier"):
            notifier.subscribe(lambda v: None)
        assert "possible leak" in caplog.text
        assert notifier.subscriber_count == 3

    def test_debug_logs_lifecycle(self, caplog):
        notifier = EventNotifier("dbg", debug=True)
        with caplog.at_level(logging.DEBUG, logger="domain.events.notifier"):
            unsubscribe = notifier.subscribe(lambda v: None)
            notifier.emit("payload")
            unsubscribe()
            notifier.complete()
        assert "subscriber added" in caplog.text
        assert "emit #1" in caplog.text
        assert "subscriber removed" in caplog.text
        assert "completed after 1 emission(s)" in caplog.text


class TestSubscribeOnce:
    def test_fires_only_once(self, notifier):
        received = []
        notifier.subscribe_once(received.append)
        notifier.emit("a")
        notifier.emit("b")
        assert received == ["a"]
        assert notifier.subscriber_count == 0

    def test_reentrant_emit_does_not_fire_twice(self, notifier):
        received = []

        def handler(value):
            received.append(value)
            notifier.emit("nested")

        notifier.subscribe_once(handler)
        notifier.emit("outer")
        assert received == ["outer"]

    def test_can_be_cancelled_before_emission(self, notifier):
        received = []
        unsubscribe = notifier.subscribe_once(received.append)
        unsubscribe()
        notifier.emit("a")
        assert received == []


class TestSubscribeIf:
    def test_predicate_evaluated_per_emission(self, notifier):
        received = []
        active = {"on": False}
        notifier.subscribe_if(lambda: active["on"], received.append)
        notifier.emit("a")
        active["on"] = True
        notifier.emit("b")
        active["on"] = False
        notifier.emit("c")
        assert received == ["b"]


class TestToFuture:
    @pytest.mark.asyncio
    async def test_resolves_on_next_emission(self, notifier):
        future = notifier.to_future()
        assert not future.done()
        notifier.emit("value")
        assert await future == "value"
        assert notifier.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_rejects_when_completed(self, notifier):
        notifier.complete()
        future = notifier.to_future()
        with pytest.raises(NotifierCompletedError):
            await future

    @pytest.mark.asyncio
    async def test_pending_future_cancelled_on_complete(self, notifier):
        future = notifier.to_future()
        notifier.complete()
        with pytest.raises(asyncio.CancelledError):
            await future
