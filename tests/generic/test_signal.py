# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for Signal (itemcollection/generic/signal.py)."""

import copy
import gc
import logging

import pytest

from itemcollection import Signal


class Listener:
    def __init__(self):
        self.calls = []

    def on_event(self, *args):
        self.calls.append(args)


# ---------------------------------------------------------------------------
# subscribe / unsubscribe
# ---------------------------------------------------------------------------


class TestSubscribe:
    def test_subscribe_adds_callback(self):
        sig = Signal()
        sig.subscribe(lambda *a: None)
        assert sig.subscriber_count == 1
        assert len(sig) == 1

    def test_subscribe_idempotent(self):
        sig = Signal()

        def handler(*a):
            pass

        sig.subscribe(handler)
        sig.subscribe(handler)
        assert sig.subscriber_count == 1

    def test_bound_method_idempotent(self):
        sig = Signal()
        listener = Listener()
        sig.subscribe(listener.on_event)
        sig.subscribe(listener.on_event)
        assert sig.subscriber_count == 1

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError):
            Signal().subscribe("not callable")

    def test_strong_lambda_survives_collection(self):
        sig = Signal()
        calls = []
        sig.subscribe(lambda x: calls.append(x))
        gc.collect()
        sig.emit(1)
        assert calls == [1]


class TestUnsubscribe:
    def test_unsubscribe_removes(self):
        sig = Signal()
        calls = []

        def handler(x):
            calls.append(x)

        sig.subscribe(handler)
        assert sig.unsubscribe(handler) is True
        sig.emit(1)
        assert calls == []

    def test_unsubscribe_unknown(self):
        assert Signal().unsubscribe(lambda: None) is False

    def test_clear(self):
        sig = Signal()
        sig.subscribe(lambda: None)
        sig.clear()
        assert sig.subscriber_count == 0


class TestWeakSubscribers:
    def test_weak_bound_method_pruned(self):
        sig = Signal()
        listener = Listener()
        sig.subscribe(listener.on_event, weak=True)
        sig.emit("x")
        assert listener.calls == [("x",)]

        del listener
        gc.collect()
        assert sig.subscriber_count == 0

    def test_weak_function_pruned(self):
        sig = Signal()

        def handler(*a):
            pass

        sig.subscribe(handler, weak=True)
        assert sig.subscriber_count == 1
        del handler
        gc.collect()
        assert sig.subscriber_count == 0


# ---------------------------------------------------------------------------
# emit
# ---------------------------------------------------------------------------


class TestEmit:
    def test_registration_order(self):
        sig = Signal()
        order = []
        sig.subscribe(lambda i, x: order.append(("first", i, x)))
        sig.subscribe(lambda i, x: order.append(("second", i, x)))
        sig.emit(0, "a")
        assert order == [("first", 0, "a"), ("second", 0, "a")]

    def test_subscribing_during_emit_waits_for_next_round(self):
        sig = Signal()
        calls = []

        def late(x):
            calls.append(("late", x))

        def first(x):
            calls.append(("first", x))
            sig.subscribe(late)

        sig.subscribe(first)
        sig.emit(1)
        assert calls == [("first", 1)]
        sig.emit(2)
        assert calls == [("first", 1), ("first", 2), ("late", 2)]

    def test_isolated_errors_are_logged(self, caplog):
        sig = Signal("item_added", isolate_errors=True)
        calls = []

        def broken(x):
            raise ValueError("bad subscriber")

        sig.subscribe(broken)
        sig.subscribe(calls.append)

        with caplog.at_level(logging.ERROR):
            sig.emit("a")

        assert calls == ["a"]
        assert "item_added" in caplog.text
        assert "bad subscriber" in caplog.text

    def test_unisolated_errors_propagate(self):
        sig = Signal(isolate_errors=False)
        calls = []

        def broken(x):
            raise ValueError("bad subscriber")

        sig.subscribe(broken)
        sig.subscribe(calls.append)

        with pytest.raises(ValueError, match="bad subscriber"):
            sig.emit("a")
        assert calls == []

    def test_default_isolation_follows_settings(self, monkeypatch):
        from itemcollection.config import CollectionSettings

        monkeypatch.setattr(
            "itemcollection.generic.signal.settings",
            CollectionSettings(ISOLATE_SUBSCRIBER_ERRORS=False),
        )
        assert Signal().isolate_errors is False

    def test_duplicate_subscription_notified_once(self):
        sig = Signal()
        calls = []
        sig.subscribe(calls.append)
        sig.subscribe(calls.append)
        sig.emit("a")
        assert calls == ["a"]

    def test_repr(self):
        sig = Signal("item_removed")
        sig.subscribe(lambda x: None)
        assert repr(sig) == "Signal(name='item_removed', subscribers=1)"


# ---------------------------------------------------------------------------
# copying
# ---------------------------------------------------------------------------


class TestCopy:
    def test_copy_keeps_settings_drops_subscribers(self):
        sig = Signal("item_added", isolate_errors=False)
        sig.subscribe(lambda *a: None)
        clone = copy.copy(sig)
        assert clone is not sig
        assert clone.name == "item_added"
        assert clone.isolate_errors is False
        assert clone.subscriber_count == 0
        assert sig.subscriber_count == 1

    def test_deepcopy_with_weak_subscriber(self):
        sig = Signal()
        listener = Listener()
        sig.subscribe(listener.on_event, weak=True)
        clone = copy.deepcopy(sig)
        assert clone.subscriber_count == 0
        assert sig.subscriber_count == 1
