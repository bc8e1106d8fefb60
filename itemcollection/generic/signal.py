# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable
from typing import Any

from ..config import settings

__all__ = ("Signal",)

logger = logging.getLogger(__name__)


class _Strong:
    """Mimics the weakref call interface for a strongly held callback."""

    __slots__ = ("_callback",)

    def __init__(self, callback: Callable[..., Any]):
        self._callback = callback

    def __call__(self) -> Callable[..., Any]:
        return self._callback


class Signal:
    """Ordered, per-instance list of subscriber callbacks.

    Subscribers are invoked synchronously, in registration order, with the
    positional arguments passed to :meth:`emit`. Each subscriber is held
    strongly unless subscribed with ``weak=True``, in which case a weakref
    (``WeakMethod`` for bound methods) is stored and pruned once its target
    is garbage collected.

    Subscribing a callback equal to one already registered is a no-op, so
    each callback is notified at most once per emit. Copying a Signal
    yields one with the same settings and no subscribers.

    Example::

        added = Signal("item_added")
        added.subscribe(lambda index, item: print(index, item))
        added.emit(0, "sword")

    Args:
        name: Label used in log records.
        isolate_errors: When True, an exception raised by a subscriber is
            logged and delivery continues with the next subscriber. When
            False, the exception propagates and later subscribers are not
            called. Defaults to ``settings.ISOLATE_SUBSCRIBER_ERRORS``.
    """

    __slots__ = ("name", "isolate_errors", "_subscribers")

    def __init__(
        self, name: str = "signal", *, isolate_errors: bool | None = None
    ):
        self.name = name
        self.isolate_errors = (
            settings.ISOLATE_SUBSCRIBER_ERRORS
            if isolate_errors is None
            else isolate_errors
        )
        self._subscribers: list[Callable[[], Callable[..., Any] | None]] = []

    def __len__(self) -> int:
        return self.subscriber_count

    def __repr__(self) -> str:
        count = len(self._subscribers)
        return f"Signal(name={self.name!r}, subscribers={count})"

    def __copy__(self) -> Signal:
        return Signal(self.name, isolate_errors=self.isolate_errors)

    def __deepcopy__(self, memo: dict[int, Any]) -> Signal:
        return self.__copy__()

    def subscribe(
        self, callback: Callable[..., Any], *, weak: bool = False
    ) -> None:
        """Add subscriber callback (idempotent).

        Args:
            callback: Callable receiving the emitted arguments.
            weak: Store a weak reference instead of the callback itself.

        Raises:
            TypeError: If ``callback`` is not callable.
        """
        if not callable(callback):
            raise TypeError(
                f"Subscriber must be callable, not {type(callback).__name__}"
            )
        for ref in self._subscribers:
            if ref() == callback:
                return
        if not weak:
            self._subscribers.append(_Strong(callback))
        elif hasattr(callback, "__self__"):
            self._subscribers.append(weakref.WeakMethod(callback))
        else:
            self._subscribers.append(weakref.ref(callback))

    def unsubscribe(self, callback: Callable[..., Any]) -> bool:
        """Remove subscriber callback.

        Returns:
            bool: True if the callback was subscribed.
        """
        for ref in list(self._subscribers):
            if ref() == callback:
                self._subscribers.remove(ref)
                return True
        return False

    def clear(self) -> None:
        """Drop every subscriber."""
        self._subscribers.clear()

    def _live_callbacks(self) -> list[Callable[..., Any]]:
        """Prune dead weakrefs, return live callbacks."""
        callbacks, alive_refs = [], []
        for ref in self._subscribers:
            if (cb := ref()) is not None:
                callbacks.append(cb)
                alive_refs.append(ref)
        self._subscribers[:] = alive_refs
        return callbacks

    @property
    def subscriber_count(self) -> int:
        """Count live subscribers (triggers dead ref cleanup)."""
        return len(self._live_callbacks())

    def emit(self, *args: Any) -> None:
        """Call every live subscriber with ``args``.

        The subscriber list is snapshotted first, so a callback may subscribe
        or unsubscribe without affecting the current delivery.
        """
        for callback in self._live_callbacks():
            if not self.isolate_errors:
                callback(*args)
                continue
            try:
                callback(*args)
            except Exception as e:
                logger.error(
                    f"Error in {self.name} subscriber {callback!r}: {e}",
                    exc_info=True,
                )
