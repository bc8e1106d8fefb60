# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from copy import copy
from typing import Any, Generic, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationInfo,
    field_validator,
    model_validator,
)
from typing_extensions import Self

from .._concepts import Collective, Ordering
from .._errors import ItemNotFoundError, ValidationError
from ..config import settings
from .signal import Signal

T = TypeVar("T")

UNBOUNDED = -1

__all__ = (
    "ItemCollection",
    "UNBOUNDED",
)

logger = logging.getLogger(__name__)


class ItemCollection(BaseModel, Collective[T], Ordering[T], Generic[T]):
    """An ordered, optionally bounded sequence of items that announces changes.

    Every mutation that makes an item visible fires ``on_item_added`` with
    ``(index, item)`` once storage reflects it. Every removal through the
    notifying path fires ``on_item_removed`` with ``(item)`` before storage is
    updated. Transfers move items between two collections and either succeed
    as a whole or leave both untouched.

    Capacity is checked with a strict less-than against the count the
    operation is about to reach: ``add`` compares the current count, batch
    operations compare ``count + n``, and ``insert`` compares ``count + 1``.
    A bounded collection therefore only reaches its stated capacity through
    ``add`` (or ``replace`` at the end).

    Routine outcomes (no room, out-of-range replace target) are reported by
    returning False. Contract violations such as negative indices raise
    :class:`~itemcollection._errors.ValidationError`.

    Attributes:
        items (list[T]):
            Backing storage, in order. Mutate it only through the methods
            below, otherwise no notifications fire.
        capacity (int):
            Maximum number of items, or ``UNBOUNDED`` (-1).
        item_type (type | tuple[type, ...] | None):
            Optional guard; items that are not instances raise ``TypeError``.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
    )

    items: list[T] = Field(
        default_factory=list,
        title="Items",
        description="The ordered backing storage.",
    )
    capacity: int = Field(
        default_factory=lambda: settings.DEFAULT_CAPACITY,
        ge=UNBOUNDED,
        title="Capacity",
        description="Maximum item count; -1 disables the limit.",
    )
    item_type: type | tuple[type, ...] | None = Field(
        None,
        exclude=True,
        description="Optional type every item must be an instance of.",
    )
    _on_item_added: Signal = PrivateAttr(
        default_factory=lambda: Signal("item_added")
    )
    _on_item_removed: Signal = PrivateAttr(
        default_factory=lambda: Signal("item_removed")
    )

    @field_validator("items", "capacity")
    def _validate_bounds(cls, value: Any, info: ValidationInfo) -> Any:
        """Reject a count above capacity, whichever side is being set.

        Runs before the value is stored, on construction and on assignment.
        Assigning ``items`` directly fires no notifications.
        """
        if info.field_name == "items":
            count = len(value)
            capacity = info.data.get("capacity", UNBOUNDED)
        else:
            count = len(info.data.get("items", ()))
            capacity = value
        if capacity != UNBOUNDED and count > capacity:
            raise ValueError(f"{count} items exceed capacity {capacity}")
        return value

    @model_validator(mode="after")
    def _validate_item_types(self) -> Self:
        if self.item_type is not None:
            for item in self.items:
                self._validate_item(item)
        return self

    def __copy__(self) -> Self:
        """Shallow copy with its own storage list and empty channels.

        The items themselves are shared; subscribers are not carried over.
        """
        copied = super().__copy__()
        copied.__dict__["items"] = list(self.items)
        copied._on_item_added = copy(self._on_item_added)
        copied._on_item_removed = copy(self._on_item_removed)
        return copied

    @property
    def on_item_added(self) -> Signal:
        """Fired as ``(index, item)`` after an item becomes visible."""
        return self._on_item_added

    @property
    def on_item_removed(self) -> Signal:
        """Fired as ``(item)`` before an item leaves storage."""
        return self._on_item_removed

    @property
    def is_bounded(self) -> bool:
        return self.capacity != UNBOUNDED

    @property
    def is_full(self) -> bool:
        """True when ``add`` would be rejected."""
        return not self._fits(len(self.items))

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------

    def _fits(self, count: int) -> bool:
        return not self.is_bounded or count < self.capacity

    def _admits(self, count: int, operation: str) -> bool:
        if self._fits(count):
            return True
        logger.debug(
            f"{operation} rejected: {count} is not below "
            f"capacity {self.capacity}"
        )
        return False

    def _validate_item(self, item: Any) -> None:
        if self.item_type is None or isinstance(item, self.item_type):
            return
        if isinstance(self.item_type, tuple):
            expected = ", ".join(t.__name__ for t in self.item_type)
        else:
            expected = self.item_type.__name__
        raise TypeError(
            f"Item must be of type {expected}, not {item.__class__.__name__}."
        )

    @staticmethod
    def _check_index(index: Any) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValidationError.from_value(
                index,
                expected="int",
                message=(
                    f"indices must be integers, not {type(index).__name__}"
                ),
            )
        if index < 0:
            raise ValidationError.from_value(
                index,
                expected="non-negative int",
                message=f"Index must not be negative, got {index}",
            )
        return index

    @staticmethod
    def _check_count(count: Any) -> int:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError.from_value(
                count,
                expected="non-negative int",
                message=f"Count must be a non-negative integer, got {count!r}",
            )
        return count

    def _check_position(self, index: Any) -> int:
        """Validate an insertion point, which may equal ``len(self)``."""
        index = self._check_index(index)
        if index > len(self.items):
            raise ItemNotFoundError(
                f"Insert position {index} is past the end",
                details={"index": index, "length": len(self.items)},
            )
        return index

    def _resolve_range(self, span: slice | range) -> tuple[int, int]:
        """Turn a half-open ``slice``/``range`` into ``(start, stop)``."""
        if isinstance(span, range):
            start, stop, step = span.start, span.stop, span.step
        elif isinstance(span, slice):
            start = 0 if span.start is None else span.start
            stop = len(self.items) if span.stop is None else span.stop
            step = 1 if span.step is None else span.step
        else:
            raise ValidationError.from_value(span, expected="slice or range")

        if step != 1:
            raise ValidationError.from_value(
                span, expected="step of 1", message="Ranges must be contiguous"
            )
        self._check_index(start)
        self._check_index(stop)
        if stop < start:
            raise ValidationError.from_value(
                span,
                expected="stop >= start",
                message=f"Range stop {stop} precedes start {start}",
            )
        length = len(self.items)
        if stop > length:
            raise ItemNotFoundError(
                f"Range {start}:{stop} exceeds collection of {length}",
                details={"start": start, "stop": stop, "length": length},
            )
        return start, stop

    @staticmethod
    def _is_predicate(match: Any) -> bool:
        return callable(match) and not isinstance(match, Iterable)

    def _check_other(self, other: Any) -> ItemCollection:
        if not isinstance(other, ItemCollection):
            raise ValidationError.from_value(other, expected="ItemCollection")
        if other is self:
            raise ValidationError(
                "Cannot transfer items from a collection into itself"
            )
        return other

    # ------------------------------------------------------------------
    # adding
    # ------------------------------------------------------------------

    def add(self, item: T, /) -> bool:
        """Appends ``item`` if there is room.

        Returns:
            bool: True if the item was added.
        """
        self._validate_item(item)
        if not self._admits(len(self.items), "add"):
            return False
        self.items.append(item)
        self._on_item_added.emit(len(self.items) - 1, item)
        return True

    def add_range(self, items: Iterable[T], /) -> bool:
        """Appends every item in ``items``, or none of them.

        Each item fires ``on_item_added`` at its resulting index right after
        it is appended, in the order provided.

        Returns:
            bool: True if the whole batch fit.
        """
        batch = list(items)
        for item in batch:
            self._validate_item(item)
        if not self._admits(len(self.items) + len(batch), "add_range"):
            return False
        for item in batch:
            self.items.append(item)
            self._on_item_added.emit(len(self.items) - 1, item)
        return True

    def add_n(self, item: T, count: int, /) -> bool:
        """Appends ``count`` copies of ``item``, or none.

        Returns:
            bool: True if all copies fit.
        """
        self._check_count(count)
        self._validate_item(item)
        if not self._admits(len(self.items) + count, "add_n"):
            return False
        for _ in range(count):
            self.items.append(item)
            self._on_item_added.emit(len(self.items) - 1, item)
        return True

    def insert(self, index: int, item: T, /) -> bool:
        """Inserts ``item`` at ``index``, shifting later items right.

        Raises:
            ValidationError: If ``index`` is negative.
            ItemNotFoundError: If ``index`` is past the end.
        """
        index = self._check_position(index)
        self._validate_item(item)
        if not self._admits(len(self.items) + 1, "insert"):
            return False
        self.items.insert(index, item)
        self._on_item_added.emit(index, item)
        return True

    def insert_range(self, index: int, items: Iterable[T], /) -> bool:
        """Inserts ``items`` at ``index`` keeping their relative order.

        Notifications fire once the whole batch is in place, at
        ``index``, ``index + 1``, ...
        """
        index = self._check_position(index)
        batch = list(items)
        for item in batch:
            self._validate_item(item)
        if not self._admits(len(self.items) + len(batch), "insert_range"):
            return False
        self.items[index:index] = batch
        for offset, item in enumerate(batch):
            self._on_item_added.emit(index + offset, item)
        return True

    def replace(self, index: int, item: T, /) -> bool:
        """Puts ``item`` at ``index``.

        An occupied slot fires ``on_item_removed`` for the old value, is
        overwritten, then fires ``on_item_added``. A slot equal to the current
        length is appended to and only fires ``on_item_added``. Anything
        further out is not a valid target and returns False.

        The capacity gate applies to the index, not to the resulting count.
        """
        index = self._check_index(index)
        self._validate_item(item)
        if not self._admits(index, "replace"):
            return False
        if index > len(self.items):
            logger.debug(
                f"replace rejected: index {index} beyond "
                f"length {len(self.items)}"
            )
            return False
        if index == len(self.items):
            self.items.append(item)
        else:
            self._on_item_removed.emit(self.items[index])
            self.items[index] = item
        self._on_item_added.emit(index, item)
        return True

    def replace_range(self, index: int, items: Iterable[T], /) -> bool:
        """Replaces item by item starting at ``index``.

        Each position is gated on its own, so the call can partially succeed.

        Returns:
            bool: True if at least one replacement happened.
        """
        index = self._check_index(index)
        replaced = False
        for offset, item in enumerate(list(items)):
            if self.replace(index + offset, item):
                replaced = True
        return replaced

    # ------------------------------------------------------------------
    # removing
    # ------------------------------------------------------------------

    def remove(self, item: T, /) -> None:
        """Removes the first item equal to ``item``.

        ``on_item_removed`` fires before storage changes, and fires even when
        nothing equal to ``item`` is present: the notification echoes the
        request rather than confirming a deletion.
        """
        self._on_item_removed.emit(item)
        if item in self.items:
            self.items.remove(item)

    def remove_at(self, index: int, /) -> None:
        """Removes the value currently at ``index`` through :meth:`remove`.

        Raises:
            ItemNotFoundError: If ``index`` is past the end.
        """
        index = self._check_index(index)
        if index >= len(self.items):
            raise ItemNotFoundError(
                f"index {index} item not found",
                details={"index": index, "length": len(self.items)},
            )
        self.remove(self.items[index])

    def remove_range(self, span: slice | range, /) -> None:
        """Removes every value in the half-open span, by value, in order."""
        start, stop = self._resolve_range(span)
        for item in self.items[start:stop]:
            self.remove(item)

    def remove_all(self, match: Callable[[T], bool] | Iterable[T], /) -> None:
        """Removes items matching a predicate, or each of the given items.

        With a predicate, the matching items are collected first and then
        removed one by one. With an iterable, :meth:`remove` is called for
        every element given, so each one fires whether present or not.
        """
        if self._is_predicate(match):
            targets = [item for item in self.items if match(item)]
        else:
            targets = list(match)
        for item in targets:
            self.remove(item)

    def remove_count(self, item: T, n: int, /) -> None:
        """Silently removes up to ``n`` occurrences of ``item``.

        Unlike every other removal, no ``on_item_removed`` fires.
        """
        self._check_count(n)
        for _ in range(n):
            if item not in self.items:
                break
            self.items.remove(item)

    def clear(self) -> None:
        """Removes every item front to back, each through :meth:`remove`."""
        for item in list(self.items):
            self.remove(item)

    # ------------------------------------------------------------------
    # transferring
    # ------------------------------------------------------------------

    def transfer_all_from(self, other: ItemCollection[T], /) -> bool:
        """Moves every item of ``other`` into this collection.

        Items are appended here in their original order, then ``other`` is
        cleared. If they do not all fit, neither collection changes.
        """
        other = self._check_other(other)
        batch = list(other.items)
        if not self._admits(len(self.items) + len(batch), "transfer_all_from"):
            return False
        self.add_range(batch)
        other.clear()
        logger.debug(f"transferred {len(batch)} items")
        return True

    def transfer_from_other_by_index(
        self, other: ItemCollection[T], index: int, /
    ) -> bool:
        """Moves the item at ``other[index]`` into this collection.

        Raises:
            ItemNotFoundError: If ``index`` is past the end of ``other``.
        """
        other = self._check_other(other)
        item = other[index]
        if not self._admits(len(self.items), "transfer_from_other_by_index"):
            return False
        self.add(item)
        other.remove_at(index)
        return True

    def transfer_item_from_other(
        self, other: ItemCollection[T], item: T, n: int = 1, /
    ) -> bool:
        """Moves up to ``n`` occurrences of ``item`` from ``other``.

        The first occurrences found are moved first. Whether there is room is
        decided on ``n``, not on how many occurrences ``other`` holds, so the
        call reports success even when fewer than ``n`` (or none) were moved.
        """
        other = self._check_other(other)
        self._check_count(n)
        self._validate_item(item)
        if not self._admits(len(self.items) + n, "transfer_item_from_other"):
            return False
        moved = min(n, other.count(item))
        for _ in range(moved):
            found = other.items[other.index(item)]
            self.add(found)
            other.remove(found)
        logger.debug(f"transferred {moved} of {n} requested items")
        return True

    def transfer_items_from_other(
        self,
        other: ItemCollection[T],
        match: Callable[[T], bool] | Iterable[T],
        /,
    ) -> bool:
        """Moves every item of ``other`` that matches.

        ``match`` is either a predicate or a collection of values to compare
        against. The capacity check is sized to the number of matched items.
        """
        other = self._check_other(other)
        if self._is_predicate(match):
            matched = [item for item in other.items if match(item)]
        else:
            wanted = list(match)
            matched = [item for item in other.items if item in wanted]
        if not self._admits(
            len(self.items) + len(matched), "transfer_items_from_other"
        ):
            return False
        self.add_range(matched)
        for item in matched:
            other.remove(item)
        logger.debug(f"transferred {len(matched)} matched items")
        return True

    def transfer_range_from_other(
        self, other: ItemCollection[T], span: slice | range, /
    ) -> bool:
        """Moves the items in the half-open span of ``other``."""
        other = self._check_other(other)
        start, stop = other._resolve_range(span)
        if not self._admits(
            len(self.items) + stop - start, "transfer_range_from_other"
        ):
            return False
        self.add_range(other.items[start:stop])
        other.remove_range(range(start, stop))
        return True

    # ------------------------------------------------------------------
    # querying
    # ------------------------------------------------------------------

    def get_range(self, span: slice | range, /) -> list[T]:
        """Returns a snapshot list of the items in the half-open span."""
        start, stop = self._resolve_range(span)
        return self.items[start:stop]

    def indices_of(self, value: Any, /) -> list[int]:
        """Returns each index holding an item equal to ``value``, in order."""
        return [i for i, item in enumerate(self.items) if item == value]

    def count(self, item: Any, /) -> int:
        return self.items.count(item)

    def index(self, item: Any, /) -> int:
        """Index of the first item equal to ``item``.

        Raises:
            ValueError: If no item is equal.
        """
        return self.items.index(item)

    def __getitem__(self, key: int | slice) -> T | list[T]:
        """Gets one item by index, or a snapshot list by slice.

        Raises:
            ItemNotFoundError: If the index or slice is past the end.
            TypeError: If `key` is neither an int nor a slice.
        """
        if isinstance(key, slice):
            return self.get_range(key)
        if isinstance(key, bool) or not isinstance(key, int):
            key_cls = key.__class__.__name__
            raise TypeError(
                f"indices must be integers or slices, not {key_cls}"
            )
        index = self._check_index(key)
        if index >= len(self.items):
            raise ItemNotFoundError(
                f"index {index} item not found",
                details={"index": index, "length": len(self.items)},
            )
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def __contains__(self, item: Any) -> bool:
        return item in self.items

    def __iter__(self) -> Iterator[T]:
        """Iterates over a snapshot, so removing while iterating is safe."""
        return iter(list(self.items))
