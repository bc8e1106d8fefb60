# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import pytest

from itemcollection import ItemCollection


class EventRecorder:
    """Subscribes to both channels of a collection and logs what fires.

    Each record also captures the collection contents at the moment the
    notification was delivered.
    """

    def __init__(self, collection: ItemCollection):
        self.collection = collection
        self.events = []
        self.snapshots = []
        collection.on_item_added.subscribe(self._on_added)
        collection.on_item_removed.subscribe(self._on_removed)

    def _on_added(self, index, item):
        self.events.append(("added", index, item))
        self.snapshots.append(list(self.collection.items))

    def _on_removed(self, item):
        self.events.append(("removed", item))
        self.snapshots.append(list(self.collection.items))

    @property
    def added(self):
        return [e[1:] for e in self.events if e[0] == "added"]

    @property
    def removed(self):
        return [e[1] for e in self.events if e[0] == "removed"]

    def reset(self):
        self.events.clear()
        self.snapshots.clear()


@pytest.fixture
def record():
    """Factory attaching an EventRecorder to a collection."""
    return EventRecorder


@pytest.fixture
def unbounded():
    return ItemCollection()


@pytest.fixture
def abcd():
    """Unbounded collection holding a, b, c, d."""
    return ItemCollection(items=["a", "b", "c", "d"])
