# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

E = TypeVar("E")


__all__ = (
    "Observable",
    "Collective",
    "Ordering",
)


class Observable(ABC):
    """Observable entities expose notification channels."""


class Collective(Observable, Generic[E]):
    """Base for collections of elements."""

    @abstractmethod
    def add(self, item, /) -> bool:
        pass

    @abstractmethod
    def remove(self, item, /) -> None:
        pass


class Ordering(Observable, Generic[E]):
    """Base for index-addressable element orderings."""

    @abstractmethod
    def insert(self, index: int, item, /) -> bool:
        pass

    @abstractmethod
    def remove_at(self, index: int, /) -> None:
        pass
