# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from .collection import UNBOUNDED, ItemCollection
from .signal import Signal

__all__ = (
    "ItemCollection",
    "Signal",
    "UNBOUNDED",
)
