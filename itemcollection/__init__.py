# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

import logging

from ._errors import CollectionError, ItemNotFoundError, ValidationError
from .config import settings
from .generic import UNBOUNDED, ItemCollection, Signal
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(settings.LOG_LEVEL)

__all__ = (
    "CollectionError",
    "ItemCollection",
    "ItemNotFoundError",
    "Signal",
    "UNBOUNDED",
    "ValidationError",
    "settings",
    "__version__",
)
