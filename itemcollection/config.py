# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = (
    "CollectionSettings",
    "settings",
)


class CollectionSettings(BaseSettings, frozen=True):
    """Process-wide defaults with environment variable support.

    Every field can be overridden with an ``ITEMCOLLECTION_`` prefixed
    environment variable, e.g. ``ITEMCOLLECTION_DEFAULT_CAPACITY=20``.
    """

    model_config = SettingsConfigDict(
        env_prefix="ITEMCOLLECTION_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DEFAULT_CAPACITY: int = Field(
        -1,
        ge=-1,
        description=(
            "Capacity given to collections built without one; -1 is unbounded"
        ),
    )
    ISOLATE_SUBSCRIBER_ERRORS: bool = Field(
        True,
        description="Log and skip a raising subscriber instead of propagating",
    )
    LOG_LEVEL: str = Field(
        "INFO",
        description="Level of the package logger",
    )

    _instance: ClassVar[Any] = None

    @field_validator("LOG_LEVEL", mode="before")
    def _normalize_level(cls, value: Any) -> str:
        level = str(value).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value!r}")
        return level


# Create a singleton instance
settings = CollectionSettings()
# Store the instance in the class variable for singleton pattern
CollectionSettings._instance = settings
