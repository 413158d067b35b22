"""Base model and enum for traffic-light data.

Payload models inherit from :class:`TrafficLightBaseModel` which provides
a frozen, extra-ignoring pydantic configuration and a ``raw`` dict that
captures the original payload.

Code enums inherit from :class:`CodeEnum` which adds a ``_missing_`` hook
returning the ``UNKNOWN`` member for any value without a mapped member.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CodeEnum(enum.IntEnum):
    """Base for external code enums.

    Every subclass **must** define an ``UNKNOWN`` member. Codes the
    producer sends that have no mapped member resolve to ``UNKNOWN``
    instead of raising ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> CodeEnum:
        # pylint: disable=no-member
        if hasattr(cls, "UNKNOWN"):
            unknown: CodeEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class TrafficLightBaseModel(BaseModel):
    """Base for models parsed from raw payload maps."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original payload map."""
