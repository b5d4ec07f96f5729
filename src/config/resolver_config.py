"""Resolver tuning as one immutable value object.

The orchestrator and the persistence finalizer receive a
:class:`ResolverConfig` at construction instead of reading module-level
constants, so thresholds and platform priority can differ per deployment
(and per test) without code changes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from src.utils.canonical import DEFAULT_PLATFORM, DEFAULT_PLATFORM_PRIORITY
from src.utils.errors import ConfigurationError


class ResolverConfig(BaseModel):
    """Confidence thresholds and selection settings for track resolution.

    Attributes
    ----------
    confidence_strong:
        Identification at or above this is accepted without validation.
    confidence_ok:
        Identification at or above this is accepted when the hints agree;
        also the line between ``resolved`` and ``needs_review`` on persist.
    confidence_min:
        Cached rows below this are treated as cache misses.
    hint_similarity_min:
        Minimum weighted hint similarity for an ``ok`` acceptance.
    """

    model_config = ConfigDict(frozen=True)

    confidence_strong: float = Field(default=0.80, ge=0.0, le=1.0)
    confidence_ok: float = Field(default=0.65, ge=0.0, le=1.0)
    confidence_min: float = Field(default=0.50, ge=0.0, le=1.0)
    hint_similarity_min: float = Field(default=0.70, ge=0.0, le=1.0)
    title_weight: float = Field(default=0.6, ge=0.0)
    artist_weight: float = Field(default=0.4, ge=0.0)
    platform_priority: tuple[str, ...] = DEFAULT_PLATFORM_PRIORITY
    default_platform: str = DEFAULT_PLATFORM
    provider_timeout_seconds: float = Field(default=12.0, gt=0.0)
    speculative_catalog_search: bool = False

    @model_validator(mode="after")
    def _check_threshold_order(self) -> ResolverConfig:
        if not self.confidence_min <= self.confidence_ok <= self.confidence_strong:
            msg = (
                "confidence thresholds must satisfy min <= ok <= strong "
                f"(got min={self.confidence_min}, ok={self.confidence_ok}, "
                f"strong={self.confidence_strong})"
            )
            raise ValueError(msg)
        if self.title_weight + self.artist_weight <= 0:
            raise ValueError("title_weight + artist_weight must be positive")
        return self

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> ResolverConfig:
        """Build from the ``resolver`` section of :func:`load_config` output.

        Unknown keys are ignored; missing keys take the defaults.

        Raises
        ------
        ConfigurationError
            If a value is out of range or the thresholds are out of order.
        """
        section = config.get("resolver") or {}
        known = {key: value for key, value in section.items() if key in cls.model_fields}
        if "platform_priority" in known and known["platform_priority"] is not None:
            known["platform_priority"] = tuple(known["platform_priority"])
        try:
            return cls(**known)
        except ValidationError as exc:
            raise ConfigurationError(
                message=f"Invalid resolver configuration: {exc}",
            ) from exc
