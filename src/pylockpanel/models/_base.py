"""Base model for lock service responses.

Every response model inherits from :class:`LockPanelBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase keys map to snake_case fields.
* ``extra="ignore"`` so fields added server-side do not break parsing.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class LockPanelBaseModel(BaseModel):
    """Base for lock service response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original response dict."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        # Only auto-stash raw when validating a response dict; keep an
        # explicitly passed raw= untouched.
        if not isinstance(values, dict) or "raw" in values:
            return values
        return {**values, "raw": dict(values)}
