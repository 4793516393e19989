"""Inbound sync events as delivered by the remote channel."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SyncEvent(BaseModel):
    """One key/value update published by the producer device."""

    model_config = ConfigDict(frozen=True)

    topic_path: str = Field(..., description="Data path, e.g. '/weather'")
    payload: dict[str, Any] = Field(default_factory=dict, description="Named fields as published")

    @field_validator("topic_path")
    @classmethod
    def _require_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("topic_path must start with '/'")
        return value
