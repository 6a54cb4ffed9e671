from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PasteCreateRequest(BaseModel):
    # Field types are checked by the paste store.
    model_config = ConfigDict(extra="ignore")

    content: Any = Field(default=None, description="Paste content")
    ttl_seconds: Any = Field(
        default=None,
        description="Optional lifetime in seconds (integer >= 1)",
    )
    max_views: Any = Field(
        default=None,
        description="Optional number of allowed API reads (integer >= 1)",
    )


class PasteCreatedResponse(BaseModel):
    id: str
    url: str


class PasteResponse(BaseModel):
    content: str
    remaining_views: Optional[int]
    expires_at: Optional[str]


class HealthResponse(BaseModel):
    ok: bool = True
    timestamp: str
