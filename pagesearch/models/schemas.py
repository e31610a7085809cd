from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# --- Requests ---


class SearchRequest(BaseModel):
    query: str = Field(max_length=2000)
    request_id: str | None = Field(default=None, max_length=128)


# --- Responses ---


class SearchResponseData(BaseModel):
    response: str
    timestamp: str
    metadata: dict[str, Any]


class SearchResponse(BaseModel):
    success: bool = True
    data: SearchResponseData
