from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from typing import List

from app.core.config import settings


class RecordCandidate(BaseModel):
    description: str
    tags: List[str] = Field(default_factory=list)
    path: str


class Record(BaseModel):
    """A stored document description. ``id`` is assigned by the store only."""
    id: int = Field(..., gt=0)
    description: str
    tags: List[str] = Field(default_factory=list)
    path: str


class Proposal(BaseModel):
    description: str
    tags: List[str] = Field(default_factory=list)
    path: str


class UploadResponse(BaseModel):
    proposal: Proposal


class SaveRequest(BaseModel):
    description: str = Field(..., min_length=1, description="Confirmed document description")
    tags: List[str] = Field(default_factory=list, description="Up to 10 tags")
    path: str = Field(..., min_length=1, description="Path returned by /api/upload")

    @field_validator("description", "path")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, v: List[str]) -> List[str]:
        tags = [t.strip() for t in v if t and t.strip()]
        if len(tags) > settings.max_tags:
            raise ValueError(f"at most {settings.max_tags} tags allowed")
        return tags


class SaveResponse(BaseModel):
    ok: bool = True
    saved: Record


class ChatRequest(BaseModel):
    message: str = Field(..., description="Free-text query")
    top_k: int | None = Field(default=None, ge=1, le=100, description="Number of hits (default 10)")


class ChatResponse(BaseModel):
    hits: List[Record]
