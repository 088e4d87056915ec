"""Pydantic models for web API request/response validation."""

from typing import List

from pydantic import BaseModel, Field, field_validator


class PinModel(BaseModel):
    """A pin the current credential may control."""

    name: str
    number: int
    active_high: bool


class PinListResponse(BaseModel):
    """Response body for the accessible pin list."""

    pins: List[PinModel]


class KeyUpdate(BaseModel):
    """Request body for storing a credential in the key cookie."""

    key: str = Field(min_length=1, max_length=512)

    @field_validator("key")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        """Reject keys made only of whitespace."""
        if not v.strip():
            raise ValueError("key must not be blank")
        return v


class HealthResponse(BaseModel):
    """Response body for the health check."""

    status: str
    lines: int
