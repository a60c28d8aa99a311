"""Pydantic schema for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="APP_ENV (dev or prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Whether the users/sessions/transactions database answered SELECT 1",
    )
