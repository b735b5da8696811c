"""
JobTrail Backend — Shared Response Schemas
============================================

What:  Response shapes used by several routers: errors, health, plain success.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """
    Body of every error response.

    Produced by the global exception handlers in main.py; declared here so the
    OpenAPI document describes it.
    """

    error: str = Field(description="Machine-readable code, e.g. 'not_found'")
    message: str = Field(description="Human-readable explanation")
    details: Optional[Dict[str, Any]] = None
    request_id: str = ""


class SuccessResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    """GET /health response."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["healthy", "degraded"]
    version: str
    database: Literal["connected", "disconnected"]
    storage_mode: str = Field(alias="storageMode")
    uptime_seconds: float = Field(alias="uptimeSeconds")
