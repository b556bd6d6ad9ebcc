# src/combatstats/schemas/common.py

"""Response envelopes shared across resources."""

from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body returned for every handled error."""

    error: str = Field(..., description="Human-readable error message")


class HealthStatus(BaseModel):
    """Liveness probe result.

    Attributes:
        status: "OK" when the store answered, "ERROR" otherwise
        database: "Connected" or "Disconnected"
        server: Database host, when the URL names one
        error: Failure message, only present on error
        timestamp: When the probe ran (UTC)
    """

    status: str
    database: str
    server: str | None = None
    error: str | None = None
    timestamp: datetime
