"""Pydantic schema for the health check payload."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthPayload(BaseModel):
    """Body of the health check (wrapped in the success envelope under "health")."""

    service: str = Field(description="Service name")
    status: Literal["ok", "degraded"] = Field(description="ok when the database answers")
    time: datetime = Field(description="Server time (UTC)")
    client_ip: str = Field(description="Caller IP as resolved by the API")
    db: Literal["connected", "disconnected"] = Field(description="Database connectivity")
