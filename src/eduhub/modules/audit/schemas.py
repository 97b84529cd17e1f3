"""Audit Schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    event_type: str
    user_id: str | None
    ip_address: str | None
    details: dict[str, Any]
    created_at: datetime
