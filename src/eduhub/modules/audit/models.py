"""
Audit Models

Append-only event log written by server-side handlers.
"""

import enum
from typing import Any

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from eduhub.modules.shared import BaseModel


class AuditEvent(str, enum.Enum):
    USER_REGISTER = "USER_REGISTER"
    USER_LOGIN = "USER_LOGIN"
    USER_VERIFY = "USER_VERIFY"
    ADMIN_LOGIN = "ADMIN_LOGIN"
    ADMIN_REGISTER = "ADMIN_REGISTER"
    APP_SUBMIT = "APP_SUBMIT"
    COURSE_SYNC = "COURSE_SYNC"


class AuditLog(BaseModel):
    __tablename__ = "audit_logs"

    event_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    # Student or admin id; the two identity spaces share the column
    user_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True, index=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<AuditLog(event={self.event_type}, user={self.user_id})>"
