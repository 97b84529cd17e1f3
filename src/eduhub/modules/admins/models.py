"""
Admin Models

Dashboard accounts. Separate from student accounts: different table,
different token kind.
"""

import enum

from sqlalchemy import Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eduhub.modules.shared import BaseModel


class AdminRole(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    EDITOR = "editor"


class Admin(BaseModel):
    __tablename__ = "admins"

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[AdminRole] = mapped_column(
        Enum(AdminRole, name="admin_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AdminRole.SUPER_ADMIN,
    )

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, email={self.email}, role={self.role.value})>"
