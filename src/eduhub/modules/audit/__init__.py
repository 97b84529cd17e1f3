"""Audit log module."""

from eduhub.modules.audit.models import AuditEvent, AuditLog

__all__ = ["AuditEvent", "AuditLog"]
