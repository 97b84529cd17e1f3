"""
Admins Module

Dashboard accounts, admin auth and the dashboard endpoints.
"""

from .router import router

__all__ = ["router"]
