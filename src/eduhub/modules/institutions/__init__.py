"""
Institutions Module

Static catalogue of institutions and courses, search and filtering, and
the admin course sync that extends course lists at runtime.
"""

from .router import router

__all__ = ["router"]
