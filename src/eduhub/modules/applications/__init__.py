"""
Applications Module

The multi-step application wizard (validation, drafts, uploads, mail
packaging) and persistence of submitted applications.
"""

from .router import router

__all__ = ["router"]
