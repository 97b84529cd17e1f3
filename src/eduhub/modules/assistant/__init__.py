"""
Assistant Module

AI chat assistant for course and funding questions.
"""

from .router import router

__all__ = ["router"]
