"""
Routers Module

API routers for the spelling voice engine.
"""

from .validation import router as validation_router
from .phonetic_learning import router as phonetic_learning_router

__all__ = ["validation_router", "phonetic_learning_router"]
