"""
Core Module

Provides database, models, schemas, and dependencies for the application.
"""

from .database import Base, engine, SessionLocal, get_db, create_tables, check_database_health
from .models import RecognitionLog, UserPhoneticMapping

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "create_tables",
    "check_database_health",
    # Models
    "RecognitionLog",
    "UserPhoneticMapping",
]
