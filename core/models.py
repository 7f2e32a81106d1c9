"""
Database Models Module

SQLAlchemy ORM models for phonetic learning.

Models:
    - RecognitionLog: Append-only log of spelling attempts
    - UserPhoneticMapping: Per-user heard → letters mappings
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from .database import Base


class RecognitionLog(Base):
    """
    One spelling attempt as seen by the recognizer.
    
    Attributes:
        id: Primary key
        user_id: Player identifier
        word_to_spell: Target word (lowercase)
        raw_transcript: Transcript as received (lowercase, trimmed)
        extracted_letters: Letters the decoder produced
        was_correct: Validation outcome
        rejection_reason: not_spelled_out / empty, if rejected
        input_method: voice or keyboard
        created_at: Attempt timestamp
    """
    
    __tablename__ = "recognition_logs"
    __table_args__ = (
        Index("ix_recognition_logs_user_created", "user_id", "created_at"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    word_to_spell = Column(String(255), nullable=False)
    raw_transcript = Column(Text, nullable=False)
    extracted_letters = Column(String(255), nullable=False, default="")
    was_correct = Column(Boolean, nullable=False, default=False)
    rejection_reason = Column(String(50), nullable=True)
    input_method = Column(String(20), nullable=False, default="voice")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    
    def __repr__(self) -> str:
        return (
            f"<RecognitionLog(id={self.id}, user='{self.user_id}', "
            f"word='{self.word_to_spell}', correct={self.was_correct})>"
        )


class UserPhoneticMapping(Base):
    """
    A learned or manually added mapping for one player.
    
    (user_id, heard) is unique so concurrent learning passes converge
    on one row instead of writing duplicates.
    """
    
    __tablename__ = "user_phonetic_mappings"
    __table_args__ = (
        UniqueConstraint("user_id", "heard", name="uq_user_phonetic_mappings_user_heard"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    heard = Column(String(255), nullable=False)
    intended = Column(String(2), nullable=False)
    source = Column(String(20), nullable=False, default="user_learned")
    confidence = Column(Float, nullable=False, default=0.75)
    occurrence_count = Column(Integer, nullable=False, default=0)
    times_applied = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    def __repr__(self) -> str:
        return (
            f"<UserPhoneticMapping(user='{self.user_id}', "
            f"'{self.heard}' → '{self.intended}', source={self.source})>"
        )
