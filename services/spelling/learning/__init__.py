"""
Phonetic Learning Package

Per-user mapping inference, recognition logging and persistence.
"""

from services.spelling.learning.engine import (
    LearningConfig,
    PhoneticLearningEngine,
    get_learning_engine,
    is_protected_mapping,
    validate_candidate,
)
from services.spelling.learning.recognition_logger import (
    RecognitionEventIn,
    RecognitionLogger,
    build_log_query,
    create_log_record,
    validate_recognition_event,
)
from services.spelling.learning.store import (
    LearningPassResult,
    PhoneticLearningStore,
    get_phonetic_learning_store,
)

__all__ = [
    # Engine
    'LearningConfig',
    'PhoneticLearningEngine',
    'get_learning_engine',
    'is_protected_mapping',
    'validate_candidate',
    # Logging
    'RecognitionEventIn',
    'RecognitionLogger',
    'build_log_query',
    'create_log_record',
    'validate_recognition_event',
    # Persistence
    'LearningPassResult',
    'PhoneticLearningStore',
    'get_phonetic_learning_store',
]
