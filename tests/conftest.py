"""
Test Configuration

Pytest configuration and shared fixtures for all tests.
"""

import os

# Must be set before config.settings is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from core.database import Base
from services.spelling.anticheat import ClassifierThresholds, SpelledOutClassifier
from services.spelling.decoding import TranscriptDecoder
from services.spelling.dictionary import PhoneticDictionary
from services.spelling.learning import LearningConfig, PhoneticLearningEngine, PhoneticLearningStore
from services.spelling.models import InputMode, RecognitionEvent
from services.spelling.validation import SpellingValidator

# =============================================================================
# Engine Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def dictionary():
    """Default static phonetic tables."""
    return PhoneticDictionary()


@pytest.fixture
def decoder(dictionary):
    return TranscriptDecoder(dictionary)


@pytest.fixture
def classifier(dictionary):
    return SpelledOutClassifier(ClassifierThresholds(), dictionary=dictionary)


@pytest.fixture
def validator(decoder, classifier):
    return SpellingValidator(decoder=decoder, classifier=classifier)


@pytest.fixture
def learning_engine(dictionary):
    return PhoneticLearningEngine(dictionary=dictionary, config=LearningConfig())


@pytest.fixture
def make_event():
    """Factory for failed voice recognition events."""
    def _make(
        word: str,
        transcript: str,
        event_id: str = None,
        user_id: str = "player-1",
        was_correct: bool = False,
        **kwargs
    ) -> RecognitionEvent:
        return RecognitionEvent(
            user_id=user_id,
            word_to_spell=word,
            raw_transcript=transcript,
            extracted_letters=kwargs.pop("extracted_letters", ""),
            was_correct=was_correct,
            event_id=event_id,
            input_method=kwargs.pop("input_method", InputMode.VOICE),
            **kwargs
        )
    return _make


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[sessionmaker, None]:
    """
    Session factory over a fresh database file.
    
    A file rather than :memory: so background writes get their own
    connection, as they do in production.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    yield sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    
    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Get test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(learning_engine):
    return PhoneticLearningStore(engine=learning_engine, window_days=30, max_events=500)


# =============================================================================
# API Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client(session_factory, store) -> AsyncGenerator[AsyncClient, None]:
    """Get async test client wired to the test database."""
    from main import app
    from core.database import get_db
    from core.dependencies import get_session_factory, get_store
    
    async def override_get_db():
        async with session_factory() as session:
            yield session
    
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_store] = lambda: store
    
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    
    app.dependency_overrides.clear()
