"""Pytest configuration and fixtures for vidshare tests.

Test isolation strategy:
- Every test gets its own in-memory SQLite database (schema from the ORM metadata)
- The database has a single shared connection, so factories commit and
  sessions never hold a transaction open across an HTTP call
- HTTP tests use a client with the real auth middleware and HS256 test tokens
- Media uploads go to FakeMediaRelay
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("VIDSHARE_ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("COOKIE_SECURE", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from vidshare.app import create_app
from vidshare.auth.tokens import TokenService
from vidshare.config import clear_settings_cache
from vidshare.db.engine import create_db_engine
from vidshare.db.models import Base
from vidshare.db.session import create_session_factory, set_session_factory
from vidshare.storage.media import FakeMediaRelay
from tests.helpers import TEST_ACCESS_SECRET, TEST_REFRESH_SECRET


@pytest.fixture(autouse=True)
def test_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point uploads at a per-test directory and reset the settings cache."""
    monkeypatch.setenv("UPLOAD_TMP_DIR", str(tmp_path / "uploads"))
    monkeypatch.delenv("MEDIA_CLEANUP_MODE", raising=False)
    monkeypatch.delenv("CLOUDINARY_CLOUD_NAME", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database with the full schema."""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> Generator[sessionmaker[Session], None, None]:
    factory = create_session_factory(engine)
    set_session_factory(factory)
    yield factory
    set_session_factory(None)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Session for factories and direct service calls."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(access_secret=TEST_ACCESS_SECRET, refresh_secret=TEST_REFRESH_SECRET)


@pytest.fixture
def media_relay() -> FakeMediaRelay:
    return FakeMediaRelay()


@pytest.fixture
def app(session_factory, token_service: TokenService, media_relay: FakeMediaRelay):
    """App with auth middleware, test tokens, the test database and the fake relay."""
    return create_app(
        token_service=token_service,
        session_factory=session_factory,
        media_relay=media_relay,
    )


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as client:
        yield client


@pytest.fixture
def public_client(session_factory, media_relay) -> Generator[TestClient, None, None]:
    """Client without auth middleware, for public endpoints."""
    app = create_app(
        skip_auth_middleware=True, session_factory=session_factory, media_relay=media_relay
    )
    with TestClient(app) as client:
        yield client
