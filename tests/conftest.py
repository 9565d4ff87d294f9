import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from agent_chat.app.api.deps import get_chat_settings, get_db_session
from agent_chat.app.core.config import Settings, get_settings
from agent_chat.app.db import models  # noqa: F401
from agent_chat.app.db.base import Base
from agent_chat.app.main import create_app


@pytest.fixture(scope="session")
def engine():
    engine = create_engine("sqlite+pysqlite:///:memory:", connect_args={"check_same_thread": False}, future=True)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(bind=connection, autocommit=False, autoflush=False, future=True)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def chat_settings():
    return Settings(
        _env_file=None,
        LLM_BASE_URL="http://llm.test",
        LLM_API_KEY="test-key",
        CHAT_SYSTEM_PROMPT="You are a test assistant.",
    )


@pytest.fixture
def app(db_session, chat_settings):
    app = create_app()

    def override_db():
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_chat_settings] = lambda: chat_settings
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_settings():
    return get_settings()


def make_token(user_id, email: str, settings) -> str:
    payload = {"sub": str(user_id), "email": email}
    return jwt.encode(payload, settings.auth_secret_key, algorithm=settings.auth_algorithm)


@pytest.fixture
def token_for(auth_settings):
    def _make(user_id, email: str) -> str:
        return make_token(user_id, email, auth_settings)

    return _make


@pytest.fixture
def user_token(auth_settings):
    return make_token(1, "user1@example.com", auth_settings)


@pytest.fixture
def other_user_token(auth_settings):
    return make_token(2, "user2@example.com", auth_settings)


@pytest.fixture
def auth_headers(user_token):
    return {"Authorization": f"Bearer {user_token}"}
