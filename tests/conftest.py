# Standard library imports
import os
from pathlib import Path
import tempfile

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-decisiondeck-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / 'decisiondeck-test.db'}")
os.environ.setdefault("BACKEND_CORS_ORIGINS", "http://localhost:3000")

# Third-party imports
from httpx import ASGITransport, AsyncClient
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Local application imports
from decisiondeck.core.db import build_async_engine, get_async_session
from decisiondeck.main import create_app
from decisiondeck.models import Base, Candidate, User, UserRole
from decisiondeck.services.auth.token_services import create_access_token
from decisiondeck.utils.password_utils import get_password_hash

DEFAULT_PASSWORD = "secret123"
# bcrypt is slow on purpose, hash once for every fixture user
DEFAULT_PASSWORD_HASH = get_password_hash(DEFAULT_PASSWORD)


@pytest.fixture
async def engine(tmp_path):
    engine = build_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'decisiondeck.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def make_user(session_factory):
    async def _make(
        username: str = "voter_one",
        role: UserRole = UserRole.VOTER,
        is_active: bool = True,
        email: str | None = None,
    ) -> User:
        async with session_factory() as db:
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                hashed_password=DEFAULT_PASSWORD_HASH,
                role=role,
                is_active=is_active,
            )
            db.add(user)
            await db.commit()
            return user

    return _make


@pytest.fixture
def make_candidate(session_factory):
    async def _make(name: str, position: str = "President", party: str | None = None, is_active: bool = True) -> Candidate:
        async with session_factory() as db:
            candidate = Candidate(name=name, position=position, party=party, is_active=is_active)
            db.add(candidate)
            await db.commit()
            return candidate

    return _make


@pytest.fixture
def app(session_factory):
    application = create_app()
    application.state.session_factory = session_factory

    async def _override_session():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_async_session] = _override_session
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def headers_for():
    def _headers(user: User) -> dict[str, str]:
        token, _ = create_access_token(user_id=user.id, email=user.email, role=user.role.value)
        return {"Authorization": f"Bearer {token}"}

    return _headers


