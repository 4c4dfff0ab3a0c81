"""Pytest configuration and fixtures."""
import os
from typing import Any, Callable, Dict, Generator, List, Tuple

os.environ.setdefault("NEXTAUTH_SECRET", "test-secret")

import fakeredis
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.v1.posts_maintenance import get_timer
from app.core.config import settings
from app.core.database import get_db
from app.core.redis_client import get_redis
from app.db import models  # noqa: F401  registers tables on Base.metadata
from app.db.base import Base
from app.db.models.content_item import ContentItem
from app.db.models.term import Term
from app.main import app
from app.repositories.content_repository import ContentRepository
from app.repositories.job_store import JobStore
from app.services.scan_jobs import ScanJobService

# In-memory SQLite by default; point TEST_DATABASE_URL at PostgreSQL to run
# the suite against the production dialect
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

if TEST_DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(TEST_DATABASE_URL)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingTimer:
    """In-memory timer facility that records what would have been scheduled."""

    def __init__(self) -> None:
        self.pending: Dict[str, Tuple[float, Dict[str, Any]]] = {}
        self.history: List[Tuple[float, str, Dict[str, Any]]] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("timer facility unavailable")

    def schedule_once(self, delay: float, key: str, payload: Dict[str, Any]) -> bool:
        self._check()
        if key in self.pending:
            return False
        self.pending[key] = (delay, payload)
        self.history.append((delay, key, payload))
        return True

    def is_scheduled(self, key: str) -> bool:
        self._check()
        return key in self.pending

    def release(self, key: str) -> None:
        self.pending.pop(key, None)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def redis_client() -> Generator[fakeredis.FakeRedis, None, None]:
    """Isolated fake Redis server per test."""
    client = fakeredis.FakeRedis()
    try:
        yield client
    finally:
        client.flushall()


@pytest.fixture
def timer() -> RecordingTimer:
    return RecordingTimer()


@pytest.fixture
def make_items(db: Session) -> Callable[..., List[int]]:
    """Factory that inserts content items and returns their IDs."""

    def _make(
        count: int,
        content_type: str = "post",
        status: str = "publish",
        last_scanned_at: Any = None,
    ) -> List[int]:
        items = [
            ContentItem(
                title=f"{content_type} {i}",
                content_type=content_type,
                status=status,
                last_scanned_at=last_scanned_at,
            )
            for i in range(count)
        ]
        db.add_all(items)
        db.commit()
        return [item.id for item in items]

    return _make


@pytest.fixture
def make_terms(db: Session) -> Callable[..., None]:
    """Factory that inserts taxonomy terms."""

    def _make(names: List[str], taxonomy: str = "category") -> None:
        db.add_all([Term(name=name, taxonomy=taxonomy) for name in names])
        db.commit()

    return _make


@pytest.fixture
def records(db: Session) -> ContentRepository:
    return ContentRepository(db)


@pytest.fixture
def job_store(redis_client) -> JobStore:
    return JobStore(redis_client)


@pytest.fixture
def service(records: ContentRepository, job_store: JobStore, timer: RecordingTimer) -> ScanJobService:
    """Scan service with the production defaults (batch size 50)."""
    return ScanJobService(records, job_store, timer)


def make_token(role: str = "administrator", sub: str = "admin-1") -> str:
    return jwt.encode({"sub": sub, "role": role}, settings.NEXTAUTH_SECRET, algorithm="HS256")


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def subscriber_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(role='subscriber', sub='subscriber-1')}"}


@pytest.fixture(scope="function")
def client(db: Session, redis_client, timer: RecordingTimer) -> Generator[TestClient, None, None]:
    """Create a test client with database, Redis and timer overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: redis_client
    app.dependency_overrides[get_timer] = lambda: timer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_factory(db: Session) -> Callable[[], Session]:
    """Session factory bound to the test database, for code that opens its own sessions."""
    return TestingSessionLocal
