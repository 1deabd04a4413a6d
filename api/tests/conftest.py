"""Shared fixtures.

Environment is configured before any `learnhub` import so that the cached
settings see the test values. The application is exercised without its
lifespan: services are built on in-memory repositories and injected through
`dependency_overrides`.
"""

import copy
import os
import tempfile
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest


TEST_JWT_KEY = "test-session-key-with-enough-length-1234"

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ["AUTH_JWT_KEY"] = TEST_JWT_KEY
os.environ["AUTH_ALGORITHM"] = "HS256"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="learnhub-logs-")
os.environ["LOG_FORMAT"] = "console"
os.environ["FIREBASE_STORAGE_BUCKET"] = "learnhub-test.appspot.com"
os.environ["STORAGE_CDN_DOMAIN"] = "https://cdn.learnhub.test"

from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402

from learnhub.config import get_settings  # noqa: E402
from learnhub.courses.models import Course  # noqa: E402
from learnhub.courses.service import CourseService  # noqa: E402
from learnhub.progress.models import UserCourseProgress  # noqa: E402
from learnhub.progress.service import ProgressService  # noqa: E402
from learnhub.storage.service import StorageService  # noqa: E402
from learnhub.transactions.models import Transaction  # noqa: E402
from learnhub.transactions.service import TransactionService  # noqa: E402


get_settings.cache_clear()


# ==============================================================================
# In-memory repositories
# ==============================================================================


class InMemoryCourseRepository:
    """Stores copies, so callers never share objects with the store."""

    def __init__(self) -> None:
        self.courses: dict[str, Course] = {}
        self.puts = 0

    async def get(self, course_id: str) -> Course | None:
        course = self.courses.get(course_id)
        return copy.deepcopy(course) if course else None

    async def scan(self, category: str | None = None) -> list[Course]:
        return [
            copy.deepcopy(c)
            for c in self.courses.values()
            if category is None or c.category == category
        ]

    async def put(self, course: Course) -> None:
        self.puts += 1
        self.courses[course.course_id] = copy.deepcopy(course)

    async def delete(self, course_id: str) -> None:
        self.courses.pop(course_id, None)


class InMemoryProgressRepository:
    def __init__(self) -> None:
        self.rows: dict[tuple[str, str], UserCourseProgress] = {}

    async def get(self, user_id: str, course_id: str) -> UserCourseProgress | None:
        progress = self.rows.get((user_id, course_id))
        return copy.deepcopy(progress) if progress else None

    async def list_by_user(self, user_id: str) -> list[UserCourseProgress]:
        return [copy.deepcopy(p) for (u, _), p in self.rows.items() if u == user_id]

    async def put(self, progress: UserCourseProgress) -> None:
        self.rows[(progress.user_id, progress.course_id)] = copy.deepcopy(progress)


class InMemoryTransactionRepository:
    def __init__(self) -> None:
        self.transactions: list[Transaction] = []

    async def query(self, user_id: str | None = None) -> list[Transaction]:
        return [
            t for t in self.transactions if user_id is None or t.user_id == user_id
        ]

    async def add(self, transaction: Transaction) -> bool:
        key = (transaction.user_id, transaction.transaction_id)
        if any((t.user_id, t.transaction_id) == key for t in self.transactions):
            return False
        self.transactions.append(transaction)
        return True


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def course_repository() -> InMemoryCourseRepository:
    return InMemoryCourseRepository()


@pytest.fixture
def progress_repository() -> InMemoryProgressRepository:
    return InMemoryProgressRepository()


@pytest.fixture
def transaction_repository() -> InMemoryTransactionRepository:
    return InMemoryTransactionRepository()


@pytest.fixture
def mock_bucket() -> Mock:
    """Storage bucket whose blobs sign a fixed URL."""
    bucket = Mock()
    blob = Mock()
    blob.generate_signed_url.return_value = "https://signed.example/upload?sig=abc"
    bucket.blob.return_value = blob
    return bucket


@pytest.fixture
def storage_service(settings, mock_bucket) -> StorageService:
    return StorageService(settings, bucket=mock_bucket)


@pytest.fixture
def course_service(course_repository, storage_service) -> CourseService:
    return CourseService(repository=course_repository, storage=storage_service)


@pytest.fixture
def progress_service(progress_repository, course_repository) -> ProgressService:
    return ProgressService(
        repository=progress_repository, course_repository=course_repository
    )


@pytest.fixture
def payment_gateway() -> Mock:
    gateway = Mock()
    gateway.create_payment_intent = AsyncMock(return_value="pi_123_secret_456")
    return gateway


@pytest.fixture
def transaction_service(
    transaction_repository, course_service, progress_service, payment_gateway
) -> TransactionService:
    return TransactionService(
        repository=transaction_repository,
        course_service=course_service,
        progress_service=progress_service,
        gateway=payment_gateway,
    )


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Mint a session token the API accepts."""

    def _make(sub: str = "teacher-1", expires_in: timedelta = timedelta(minutes=5)) -> str:
        payload = {
            "sub": sub,
            "sid": f"sess_{sub}",
            "exp": datetime.now(UTC) + expires_in,
        }
        return jwt.encode(payload, TEST_JWT_KEY, algorithm="HS256")

    return _make


@pytest.fixture
def auth_headers(make_token) -> Callable[[str], dict[str, str]]:
    def _headers(user_id: str = "teacher-1") -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


@pytest.fixture
def app(course_service, progress_service, transaction_service, storage_service):
    from learnhub.courses.dependencies import get_course_service  # noqa: PLC0415
    from learnhub.main import app as fastapi_app  # noqa: PLC0415
    from learnhub.progress.dependencies import get_progress_service  # noqa: PLC0415
    from learnhub.storage.dependencies import get_storage_service  # noqa: PLC0415
    from learnhub.transactions.dependencies import (  # noqa: PLC0415
        get_transaction_service,
    )

    fastapi_app.dependency_overrides = {
        get_course_service: lambda: course_service,
        get_progress_service: lambda: progress_service,
        get_transaction_service: lambda: transaction_service,
        get_storage_service: lambda: storage_service,
    }
    yield fastapi_app
    fastapi_app.dependency_overrides = {}


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    """Test client without lifespan (no database connection)."""
    yield TestClient(app, raise_server_exceptions=False)
