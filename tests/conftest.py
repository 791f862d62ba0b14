"""Pytest configuration: a throwaway SQLite database and an ASGI client."""

import os
import tempfile

# Point the engine at a temporary database before application modules load
_DB_DIR = tempfile.mkdtemp(prefix="blog-tests-")
os.environ["ASYNC_DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
)
os.environ.setdefault("NOTIFY_RECENT_HOURS", "24")

from typing import Dict, List  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from src.core.database import create_tables, drop_tables, engine, get_session  # noqa: E402
from src.apps.accounts.models.user import User  # noqa: E402
from src.apps.accounts.repositories.user_repository import UserRepository  # noqa: E402
from src.apps.blog.mailers.post_mailer import PostDigest, PostMailer  # noqa: E402
from src.apps.blog.repositories.post_repository import PostRepository  # noqa: E402
from src.apps.blog.routers.post_router import get_post_mailer, get_post_service  # noqa: E402


class RecordingMailer(PostMailer):
    """Mailer that keeps every digest instead of logging it."""

    def __init__(self):
        super().__init__(sender="tests@blog.local")
        self.sent: List[PostDigest] = []

    def send(self, digest: PostDigest) -> None:
        self.sent.append(digest)


@pytest.fixture(autouse=True)
async def database():
    await drop_tables()
    await create_tables()
    yield
    await engine.dispose()


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def mailer():
    recording = RecordingMailer()
    app.dependency_overrides[get_post_mailer] = lambda: recording
    yield recording
    app.dependency_overrides.pop(get_post_mailer, None)


@pytest.fixture
def post_repository() -> PostRepository:
    return PostRepository(get_session)  # type: ignore


@pytest.fixture
def user_repository() -> UserRepository:
    return UserRepository(get_session)  # type: ignore


@pytest.fixture
def post_service():
    return get_post_service()


@pytest.fixture
async def users(user_repository) -> Dict[str, User]:
    alice = await user_repository.create(
        {"first_name": "Alice", "last_name": "Doe", "email": "alice@example.com"}
    )
    bob = await user_repository.create(
        {"first_name": "Bob", "last_name": "Roe", "email": "bob@example.com"}
    )
    admin = await user_repository.create(
        {
            "first_name": "Ada",
            "last_name": "Admin",
            "email": "admin@example.com",
            "is_admin": True,
        }
    )
    return {"alice": alice, "bob": bob, "admin": admin}


def auth(user: User) -> Dict[str, str]:
    return {"X-User-Id": str(user.id)}
