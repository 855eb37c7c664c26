"""Pytest configuration and fixtures."""

import os

# Settings are cached on first use, so configure them before importing the app
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["GITHUB_TOKEN"] = ""

import httpx  # noqa: E402
import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from pymongo import MongoClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from crm.config import get_settings  # noqa: E402
from crm.database import Base, Database  # noqa: E402
from crm.documents import DocumentStore  # noqa: E402
from crm.main import create_app  # noqa: E402
from crm.services.github import GitHubService, get_github_service  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")
TEST_MONGODB_URL = os.getenv("TEST_MONGODB_URL")
TEST_MONGODB_DATABASE = "crm_test"


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


def github_repo_payload(
    full_name: str,
    stars: int = 2500,
    forks: int = 300,
    open_issues: int = 12,
    language: str | None = "Python",
    description: str | None = "My first repository on GitHub!",
    created_at: str = "2011-01-26T19:01:12Z",
) -> dict:
    """Build a GitHub ``GET /repos/{owner}/{repo}`` response body."""
    owner, name = full_name.split("/")
    return {
        "id": 1296269,
        "name": name,
        "full_name": full_name,
        "owner": {"login": owner},
        "html_url": f"https://github.com/{full_name}",
        "stargazers_count": stars,
        "forks_count": forks,
        "open_issues_count": open_issues,
        "created_at": created_at,
        "updated_at": "2024-01-01T00:00:00Z",
        "description": description,
        "language": language,
        "default_branch": "master",
        "private": False,
        "archived": False,
        "disabled": False,
    }


class FakeGitHub:
    """In-process stand-in for the GitHub REST API, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.repos: dict[str, dict] = {}
        self.statuses: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def add_repo(self, full_name: str, **kwargs) -> dict:
        payload = github_repo_payload(full_name, **kwargs)
        self.repos[full_name] = payload
        return payload

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        repo_path = request.url.path.removeprefix("/repos/")
        if repo_path in self.statuses:
            return httpx.Response(self.statuses[repo_path], json={"message": "error"})
        if repo_path in self.repos:
            return httpx.Response(200, json=self.repos[repo_path])
        return httpx.Response(404, json={"message": "Not Found"})

    def service(self) -> GitHubService:
        return GitHubService(transport=httpx.MockTransport(self.handler))


@pytest.fixture(scope="function")
def database():
    """Relational store: in-memory SQLite unless TEST_DATABASE_URL points at PostgreSQL."""
    if TEST_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(TEST_DATABASE_URL):
            create_database(TEST_DATABASE_URL)
        db = Database(TEST_DATABASE_URL)
    else:
        db = Database(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    db.init_schema()

    yield db

    # In-memory SQLite vanishes with its pool; a real server needs explicit cleanup
    if TEST_DATABASE_URL:
        with db.engine.begin() as connection:
            for table in reversed(Base.metadata.sorted_tables):
                connection.execute(table.delete())
    db.dispose()


@pytest.fixture(scope="function")
def documents():
    """Document store: mongomock unless TEST_MONGODB_URL points at MongoDB."""
    if TEST_MONGODB_URL:
        store = DocumentStore(MongoClient(TEST_MONGODB_URL), TEST_MONGODB_DATABASE)
    else:
        store = DocumentStore(mongomock.MongoClient(), TEST_MONGODB_DATABASE)
    store.ensure_indexes()

    yield store

    if TEST_MONGODB_URL:
        # The app closes its client on shutdown, so drop through a fresh one
        with MongoClient(TEST_MONGODB_URL) as cleanup:
            cleanup.drop_database(TEST_MONGODB_DATABASE)


@pytest.fixture
def db(database):
    """A database session for tests that use the credential store directly."""
    session = database.SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture(scope="function")
def client(database, documents, fake_github):
    """Create a test client around the injected stores and fake GitHub."""
    app = create_app(settings=get_settings(), database=database, documents=documents)
    app.dependency_overrides[get_github_service] = fake_github.service

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_user(client: TestClient, email: str, password: str = "secret1") -> AuthHeaders:
    """Register a user and return bearer headers for them."""
    response = client.post("/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201
    data = response.json()["data"]
    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"},
        user_id=data["user"]["id"],
        email=data["user"]["email"],
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register_user(client, "alice@example.com")


@pytest.fixture
def other_auth_headers(client):
    """A second, unrelated user."""
    return register_user(client, "bob@example.com", "secret2")


@pytest.fixture
def react_project():
    return {
        "owner": "facebook",
        "name": "react",
        "url": "https://github.com/facebook/react",
        "stars": 200000,
        "forks": 40000,
        "openIssues": 800,
        "createdAt": 1609459200,
    }


@pytest.fixture
def make_user(client):
    """Factory fixture registering extra users on demand."""

    def _make_user(email: str, password: str = "secret1") -> AuthHeaders:
        return register_user(client, email, password)

    return _make_user
