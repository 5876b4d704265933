"""
Pytest configuration and shared fixtures for all tests
"""
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add src to Python path for imports
SRC = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC))

from upload_relay.config import Settings  # noqa: E402
from upload_relay.errors import RemoteServiceError  # noqa: E402
from upload_relay.github_client import RepositoryClient, RepositoryInfo  # noqa: E402
from upload_relay.main import create_app  # noqa: E402


class FakeRepositoryClient(RepositoryClient):
    """In-memory stand-in for the GitHub API; records every call."""

    def __init__(self, default_branch="main", info_error=None, fail_on_put=None):
        self.default_branch = default_branch
        self.info_error = info_error
        # zero-based index of the put_file call that should fail
        self.fail_on_put = fail_on_put
        self.info_calls = 0
        self.puts = []
        self.store = {}
        self.closed = False

    async def get_repository_info(self):
        self.info_calls += 1
        if self.info_error is not None:
            raise self.info_error
        return RepositoryInfo(default_branch=self.default_branch)

    async def put_file(self, path, content, message, branch):
        index = len(self.puts)
        self.puts.append({"path": path, "content": content, "message": message, "branch": branch})
        if self.fail_on_put is not None and index == self.fail_on_put:
            raise RemoteServiceError("409 conflict on " + path, status_code=409)
        self.store[path] = content
        return {"content": {"path": path}, "commit": {"sha": f"sha-{index}"}}

    async def aclose(self):
        self.closed = True


@pytest.fixture
def settings():
    return Settings(repo_owner="octo", repo_name="gifts", github_token="test-token-12345")


@pytest.fixture
def fake_repo():
    return FakeRepositoryClient()


@pytest.fixture
def client(settings, fake_repo):
    """TestClient wired to the fake repository client"""
    return TestClient(create_app(settings, fake_repo))
