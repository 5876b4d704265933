"""
Repository client for the GitHub REST API
Only the two calls the upload flow needs: repository metadata and
create-or-update file contents.
"""
import abc
import base64
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from .config import Settings
from .errors import RemoteServiceError

logger = logging.getLogger(__name__)

FALLBACK_BRANCH = "main"
API_VERSION = "2022-11-28"


class RepositoryInfo(BaseModel):
    default_branch: Optional[str] = None


class RepositoryClient(abc.ABC):
    """Boundary to the remote repository; swapped for a fake in tests."""

    @abc.abstractmethod
    async def get_repository_info(self) -> RepositoryInfo:
        ...

    @abc.abstractmethod
    async def put_file(self, path: str, content: bytes, message: str, branch: str) -> Dict[str, Any]:
        ...

    async def get_default_branch(self) -> str:
        info = await self.get_repository_info()
        return info.default_branch or FALLBACK_BRANCH

    async def aclose(self) -> None:
        pass


def _error_message(response: httpx.Response) -> str:
    """GitHub puts a human readable reason under "message"; fall back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or f"GitHub API returned HTTP {response.status_code}"


class GitHubRepositoryClient(RepositoryClient):
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.owner = settings.repo_owner
        self.repo = settings.repo_name
        self._owns_client = http_client is None
        headers = {
            "Authorization": f"Bearer {settings.github_token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if http_client is None:
            http_client = httpx.AsyncClient(
                base_url=settings.github_api_url,
                headers=headers,
                timeout=settings.github_timeout,
            )
        else:
            http_client.headers.update(headers)
        self.http = http_client

    @property
    def repo_path(self) -> str:
        return f"/repos/{quote(self.owner, safe='')}/{quote(self.repo, safe='')}"

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteServiceError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning(f"action=github.error method={method} url={url} status={response.status_code}")
            raise RemoteServiceError(message, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteServiceError(
                f"GitHub API returned a non-JSON body (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from exc

    async def get_repository_info(self) -> RepositoryInfo:
        data = await self._request("GET", self.repo_path)
        return RepositoryInfo(default_branch=data.get("default_branch"))

    async def put_file(self, path: str, content: bytes, message: str, branch: str) -> Dict[str, Any]:
        payload = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": branch,
        }
        return await self._request("PUT", f"{self.repo_path}/contents/{quote(path, safe='/')}", json=payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http.aclose()
