"""
Upload handling
Commits one request's files under a fresh batch id, then a share descriptor
describing them.
"""
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, NamedTuple, Sequence
from urllib.parse import quote

from .config import Settings
from .errors import BadRequest
from .github_client import RepositoryClient
from .schemas import ShareDescriptor, UploadedFile, UploadResponse

logger = logging.getLogger(__name__)

NO_FILES_MESSAGE = 'No files uploaded (form field "files")'
DEFAULT_FILENAME = "file"

# Characters encodeURIComponent leaves alone besides alphanumerics
URI_COMPONENT_SAFE = "-_.!~*'()"


class IncomingFile(NamedTuple):
    name: str
    content: bytes


def new_batch_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_z(moment: datetime) -> str:
    """Millisecond ISO-8601 in UTC with a trailing Z, e.g. 2026-10-18T09:15:02.123Z"""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def sanitize_filename(name: str) -> str:
    """Strip leading slashes only; nothing else is validated."""
    return (name or "").lstrip("/") or DEFAULT_FILENAME


def upload_path(batch_id: str, name: str) -> str:
    return f"uploads/{batch_id}/{name}"


def share_path(batch_id: str) -> str:
    return f"shares/{batch_id}.json"


def raw_base_url(owner: str, repo: str, branch: str) -> str:
    return f"https://raw.githubusercontent.com/{owner}/{repo}/{branch}/"


def pages_url(owner: str, repo: str, batch_id: str) -> str:
    return f"https://{owner}.github.io/{repo}/view.html?share={batch_id}"


def serialize_share(share: ShareDescriptor) -> bytes:
    return json.dumps(share.model_dump(), indent=2, ensure_ascii=False).encode("utf-8")


async def handle_upload(
    files: Sequence[IncomingFile],
    client: RepositoryClient,
    settings: Settings,
    *,
    new_id: Callable[[], str] = new_batch_id,
    now: Callable[[], datetime] = utcnow,
) -> UploadResponse:
    """
    Commit every file and the batch's share descriptor to the repository.

    Files are committed one at a time in the order given. The first failure
    propagates; files committed before it stay in the repository and no
    descriptor is written.

    Raises:
        BadRequest: no files were supplied (no remote call is made)
        RemoteServiceError: any repository API call failed
    """
    if not files:
        raise BadRequest(NO_FILES_MESSAGE)

    batch_id = new_id()
    owner, repo = settings.repo_owner, settings.repo_name
    logger.info(f"action=upload.start id={batch_id} files={len(files)}")

    branch = await client.get_default_branch()
    raw_base = raw_base_url(owner, repo, branch)

    uploaded: List[UploadedFile] = []
    for incoming in files:
        name = sanitize_filename(incoming.name)
        path = upload_path(batch_id, name)
        await client.put_file(path, incoming.content, f"Add uploaded file {path}", branch)
        uploaded.append(
            UploadedFile(
                name=name,
                path=path,
                url=raw_base + f"uploads/{batch_id}/" + quote(name, safe=URI_COMPONENT_SAFE),
            )
        )
        logger.info(f"action=upload.file id={batch_id} path={path} bytes={len(incoming.content)}")

    share = ShareDescriptor(id=batch_id, created_at=isoformat_z(now()), files=uploaded)
    descriptor_path = share_path(batch_id)
    await client.put_file(descriptor_path, serialize_share(share), f"Add share descriptor {descriptor_path}", branch)
    logger.info(f"action=upload.share id={batch_id} path={descriptor_path} branch={branch}")

    response = UploadResponse(id=batch_id, pagesURL=pages_url(owner, repo, batch_id), share=share)
    logger.info(f"action=upload.done id={batch_id} files={len(uploaded)}")
    return response
