"""
GitHub Upload Relay - HTTP API
Receives multipart uploads and commits them to the configured repository
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging
import sys

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings, load_settings
from .errors import ConfigMissing, UploadRelayError
from .github_client import GitHubRepositoryClient, RepositoryClient
from .schemas import ErrorResponse, UploadResponse
from .uploads import IncomingFile, handle_upload

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# the upload route parses its own form, so the body is documented here
UPLOAD_REQUEST_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {"files": {"type": "array", "items": {"type": "string", "format": "binary"}}},
                }
            }
        },
    }
}


def create_app(settings: Settings, repository_client: Optional[RepositoryClient] = None) -> FastAPI:
    """Application factory; pass a repository client to replace the GitHub one."""
    if repository_client is None:
        repository_client = GitHubRepositoryClient(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.repository_client.aclose()

    app = FastAPI(title="GitHub Upload Relay", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository_client = repository_client

    # ============== ENDPOINTS ==============

    @app.get("/", response_class=PlainTextResponse)
    def root():
        """Liveness check"""
        return "GitHub uploader running"

    @app.post(
        "/upload",
        response_model=UploadResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        openapi_extra=UPLOAD_REQUEST_BODY,
    )
    async def upload(request: Request):
        """Commit the uploaded files and a share descriptor; return the viewing URL"""
        try:
            form = await request.form()
            # text values and file inputs left empty are not uploads
            parts = [p for p in form.getlist("files") if not isinstance(p, str) and p.filename]
            incoming = [IncomingFile(p.filename, await p.read()) for p in parts]
            return await handle_upload(
                incoming,
                request.app.state.repository_client,
                request.app.state.settings,
            )
        except UploadRelayError as e:
            logger.exception(f"action=upload.failed status={e.status_code}")
            return JSONResponse(status_code=e.status_code, content={"error": str(e)})
        except Exception as e:
            logger.exception("action=upload.failed status=500")
            return JSONResponse(status_code=500, content={"error": str(e) or repr(e)})

    return app


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def run() -> None:
    """Console entry point: load settings, exit 1 if incomplete, then serve."""
    configure_logging()
    try:
        settings = load_settings()
    except ConfigMissing as e:
        logger.error(str(e))
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    app = create_app(settings)
    logger.info(f"Uploader listening on {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
