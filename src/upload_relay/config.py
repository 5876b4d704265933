"""
Configuration for the upload relay
Loaded once from the environment at startup
"""
import os
from typing import Mapping, Optional

from pydantic import BaseModel

from .errors import ConfigMissing

REQUIRED_VARS = {
    "REPO_OWNER": "repo_owner",
    "REPO_NAME": "repo_name",
    "GITHUB_TOKEN": "github_token",
}

DEFAULT_PORT = 3000
DEFAULT_API_URL = "https://api.github.com"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    repo_owner: str
    repo_name: str
    github_token: str
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    github_api_url: str = DEFAULT_API_URL
    # None leaves remote calls without a timeout
    github_timeout: Optional[float] = None
    log_level: str = "INFO"

    class Config:
        frozen = True


def _read(environ: Mapping[str, str], name: str) -> str:
    return (environ.get(name) or "").strip()


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Raises ConfigMissing naming every required variable that is absent or
    empty, or the optional variable that could not be parsed.
    """
    if environ is None:
        environ = os.environ

    missing = [name for name in REQUIRED_VARS if not _read(environ, name)]
    if missing:
        raise ConfigMissing(missing)

    values = {field: _read(environ, name) for name, field in REQUIRED_VARS.items()}

    port = _read(environ, "PORT")
    if port:
        try:
            values["port"] = int(port)
        except ValueError:
            raise ConfigMissing(["PORT"], f"PORT must be an integer, got {port!r}")

    timeout = _read(environ, "GITHUB_TIMEOUT")
    if timeout:
        try:
            values["github_timeout"] = float(timeout)
        except ValueError:
            raise ConfigMissing(["GITHUB_TIMEOUT"], f"GITHUB_TIMEOUT must be a number, got {timeout!r}")

    if _read(environ, "HOST"):
        values["host"] = _read(environ, "HOST")
    if _read(environ, "GITHUB_API_URL"):
        values["github_api_url"] = _read(environ, "GITHUB_API_URL").rstrip("/")
    level = _read(environ, "LOG_LEVEL").upper()
    if level:
        if level not in LOG_LEVELS:
            raise ConfigMissing(["LOG_LEVEL"], f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
        values["log_level"] = level

    return Settings(**values)
