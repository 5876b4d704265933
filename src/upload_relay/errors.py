"""
Error types raised while loading configuration and handling uploads.
"""
from typing import List, Optional


class UploadRelayError(Exception):
    """Base error; status_code is the HTTP status the route answers with."""

    status_code = 500


class ConfigMissing(UploadRelayError):
    def __init__(self, missing: List[str], message: Optional[str] = None):
        self.missing = list(missing)
        super().__init__(message or f"Missing {', '.join(self.missing)} env vars.")


class BadRequest(UploadRelayError):
    status_code = 400


class RemoteServiceError(UploadRelayError):
    """Any failed call to the repository API (auth, network, conflict, rate limit)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.remote_status = status_code
