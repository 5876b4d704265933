from typing import List
from pydantic import BaseModel


class UploadedFile(BaseModel):
    name: str
    path: str
    url: str


class ShareDescriptor(BaseModel):
    id: str
    created_at: str
    files: List[UploadedFile]


class UploadResponse(BaseModel):
    id: str
    pagesURL: str
    share: ShareDescriptor


class ErrorResponse(BaseModel):
    error: str
