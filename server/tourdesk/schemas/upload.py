"""Media upload schemas."""

from typing import List, Optional

from pydantic import Field

from .common import CamelModel


class UploadedFile(CamelModel):
    name: str = Field(..., description="Original file name")
    path: str = Field(..., description="Object path inside the bucket")
    url: str = Field(..., description="Public URL")


class UploadResult(CamelModel):
    success: bool = True
    files: List[UploadedFile]
    errors: Optional[List[str]] = Field(None, description="Per-file failures when some uploads succeeded")


class DeleteFilesRequest(CamelModel):
    paths: List[str] = Field(..., min_length=1)
