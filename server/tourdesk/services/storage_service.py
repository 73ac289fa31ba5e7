"""Media uploads to the object storage REST API."""

import logging
import re
import secrets
import string
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from ..core.config import settings
from ..core.exceptions import ExternalServiceError, ValidationError
from ..core.observability import metrics_collector
from ..schemas.upload import UploadedFile, UploadResult

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/svg+xml",
    "video/mp4",
    "video/webm",
    "application/pdf",
})

DEFAULT_FOLDER = "temp"
FOLDER_PATTERN = re.compile(
    r"^(tours/[0-9a-fA-F-]{36}/(hero|gallery|itinerary|packages)|categories|labels|site|pages|temp)$"
)
MAX_BASE_NAME_LENGTH = 50
RANDOM_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
CACHE_CONTROL_SECONDS = 3600
STORAGE_TIMEOUT_SECONDS = 30.0


@dataclass
class IncomingFile:
    name: str
    content_type: str
    data: bytes


def generate_file_name(original_name: str, now_ms: Optional[int] = None) -> str:
    """
    Build a collision-resistant object name.

    `Summer Trip.JPG` becomes `summer-trip-<unix ms>-<6 random chars>.jpg`.
    Names without an extension default to `.jpg`.
    """
    base, dot, extension = original_name.rpartition(".")
    if not dot:
        base, extension = original_name, "jpg"
    extension = extension.lower() or "jpg"
    safe_base = re.sub(r"[^a-zA-Z0-9]", "-", base).lower()[:MAX_BASE_NAME_LENGTH]
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(RANDOM_SUFFIX_ALPHABET) for _ in range(6))
    return f"{safe_base}-{timestamp}-{suffix}.{extension}"


def validate_folder(folder: Optional[str]) -> str:
    folder = (folder or DEFAULT_FOLDER).strip("/")
    if not FOLDER_PATTERN.match(folder):
        raise ValidationError(detail=f"Upload folder '{folder}' is not allowed")
    return folder


def public_url(path: str) -> str:
    return f"{settings.storage_url.rstrip('/')}/object/public/{settings.storage_bucket}/{path}"


class StorageClient:
    """HTTP client for the storage bucket; one instance per request."""

    def __init__(self, base_url: str, service_key: str, bucket: str):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.headers = {"Authorization": f"Bearer {service_key}", "apikey": service_key}

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store one object and return its path; raises httpx.HTTPError on failure."""
        async with httpx.AsyncClient(timeout=STORAGE_TIMEOUT_SECONDS) as client:
            response = await client.post(
                f"{self.base_url}/object/{self.bucket}/{path}",
                content=data,
                headers={
                    **self.headers,
                    "Content-Type": content_type,
                    "Cache-Control": f"max-age={CACHE_CONTROL_SECONDS}",
                    "x-upsert": "false",
                },
            )
            response.raise_for_status()
        return path

    async def remove(self, paths: list[str]) -> None:
        async with httpx.AsyncClient(timeout=STORAGE_TIMEOUT_SECONDS) as client:
            response = await client.request(
                "DELETE",
                f"{self.base_url}/object/{self.bucket}",
                json={"prefixes": paths},
                headers=self.headers,
            )
            response.raise_for_status()


def get_storage_client() -> StorageClient:
    return StorageClient(settings.storage_url, settings.storage_service_key, settings.storage_bucket)


class StorageService:
    """Validates uploads and forwards them to the storage client."""

    def __init__(self, client: StorageClient):
        self.client = client

    @staticmethod
    def validate_files(files: list[IncomingFile]) -> None:
        if not files:
            raise ValidationError(detail="No files provided")
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        for file in files:
            if len(file.data) > settings.max_upload_bytes:
                raise ValidationError(detail=f"File {file.name} exceeds maximum size of {limit_mb}MB")
            if file.content_type not in ALLOWED_MIME_TYPES:
                raise ValidationError(detail=f"File type {file.content_type} is not allowed")

    async def upload_files(self, files: list[IncomingFile], folder: Optional[str]) -> UploadResult:
        """
        Upload every file into `folder`.

        Files are validated up front; storage failures are collected per file.

        Raises:
            ValidationError: If no files are given, a file is too large or of a disallowed type,
                or the folder is not allowed
            ExternalServiceError: If every upload failed
        """
        target = validate_folder(folder)
        self.validate_files(files)

        uploaded: list[UploadedFile] = []
        errors: list[str] = []
        for file in files:
            path = f"{target}/{generate_file_name(file.name)}"
            try:
                stored_path = await self.client.upload(path, file.data, file.content_type)
            except httpx.HTTPError as e:
                logger.error("Upload failed", extra={"file_name": file.name, "path": path, "error": str(e)})
                metrics_collector.record_upload("failed")
                errors.append(f"{file.name}: {e}")
                continue
            metrics_collector.record_upload("stored")
            uploaded.append(UploadedFile(name=file.name, path=stored_path, url=public_url(stored_path)))

        if not uploaded:
            raise ExternalServiceError(service="storage", detail=", ".join(errors))

        logger.info("Files uploaded", extra={"folder": target, "count": len(uploaded), "failed": len(errors)})
        return UploadResult(files=uploaded, errors=errors or None)

    async def delete_files(self, paths: list[str]) -> None:
        """
        Raises:
            ExternalServiceError: If storage rejects the delete
        """
        try:
            await self.client.remove(paths)
        except httpx.HTTPError as e:
            logger.error("Delete failed", extra={"paths": paths, "error": str(e)})
            raise ExternalServiceError(service="storage", detail="Delete failed") from e
        logger.info("Files deleted", extra={"count": len(paths)})
