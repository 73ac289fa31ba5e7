"""Unit tests for media uploads."""

import re
from uuid import uuid4

import pytest

from tourdesk.core.config import settings
from tourdesk.core.exceptions import ExternalServiceError, ValidationError
from tourdesk.services.storage_service import (
    IncomingFile,
    StorageService,
    generate_file_name,
    public_url,
    validate_folder,
)

PNG = IncomingFile(name="Maya Bay.png", content_type="image/png", data=b"\x89PNG fake")


def test_generate_file_name():
    name = generate_file_name("Summer Trip.JPG", now_ms=1700000000000)
    assert re.fullmatch(r"summer-trip-1700000000000-[a-z0-9]{6}\.jpg", name)


def test_generate_file_name_without_extension():
    assert generate_file_name("cover", now_ms=1).endswith(".jpg")
    assert generate_file_name("a" * 80 + ".png", now_ms=1).startswith("a" * 50 + "-1-")


@pytest.mark.parametrize(
    "folder, expected",
    [
        (None, "temp"),
        ("site", "site"),
        ("/categories/", "categories"),
    ],
)
def test_validate_folder(folder, expected):
    assert validate_folder(folder) == expected


def test_tour_folders():
    tour_id = uuid4()
    assert validate_folder(f"tours/{tour_id}/gallery") == f"tours/{tour_id}/gallery"
    with pytest.raises(ValidationError):
        validate_folder(f"tours/{tour_id}/secret")
    with pytest.raises(ValidationError):
        validate_folder("../etc")


def test_public_url():
    url = public_url("site/logo.png")
    assert url.endswith(f"/object/public/{settings.storage_bucket}/site/logo.png")


@pytest.mark.asyncio
async def test_upload_files(storage_client):
    result = await StorageService(storage_client).upload_files([PNG], "site")

    assert len(result.files) == 1
    uploaded = result.files[0]
    assert uploaded.name == "Maya Bay.png"
    assert uploaded.path.startswith("site/maya-bay-")
    assert uploaded.url == public_url(uploaded.path)
    assert result.errors is None
    assert storage_client.objects[uploaded.path] == (PNG.data, "image/png")


@pytest.mark.asyncio
async def test_partial_failure_is_reported(storage_client):
    storage_client.failing.add("broken")
    files = [PNG, IncomingFile(name="broken.png", content_type="image/png", data=b"x")]

    result = await StorageService(storage_client).upload_files(files, None)

    assert [f.name for f in result.files] == ["Maya Bay.png"]
    assert len(result.errors) == 1
    assert result.errors[0].startswith("broken.png:")


@pytest.mark.asyncio
async def test_all_failures_raise(storage_client):
    storage_client.failing.add("maya")

    with pytest.raises(ExternalServiceError) as exc_info:
        await StorageService(storage_client).upload_files([PNG], "site")
    assert exc_info.value.problem_details["status"] == 502


@pytest.mark.asyncio
async def test_rejects_bad_input(storage_client, monkeypatch):
    service = StorageService(storage_client)

    with pytest.raises(ValidationError):
        await service.upload_files([], "site")

    with pytest.raises(ValidationError):
        await service.upload_files([IncomingFile(name="run.exe", content_type="application/x-msdownload", data=b"")], "site")

    monkeypatch.setattr(settings, "max_upload_bytes", 4)
    with pytest.raises(ValidationError):
        await service.upload_files([PNG], "site")

    assert storage_client.objects == {}


@pytest.mark.asyncio
async def test_delete_files(storage_client):
    await StorageService(storage_client).delete_files(["site/logo.png"])
    assert storage_client.removed == ["site/logo.png"]
