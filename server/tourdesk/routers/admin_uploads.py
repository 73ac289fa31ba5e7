"""Back-office media upload router."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from ..core.dependencies import StaffUser
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.admin import AdminUser
from ..schemas.common import SuccessResponse
from ..schemas.upload import DeleteFilesRequest, UploadResult
from ..services.storage_service import IncomingFile, StorageClient, StorageService, get_storage_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/upload", tags=["admin-uploads"])

STORAGE_CLIENT_DEPENDENCY = Depends(get_storage_client)


@router.post("", response_model=UploadResult)
async def upload_files(
    files: List[UploadFile] = File(...),
    folder: Optional[str] = Form(None),
    admin: AdminUser = StaffUser,
    client: StorageClient = STORAGE_CLIENT_DEPENDENCY,
) -> JSONResponse:
    """
    Upload images, videos or PDFs into an allowed folder.

    Folders are `tours/{uuid}/hero|gallery|itinerary|packages`, `categories`,
    `labels`, `site`, `pages` or `temp` (the default). Partial failures are
    reported in `errors`.
    """
    try:
        incoming = [
            IncomingFile(
                name=upload.filename or "file",
                content_type=upload.content_type or "application/octet-stream",
                data=await upload.read(),
            )
            for upload in files
        ]
        result = await StorageService(client).upload_files(incoming, folder)
        return JSONResponse(status_code=200, content=result.model_dump(mode="json", by_alias=True, exclude_none=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error uploading files",
            extra={"folder": folder, "count": len(files), "error": str(e)},
            exc_info=True,
        )
        raise InternalServerError() from e


@router.delete("", response_model=SuccessResponse)
async def delete_files(
    request: DeleteFilesRequest,
    admin: AdminUser = StaffUser,
    client: StorageClient = STORAGE_CLIENT_DEPENDENCY,
) -> JSONResponse:
    try:
        await StorageService(client).delete_files(request.paths)
        return JSONResponse(status_code=200, content=SuccessResponse().model_dump(mode="json", by_alias=True))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error deleting files", extra={"paths": request.paths, "error": str(e)}, exc_info=True)
        raise InternalServerError() from e
