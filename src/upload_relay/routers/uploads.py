import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile, status

from upload_relay.errors import UploadRelayError
from upload_relay.schemas import ErrorResponse, PostUploadResponse
from upload_relay.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/upload",
    response_model=PostUploadResponse,
    response_model_by_alias=True,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def upload_file(
    request: Request,
    file: Optional[UploadFile] = File(None, description="The file to upload"),
    user_name: Optional[str] = Form(None, alias="userName", description="Name of the uploader"),
) -> PostUploadResponse:
    """
    Store an uploaded file and record it in the upload ledger.

    The file is written to the configured object store under a generated
    key, then one row (file name and key, uploader, date) is appended to
    the shared ledger spreadsheet.

    Args:
        file: The file to upload, at most `max_upload_bytes` in size
        user_name: Name of the uploader, "Anonymous" when missing

    Returns:
        PostUploadResponse: The stored file's name, identifiers and locator
    """
    upload_service: UploadService = request.app.state.upload_service
    try:
        return await upload_service.handle_upload(file, user_name)
    except UploadRelayError:
        raise
    except Exception as e:
        logger.exception(f"Upload error: {str(e)}")
        raise UploadRelayError(str(e)) from e
    finally:
        if file is not None:
            await file.close()
