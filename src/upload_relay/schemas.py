####################################
# --- Request/response schemas --- #
####################################

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

UPLOAD_SUCCESS_MESSAGE = "File uploaded and tracked successfully"


class PostUploadResponse(BaseModel):
    """Response model for `POST /upload`."""
    success: bool = True
    file_name: str = Field(alias="fileName", description="Original name of the uploaded file.")
    file_id: str = Field(alias="fileId", description="Identifier the storage backend assigned to the file.")
    storage_key: str = Field(alias="storageKey", description="Generated key the file was stored under.")
    public_url: Optional[str] = Field(
        default=None,
        alias="publicUrl",
        description="Public locator of the file, when the backend exposes one.",
    )
    message: str = UPLOAD_SUCCESS_MESSAGE

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "success": True,
                "fileName": "report.txt",
                "fileId": "uploads/1760870400000-123456789.txt",
                "storageKey": "uploads/1760870400000-123456789.txt",
                "publicUrl": "https://upload-relay-storage.s3.us-east-1.amazonaws.com/uploads/1760870400000-123456789.txt",
                "message": UPLOAD_SUCCESS_MESSAGE,
            }
        },
    )


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""
    error: str
    message: str

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "No file uploaded", "message": "The request has no 'file' field."}}
    )


class HealthResponse(BaseModel):
    """Response model for `GET /health`."""
    status: str = "Server is running"
