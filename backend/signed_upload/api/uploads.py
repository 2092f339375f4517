"""
Upload endpoint.

POST /upload accepts a multipart body with one part named `file`, stores
its bytes in the configured bucket and returns a signed, path-style URL
(valid for 10 minutes by default) as a JSON string.

Errors:
- 503: storage credentials missing or storage never initialized
- 502: the storage backend failed to create or sign the object
- 422: the upload was truncated and partial uploads are rejected,
  or the `file` part is missing or has no filename
"""
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from signed_upload.api.dependencies import get_storage
from signed_upload.config import Settings, get_settings
from signed_upload.services.ingestion import iter_upload_chunks
from signed_upload.services.upload_service import UploadService
from signed_upload.storage.exceptions import (
    PartialIngestionError,
    StorageConfigurationError,
    TransientStorageError,
)
from signed_upload.storage.factory import StorageContext

router = APIRouter()


@router.post("/upload", response_model=str)
async def upload_file(
    file: UploadFile = File(..., description="File to store"),
    storage: StorageContext = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Store the uploaded file and return a signed URL for reading it.
    
    Flow:
    1. Check the storage client is available
    2. Drain the file part into memory
    3. Create the object under bucket[/subdirectory]/filename
    4. Return a signed path-style GET URL
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="File part has no filename"
        )
    
    try:
        client = storage.require_client()
        service = UploadService(client, settings)
        return await service.handle_upload(
            file.filename,
            iter_upload_chunks(file, settings.upload_chunk_size),
        )
    except StorageConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Storage is not configured: {e.message}"
        )
    except TransientStorageError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Storage backend error: {e.message}"
        )
    except PartialIngestionError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Upload incomplete: {e.message}"
        )
