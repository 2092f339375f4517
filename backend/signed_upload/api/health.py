"""
Health check endpoint.
Reports whether the storage backend is usable.
"""
from fastapi import APIRouter, Depends

from signed_upload.api.dependencies import get_storage
from signed_upload.storage.factory import StorageContext

router = APIRouter()


@router.get("")
async def health_check(storage: StorageContext = Depends(get_storage)):
    """
    Health check endpoint.
    
    Answers 200 as long as the process is up. Missing storage credentials
    only degrade the service: uploads fail, this endpoint keeps responding.
    """
    health_status = {
        "status": "healthy",
        "storage": "configured",
        "provider": storage.provider,
    }
    
    if not storage.is_configured:
        health_status["status"] = "degraded"
        health_status["storage"] = f"unavailable: {storage.error}"
    
    return health_status
