"""
FastAPI dependencies for route handlers.
"""
from fastapi import Request

from signed_upload.config import settings
from signed_upload.storage.factory import StorageContext


def get_storage(request: Request) -> StorageContext:
    """
    Return the process-wide storage context built at startup.
    
    If the app was started without its lifespan, an unconfigured context is
    returned so requests fail with a configuration error.
    """
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        storage = StorageContext(
            provider=settings.storage_provider,
            error="Storage was not initialized at startup",
        )
    return storage
