"""Exception hierarchy for the upload-to-signed-URL pipeline."""
from typing import Dict, Optional


class StorageError(Exception):
    """Base exception for all storage pipeline errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StorageConfigurationError(StorageError):
    """Raised when credentials are missing or the storage client was never initialized."""
    pass


class TransientStorageError(StorageError):
    """Raised when the storage backend rejects or fails a create/sign call."""
    pass


class PartialIngestionError(StorageError):
    """Raised when chunks were dropped while assembling an upload buffer."""
    pass
