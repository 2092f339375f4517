"""
Storage lifecycle.

`init_storage` runs once at startup and never raises: if credentials or
the client cannot be set up the returned context holds no client and the
reason, and every request that needs storage fails with
StorageConfigurationError via `require_client()`.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from signed_upload.config import Settings
from signed_upload.storage.base import StorageClient
from signed_upload.storage.credentials import CredentialProvider
from signed_upload.storage.exceptions import StorageConfigurationError
from signed_upload.utils.logging import log_storage_unavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageContext:
    """Process-wide storage dependency, read-only once built."""
    provider: str
    client: Optional[StorageClient] = None
    error: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return self.client is not None
    
    def require_client(self) -> StorageClient:
        """
        Return the storage client.
        
        Raises:
            StorageConfigurationError: Storage was never initialized
        """
        if self.client is None:
            reason = self.error or "Storage client is not initialized"
            log_storage_unavailable(logger, reason=reason, phase="request")
            raise StorageConfigurationError(reason, details={"provider": self.provider})
        return self.client


def _build_client(settings: Settings, provider: CredentialProvider) -> StorageClient:
    credentials = provider.current_credentials()
    kind = settings.storage_provider.lower()
    
    if kind == "gcs":
        from signed_upload.storage.gcs_client import GCSStorageClient
        
        return GCSStorageClient(credentials)
    
    if kind == "s3":
        from signed_upload.storage.s3_client import S3StorageClient
        
        return S3StorageClient(
            credentials,
            endpoint_url=settings.s3_endpoint,
            region=settings.s3_region,
        )
    
    raise StorageConfigurationError(f"Unsupported storage provider: {kind}")


def init_storage(settings: Settings) -> StorageContext:
    """Load credentials and build the storage client for this process."""
    kind = settings.storage_provider.lower()
    provider = CredentialProvider(settings.credentials_path, provider=kind)
    
    if not provider.load():
        return StorageContext(provider=kind, error=provider.error)
    
    try:
        client = _build_client(settings, provider)
    except StorageConfigurationError as e:
        logger.error(f"Storage client not created: {e}")
        return StorageContext(provider=kind, error=str(e))
    except Exception as e:
        logger.error(f"Failed to initialize storage client: {e}", exc_info=e)
        return StorageContext(provider=kind, error=f"Failed to initialize storage client: {e}")
    
    logger.info(f"Storage client initialized for bucket: {settings.bucketname}")
    return StorageContext(provider=kind, client=client)


def close_storage(context: StorageContext) -> None:
    """Close the client's transport at shutdown."""
    if context.client is None:
        return
    try:
        context.client.close()
    except Exception as e:
        logger.warning(f"Error closing storage client: {e}")
