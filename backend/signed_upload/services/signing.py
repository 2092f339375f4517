"""
Signed URL generation.

Always requests a path-style URL (bucket and key in the URL path, not in
the hostname) signed with the credentials loaded at startup.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta

from signed_upload.config import TimeUnit
from signed_upload.storage.base import StorageClient
from signed_upload.storage.exceptions import StorageConfigurationError
from signed_upload.storage.identifiers import ObjectMetadata
from signed_upload.utils.logging import log_signed_url_issued
from signed_upload.utils.metrics import signed_urls_issued_total

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 10
DEFAULT_UNIT = TimeUnit.MINUTES

# V4 signatures (GCS and SigV4) are capped at seven days.
MAX_EXPIRATION = timedelta(days=7)


def to_timedelta(duration: int, unit: TimeUnit) -> timedelta:
    """Convert a duration/unit pair into a timedelta."""
    unit = TimeUnit(unit)
    if unit is TimeUnit.SECONDS:
        return timedelta(seconds=duration)
    if unit is TimeUnit.MINUTES:
        return timedelta(minutes=duration)
    return timedelta(hours=duration)


@dataclass(frozen=True)
class SigningRequest:
    metadata: ObjectMetadata
    duration: int
    unit: TimeUnit
    path_style: bool = True
    
    @property
    def expiration(self) -> timedelta:
        return to_timedelta(self.duration, self.unit)


class SignedUrlGenerator:
    """Produces signed, path-style GET URLs for stored objects."""
    
    def __init__(self, client: StorageClient):
        self._client = client
    
    def sign(
        self,
        metadata: ObjectMetadata,
        duration: int = DEFAULT_DURATION,
        unit: TimeUnit = DEFAULT_UNIT,
    ) -> str:
        """
        Sign a URL for an object that already exists in storage.
        
        Args:
            metadata: Metadata of the stored object
            duration: Validity window length
            unit: Unit of `duration`
            
        Returns:
            Signed URL string
            
        Raises:
            StorageConfigurationError: The window is not positive or exceeds seven days
            TransientStorageError: The backend failed to sign
        """
        request = SigningRequest(metadata=metadata, duration=duration, unit=unit)
        expiration = request.expiration
        if expiration <= timedelta(0) or expiration > MAX_EXPIRATION:
            raise StorageConfigurationError(
                f"Signed URL expiration must be within (0, 7 days], got {expiration}"
            )
        
        url = self._client.sign_url(
            metadata.identifier, expiration, path_style=request.path_style
        )
        
        signed_urls_issued_total.inc()
        log_signed_url_issued(
            logger,
            bucket=metadata.identifier.bucket,
            object_key=metadata.identifier.key,
            expires_in=int(expiration.total_seconds()),
        )
        return url
