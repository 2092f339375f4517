"""
Credential provider.

Loads the signing key once at startup:
- gcs: a service-account key file (key.json), parsed by google-auth
- s3: an HMAC key file as written by `gcloud storage hmac create --format=json`
  ({"metadata": {"accessId": ...}, "secret": ...}) or the flat
  {"accessId": ..., "secret": ...} form

Loading never raises. A missing or malformed resource leaves the provider
unloaded with the failure recorded; `current_credentials()` then raises
StorageConfigurationError so every request that needs storage fails loudly.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account

from signed_upload.storage.exceptions import StorageConfigurationError
from signed_upload.utils.logging import log_storage_unavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HmacCredentials:
    """Access id / secret pair for S3-compatible SigV4 signing."""
    access_id: str
    secret: str = field(repr=False)


Credentials = Union[service_account.Credentials, HmacCredentials]


def _load_hmac_key(path: str) -> HmacCredentials:
    with open(path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)
    
    if not isinstance(payload, dict):
        raise ValueError("HMAC key file must contain a JSON object")
    
    metadata = payload.get("metadata") or {}
    access_id = payload.get("accessId") or metadata.get("accessId")
    secret = payload.get("secret")
    if not access_id or not secret:
        raise ValueError("HMAC key file is missing 'accessId' or 'secret'")
    
    return HmacCredentials(access_id=access_id, secret=secret)


class CredentialProvider:
    """
    Holds the process-wide signing credentials.
    
    Read-only after `load()`; shared by every create and sign call.
    """
    
    def __init__(self, key_path: str, provider: str = "gcs"):
        self._key_path = key_path
        self._provider = provider.lower()
        self._credentials: Optional[Credentials] = None
        self._error: Optional[str] = None
    
    @property
    def key_path(self) -> str:
        return self._key_path
    
    @property
    def is_loaded(self) -> bool:
        return self._credentials is not None
    
    @property
    def error(self) -> Optional[str]:
        """Reason the last load failed, if it did."""
        return self._error
    
    def load(self) -> bool:
        """
        Read and parse the credential resource.
        
        Returns:
            True if credentials are now available, False otherwise
        """
        try:
            if self._provider == "gcs":
                self._credentials = service_account.Credentials.from_service_account_file(
                    self._key_path
                )
            elif self._provider == "s3":
                self._credentials = _load_hmac_key(self._key_path)
            else:
                raise ValueError(f"Unsupported storage provider: {self._provider}")
            
            self._error = None
            logger.info(f"Loaded {self._provider} credentials from {self._key_path}")
            return True
        
        except FileNotFoundError as e:
            self._error = f"Bucket key file not found: {self._key_path}"
            logger.error("Bucket key file not found. Failing silently", exc_info=e)
        except (ValueError, KeyError, TypeError, AttributeError, GoogleAuthError) as e:
            self._error = f"Malformed credentials in {self._key_path}: {e}"
            logger.error(f"Failed to parse credentials: {e}")
        except OSError as e:
            self._error = f"Could not read credentials from {self._key_path}: {e}"
            logger.error(f"Failed to read credentials: {e}")
        
        self._credentials = None
        log_storage_unavailable(logger, reason=self._error, phase="startup")
        return False
    
    def current_credentials(self) -> Credentials:
        """
        Return the loaded credentials.
        
        Raises:
            StorageConfigurationError: Credentials were never loaded successfully
        """
        if self._credentials is None:
            raise StorageConfigurationError(
                self._error or "Storage credentials have not been loaded",
                details={"credentials_path": self._key_path},
            )
        return self._credentials
