"""
Object storage for uploaded files.

Builds object identifiers, loads signing credentials and wraps the storage
backends (Cloud Storage natively, or any S3-compatible endpoint) behind a
small create/sign interface.
"""
from signed_upload.storage.base import StorageClient
from signed_upload.storage.credentials import CredentialProvider, HmacCredentials
from signed_upload.storage.exceptions import (
    PartialIngestionError,
    StorageConfigurationError,
    StorageError,
    TransientStorageError,
)
from signed_upload.storage.factory import StorageContext, close_storage, init_storage
from signed_upload.storage.identifiers import ObjectIdentifier, ObjectMetadata, build_identifier

__all__ = [
    "StorageClient",
    "CredentialProvider",
    "HmacCredentials",
    "StorageError",
    "StorageConfigurationError",
    "TransientStorageError",
    "PartialIngestionError",
    "StorageContext",
    "init_storage",
    "close_storage",
    "ObjectIdentifier",
    "ObjectMetadata",
    "build_identifier",
]
