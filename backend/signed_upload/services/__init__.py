"""
Business logic services.
"""
from signed_upload.services.ingestion import IngestedUpload, UploadIngestor, iter_upload_chunks
from signed_upload.services.signing import SignedUrlGenerator, SigningRequest
from signed_upload.services.upload_service import UploadService

__all__ = [
    "IngestedUpload",
    "UploadIngestor",
    "iter_upload_chunks",
    "SignedUrlGenerator",
    "SigningRequest",
    "UploadService",
]
