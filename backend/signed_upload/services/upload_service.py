"""
Upload orchestration.

Sequences one upload request:
1. Build the object identifier from bucket, subdirectory and filename
2. Drain the file part into a buffer (awaited to completion)
3. Create the object from the complete buffer
4. Sign a path-style GET URL for the new object

A failing step stops the sequence and its error propagates; no partial or
default URL is ever returned. There is no state shared between requests
other than the read-only storage client.
"""
import asyncio
import logging
import time
from typing import AsyncIterable, Optional

from signed_upload.config import Settings
from signed_upload.services.ingestion import IngestedUpload, UploadIngestor
from signed_upload.services.signing import SignedUrlGenerator
from signed_upload.storage.base import StorageClient
from signed_upload.storage.exceptions import PartialIngestionError, StorageError
from signed_upload.storage.identifiers import ObjectMetadata, build_identifier
from signed_upload.utils.logging import (
    log_object_created,
    log_upload_failed,
    log_upload_received,
)
from signed_upload.utils.metrics import (
    upload_chunks_skipped_total,
    upload_size_bytes,
    uploads_total,
)

logger = logging.getLogger(__name__)


class UploadService:
    """Runs the upload-to-signed-URL pipeline for single requests."""
    
    def __init__(
        self,
        client: StorageClient,
        settings: Settings,
        ingestor: Optional[UploadIngestor] = None,
        signer: Optional[SignedUrlGenerator] = None,
    ):
        self._client = client
        self._settings = settings
        self._ingestor = ingestor or UploadIngestor()
        self._signer = signer or SignedUrlGenerator(client)
    
    async def handle_upload(self, filename: str, chunks: AsyncIterable[bytes]) -> str:
        """
        Store an uploaded file and return a signed URL for it.
        
        Args:
            filename: Filename supplied with the file part (used verbatim)
            chunks: Byte stream of the file part
            
        Returns:
            Signed, path-style URL valid for the configured window
            
        Raises:
            PartialIngestionError: Chunks were dropped and partial uploads are rejected
            TransientStorageError: The backend failed the create or sign call
            StorageConfigurationError: Signing parameters are invalid
        """
        start = time.monotonic()
        identifier = build_identifier(
            self._settings.bucketname, self._settings.subdirectory, filename
        )
        metadata = ObjectMetadata(
            identifier=identifier,
            content_type=self._settings.object_content_type,
        )
        log_upload_received(
            logger, filename=filename, bucket=identifier.bucket, object_key=identifier.key
        )
        
        try:
            ingested = await self._ingestor.ingest(chunks)
            self._check_partial(ingested, metadata)
            
            await asyncio.to_thread(self._client.create_object, metadata, ingested.data)
            upload_size_bytes.observe(ingested.size_bytes)
            log_object_created(
                logger,
                bucket=identifier.bucket,
                object_key=identifier.key,
                size_bytes=ingested.size_bytes,
                duration_ms=(time.monotonic() - start) * 1000,
                skipped_chunks=ingested.skipped_chunks,
            )
            
            url = await asyncio.to_thread(
                self._signer.sign,
                metadata,
                self._settings.signed_url_duration,
                self._settings.signed_url_unit,
            )
        except StorageError as e:
            uploads_total.labels(status=type(e).__name__).inc()
            log_upload_failed(
                logger,
                filename=filename,
                error=e.message,
                bucket=identifier.bucket,
                object_key=identifier.key,
                duration_ms=(time.monotonic() - start) * 1000,
            )
            raise
        
        uploads_total.labels(status="success").inc()
        return url
    
    def _check_partial(self, ingested: IngestedUpload, metadata: ObjectMetadata) -> None:
        if not ingested.is_partial:
            return
        
        upload_chunks_skipped_total.inc(ingested.skipped_chunks)
        message = (
            f"{ingested.skipped_chunks} of {ingested.chunk_count} chunks could not be read; "
            f"upload of {metadata.identifier} is truncated"
        )
        if self._settings.reject_partial_uploads:
            raise PartialIngestionError(
                message,
                details={"skipped_chunks": str(ingested.skipped_chunks)},
            )
        logger.warning(message)
