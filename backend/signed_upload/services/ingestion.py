"""
Upload ingestion.

Drains the byte stream of a single file part into one contiguous buffer.
The drain is awaited to completion before the buffer is returned, so the
object is never created from a partially received stream.

Each chunk is released back to its source (when it exposes `release()`,
e.g. a memoryview over a pooled buffer) right after it is copied, whether
or not the copy succeeded. A chunk that cannot be appended is logged and
skipped; the count of skipped chunks is reported on the result so callers
can reject truncated uploads.
"""
import logging
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator

from fastapi import UploadFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestedUpload:
    """Complete upload buffer plus ingestion counters."""
    data: bytes
    chunk_count: int
    skipped_chunks: int = 0
    
    @property
    def size_bytes(self) -> int:
        return len(self.data)
    
    @property
    def is_partial(self) -> bool:
        return self.skipped_chunks > 0


def _release(chunk) -> None:
    release = getattr(chunk, "release", None)
    if callable(release):
        try:
            release()
        except Exception as e:
            logger.warning(f"Failed to release chunk buffer: {e}")


async def iter_upload_chunks(upload: UploadFile, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
    """Yield the content of an uploaded file part in chunks, in order."""
    while True:
        chunk = await upload.read(chunk_size)
        if not chunk:
            break
        yield chunk


class UploadIngestor:
    """Materializes a chunk stream into an in-memory byte buffer."""
    
    async def ingest(self, chunks: AsyncIterable[bytes]) -> IngestedUpload:
        """
        Drain `chunks` completely and concatenate them in arrival order.
        
        Args:
            chunks: Finite, single-pass async stream of byte chunks
            
        Returns:
            IngestedUpload with the concatenated bytes
        """
        buffer = bytearray()
        received = 0
        skipped = 0
        
        async for chunk in chunks:
            received += 1
            try:
                before = len(buffer)
                buffer += chunk
                logger.debug(f"readable byte count: {len(buffer) - before}")
            except (TypeError, ValueError, BufferError) as e:
                skipped += 1
                logger.error(
                    f"read request body error: chunk {received} dropped: {e}",
                    extra={"event": "chunk_skipped", "chunk_index": received - 1},
                )
            finally:
                _release(chunk)
        
        return IngestedUpload(data=bytes(buffer), chunk_count=received, skipped_chunks=skipped)
