"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- bucket
- object_key
- size_bytes
- duration_ms

Signed URLs are bearer credentials and are never logged.

Usage:
    from signed_upload.utils.logging import configure_logging, log_object_created
    
    configure_logging('signed-upload-api', 'INFO')
    log_object_created(logger, bucket='mybucket', object_key='report.txt', size_bytes=12)
"""
import logging
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""
    
    _service_name = None
    _configured = False
    
    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.
        
        Args:
            service_name: Service identifier
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured
        
        cls._service_name = service_name
        
        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []
        
        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )
        
        # Console handler (for container logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        
        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        
        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True
        
        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    bucket: Optional[str] = None,
    object_key: Optional[str] = None,
    size_bytes: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.
    
    Args:
        event: Event name (mandatory)
        bucket: Optional bucket name
        object_key: Optional object key
        size_bytes: Optional payload size
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
        
    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }
    
    if bucket:
        extra["bucket"] = bucket
    if object_key:
        extra["object_key"] = object_key
    if size_bytes is not None:
        extra["size_bytes"] = size_bytes
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)
    
    return extra


# Upload event functions

def log_upload_received(
    logger: logging.Logger,
    filename: str,
    bucket: str,
    object_key: str,
    **kwargs
):
    """Log the start of an upload request."""
    extra = _build_log_extra(
        event="upload_received",
        bucket=bucket,
        object_key=object_key,
        upload_filename=filename,
        **kwargs
    )
    logger.info(f"Upload received: {filename}", extra=extra)


def log_object_created(
    logger: logging.Logger,
    bucket: str,
    object_key: str,
    size_bytes: int,
    duration_ms: Optional[float] = None,
    skipped_chunks: int = 0,
    **kwargs
):
    """
    Log object creation event.
    
    Args:
        logger: Logger instance
        bucket: Bucket name (required)
        object_key: Object key (required)
        size_bytes: Bytes written (required)
        duration_ms: Optional duration in milliseconds
        skipped_chunks: Chunks dropped during ingestion
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="object_created",
        bucket=bucket,
        object_key=object_key,
        size_bytes=size_bytes,
        duration_ms=duration_ms,
        **kwargs
    )
    if skipped_chunks:
        extra["skipped_chunks"] = skipped_chunks
    
    logger.info(f"Object created: {bucket}/{object_key}", extra=extra)


def log_signed_url_issued(
    logger: logging.Logger,
    bucket: str,
    object_key: str,
    expires_in: int,
    **kwargs
):
    """Log a signed URL being issued (the URL itself is not logged)."""
    extra = _build_log_extra(
        event="signed_url_issued",
        bucket=bucket,
        object_key=object_key,
        expires_in=expires_in,
        **kwargs
    )
    logger.info(f"Signed URL issued: {bucket}/{object_key} (expires in {expires_in}s)", extra=extra)


def log_upload_failed(
    logger: logging.Logger,
    filename: str,
    error: str,
    bucket: Optional[str] = None,
    object_key: Optional[str] = None,
    duration_ms: Optional[float] = None,
    include_traceback: bool = False,
    **kwargs
):
    """
    Log upload failure event.
    
    Args:
        logger: Logger instance
        filename: Uploaded filename (required)
        error: Error message (required)
        bucket: Optional bucket name
        object_key: Optional object key
        duration_ms: Optional duration in milliseconds
        include_traceback: Whether to include stack trace
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_failed",
        bucket=bucket,
        object_key=object_key,
        duration_ms=duration_ms,
        upload_filename=filename,
        error=str(error),
        **kwargs
    )
    
    message = f"Upload failed: {filename} - {error}"
    
    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
            return
    logger.error(message, extra=extra)


def log_storage_unavailable(
    logger: logging.Logger,
    reason: Optional[str],
    phase: str,
    **kwargs
):
    """
    Log that the storage backend cannot be used.
    
    Args:
        logger: Logger instance
        reason: Why storage is unavailable
        phase: "startup" or "request"
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="storage_unavailable",
        phase=phase,
        error=str(reason),
        **kwargs
    )
    logger.error(f"Storage unavailable ({phase}): {reason}", extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
