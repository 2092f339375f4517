"""
Prometheus metrics definitions.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Upload metrics
uploads_total = Counter(
    'uploads_total',
    'Total upload requests by outcome',
    ['status']
)

upload_size_bytes = Histogram(
    'upload_size_bytes',
    'Size of ingested uploads in bytes',
    buckets=[0, 1024, 16384, 131072, 1048576, 8388608, 67108864, 268435456]
)

upload_chunks_skipped_total = Counter(
    'upload_chunks_skipped_total',
    'Chunks dropped while assembling upload buffers'
)

signed_urls_issued_total = Counter(
    'signed_urls_issued_total',
    'Total signed URLs issued'
)
