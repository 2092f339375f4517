"""
Signed upload service.

Accepts a multipart file upload, stores it in an object-storage bucket and
returns a time-limited, path-style signed URL for reading it back.
"""
__version__ = "0.1.0"
