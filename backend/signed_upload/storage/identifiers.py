"""
Object identifiers and metadata.

The object key is `subdirectory + "/" + filename` when a subdirectory is
configured, otherwise the filename verbatim. Filenames are trusted as
supplied: no normalization, sanitization or collision detection.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ObjectIdentifier:
    """Bucket plus key addressing a single object."""
    bucket: str
    key: str
    
    def __str__(self) -> str:
        return f"{self.bucket}/{self.key}"


@dataclass(frozen=True)
class ObjectMetadata:
    """Identifier plus the content type the object is created with."""
    identifier: ObjectIdentifier
    content_type: str


def build_identifier(bucket: str, subdirectory: Optional[str], filename: str) -> ObjectIdentifier:
    """
    Compose bucket, optional subdirectory and filename into an object identifier.
    
    An empty-string subdirectory is still "present" and yields a key with a
    leading slash; only None means no prefix.
    """
    if subdirectory is not None:
        return ObjectIdentifier(bucket=bucket, key=subdirectory + "/" + filename)
    return ObjectIdentifier(bucket=bucket, key=filename)
