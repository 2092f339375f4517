from abc import ABC, abstractmethod
from datetime import timedelta

from signed_upload.storage.identifiers import ObjectIdentifier, ObjectMetadata


class StorageClient(ABC):
    @abstractmethod
    def create_object(self, metadata: ObjectMetadata, data: bytes) -> None:
        """Create (or overwrite) an object with the given bytes.

        Args:
            metadata: Identifier and content type of the object
            data: Complete object content

        Raises:
            TransientStorageError: The backend rejected or failed the write
        """
        pass

    @abstractmethod
    def sign_url(
        self, identifier: ObjectIdentifier, expiration: timedelta, path_style: bool = True
    ) -> str:
        """Return a signed GET URL for an existing object.

        Args:
            identifier: Bucket and key of the object
            expiration: Validity window of the URL
            path_style: Put the bucket in the URL path instead of the hostname

        Raises:
            TransientStorageError: The backend or signer failed
        """
        pass

    def close(self) -> None:
        """Release the underlying transport."""
        pass
