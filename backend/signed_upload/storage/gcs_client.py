from datetime import timedelta
from typing import Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage as gcs_storage
from google.oauth2 import service_account
from requests.exceptions import RequestException

from signed_upload.storage.base import StorageClient
from signed_upload.storage.exceptions import TransientStorageError
from signed_upload.storage.identifiers import ObjectIdentifier, ObjectMetadata


class GCSStorageClient(StorageClient):
    def __init__(
        self,
        credentials: service_account.Credentials,
        client: Optional[gcs_storage.Client] = None,
    ):
        self._credentials = credentials
        self._client = client or gcs_storage.Client(
            project=credentials.project_id, credentials=credentials
        )

    def _blob(self, identifier: ObjectIdentifier) -> gcs_storage.Blob:
        return self._client.bucket(identifier.bucket).blob(identifier.key)

    def create_object(self, metadata: ObjectMetadata, data: bytes) -> None:
        blob = self._blob(metadata.identifier)
        try:
            blob.upload_from_string(data, content_type=metadata.content_type)
        except (GoogleAPIError, GoogleAuthError, RequestException) as e:
            raise TransientStorageError(
                f"Failed to create object {metadata.identifier}: {e}",
                details={"bucket": metadata.identifier.bucket, "key": metadata.identifier.key},
            ) from e

    def sign_url(
        self, identifier: ObjectIdentifier, expiration: timedelta, path_style: bool = True
    ) -> str:
        blob = self._blob(identifier)
        # Signed locally with the service-account key; no network round trip.
        try:
            return blob.generate_signed_url(
                version="v4",
                expiration=expiration,
                method="GET",
                credentials=self._credentials,
                virtual_hosted_style=not path_style,
            )
        except (GoogleAPIError, GoogleAuthError, ValueError) as e:
            raise TransientStorageError(
                f"Failed to sign URL for {identifier}: {e}",
                details={"bucket": identifier.bucket, "key": identifier.key},
            ) from e

    def close(self) -> None:
        self._client.close()
