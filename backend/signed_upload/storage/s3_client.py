"""
S3-compatible storage client.

Uses boto3 against any S3-compatible endpoint; by default the Cloud Storage
XML API (https://storage.googleapis.com) with an HMAC key.
URLs are SigV4 presigned. Path-style addressing keeps the bucket in the
URL path rather than the hostname.
"""
import logging
from datetime import timedelta
from typing import Dict

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from signed_upload.storage.base import StorageClient
from signed_upload.storage.credentials import HmacCredentials
from signed_upload.storage.exceptions import TransientStorageError
from signed_upload.storage.identifiers import ObjectIdentifier, ObjectMetadata

logger = logging.getLogger(__name__)


class S3StorageClient(StorageClient):
    """
    boto3 wrapper exposing object creation and URL signing.
    
    One botocore client is kept per addressing style, created on first use.
    """
    
    def __init__(self, credentials: HmacCredentials, endpoint_url: str, region: str = "auto"):
        self._credentials = credentials
        self._endpoint_url = endpoint_url
        self._region = region
        self._clients: Dict[str, object] = {}
    
    def _client(self, addressing_style: str = "path"):
        client = self._clients.get(addressing_style)
        if client is None:
            # Use signature_version='s3v4' for presigned URLs with X-Amz-Expires
            client = boto3.client(
                's3',
                endpoint_url=self._endpoint_url,
                aws_access_key_id=self._credentials.access_id,
                aws_secret_access_key=self._credentials.secret,
                region_name=self._region,
                config=Config(
                    signature_version='s3v4',
                    s3={'addressing_style': addressing_style}
                )
            )
            self._clients[addressing_style] = client
            logger.debug(f"Created {addressing_style}-style S3 client for {self._endpoint_url}")
        return client
    
    def create_object(self, metadata: ObjectMetadata, data: bytes) -> None:
        identifier = metadata.identifier
        try:
            self._client().put_object(
                Bucket=identifier.bucket,
                Key=identifier.key,
                Body=data,
                ContentType=metadata.content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise TransientStorageError(
                f"Failed to create object {identifier}: {e}",
                details={"bucket": identifier.bucket, "key": identifier.key},
            ) from e
    
    def sign_url(
        self, identifier: ObjectIdentifier, expiration: timedelta, path_style: bool = True
    ) -> str:
        client = self._client("path" if path_style else "virtual")
        try:
            return client.generate_presigned_url(
                ClientMethod='get_object',
                Params={
                    'Bucket': identifier.bucket,
                    'Key': identifier.key,
                },
                ExpiresIn=int(expiration.total_seconds())
            )
        except (ClientError, BotoCoreError) as e:
            raise TransientStorageError(
                f"Failed to sign URL for {identifier}: {e}",
                details={"bucket": identifier.bucket, "key": identifier.key},
            ) from e
    
    def close(self) -> None:
        for client in self._clients.values():
            client.close()
        self._clients.clear()
