"""
Test configuration and fixtures.
Storage is replaced with an in-memory fake; signing tests use throwaway keys
and never touch the network.
"""
import json
import os

# Set test environment before any imports
os.environ["BUCKETNAME"] = "mybucket"
os.environ["CREDENTIALS_PATH"] = "/nonexistent/key.json"
os.environ["STORAGE_PROVIDER"] = "gcs"
os.environ["ENVIRONMENT"] = "test"

import pytest
from datetime import timedelta
from typing import AsyncGenerator, AsyncIterator, Dict, List, Tuple

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from signed_upload.config import Settings
from signed_upload.storage.base import StorageClient
from signed_upload.storage.exceptions import TransientStorageError
from signed_upload.storage.factory import StorageContext
from signed_upload.storage.identifiers import ObjectIdentifier, ObjectMetadata


class FakeStorageClient(StorageClient):
    """In-memory storage backend recording every call."""
    
    def __init__(self, fail_create: bool = False, fail_sign: bool = False):
        self.fail_create = fail_create
        self.fail_sign = fail_sign
        self.objects: Dict[Tuple[str, str], Tuple[str, bytes]] = {}
        self.created: List[ObjectMetadata] = []
        self.signed: List[Tuple[ObjectIdentifier, timedelta, bool]] = []
        self.closed = False
    
    def create_object(self, metadata: ObjectMetadata, data: bytes) -> None:
        if self.fail_create:
            raise TransientStorageError("403 Forbidden: permission denied on bucket")
        identifier = metadata.identifier
        self.objects[(identifier.bucket, identifier.key)] = (metadata.content_type, data)
        self.created.append(metadata)
    
    def sign_url(self, identifier: ObjectIdentifier, expiration: timedelta, path_style: bool = True) -> str:
        if self.fail_sign:
            raise TransientStorageError("signBlob failed")
        self.signed.append((identifier, expiration, path_style))
        return (
            f"https://storage.example.com/{identifier.bucket}/{identifier.key}"
            f"?expires={int(expiration.total_seconds())}&sig={len(self.signed)}"
        )
    
    def close(self) -> None:
        self.closed = True


async def chunk_stream(*chunks) -> AsyncIterator[bytes]:
    """Async byte stream yielding control to the loop between chunks."""
    import asyncio
    
    for chunk in chunks:
        await asyncio.sleep(0)
        yield chunk


@pytest.fixture
def test_settings() -> Settings:
    """Settings for bucket "mybucket" with no subdirectory."""
    return Settings(
        bucketname="mybucket",
        subdirectory=None,
        credentials_path="/nonexistent/key.json",
        reject_partial_uploads=False,
    )


@pytest.fixture
def fake_storage() -> FakeStorageClient:
    return FakeStorageClient()


@pytest.fixture(scope="session")
def service_account_info() -> dict:
    """Service-account key payload with a freshly generated RSA key."""
    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa
    
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    
    return {
        "type": "service_account",
        "project_id": "test-project",
        "private_key_id": "test-key-id",
        "private_key": pem,
        "client_email": "uploader@test-project.iam.gserviceaccount.com",
        "client_id": "100000000000000000001",
        "token_uri": "https://oauth2.googleapis.com/token",
    }


@pytest.fixture
def service_account_key_file(tmp_path, service_account_info) -> str:
    """Write the service-account key to a key.json file."""
    path = tmp_path / "key.json"
    path.write_text(json.dumps(service_account_info))
    return str(path)


@pytest.fixture
def hmac_key_file(tmp_path) -> str:
    """HMAC key in the `gcloud storage hmac create --format=json` shape."""
    path = tmp_path / "hmac.json"
    path.write_text(json.dumps({
        "metadata": {
            "accessId": "GOOGTESTACCESSID0000000000",
            "serviceAccountEmail": "uploader@test-project.iam.gserviceaccount.com",
            "state": "ACTIVE",
        },
        "secret": "dGVzdC1zZWNyZXQtZm9yLXNpZ25pbmctb25seQ",
    }))
    return str(path)


def get_test_app(storage: StorageContext, settings: Settings) -> FastAPI:
    """Create a test FastAPI app with overridden dependencies."""
    from signed_upload.main import app
    from signed_upload.api.dependencies import get_storage
    from signed_upload.config import get_settings
    
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_settings] = lambda: settings
    
    return app


@pytest.fixture(scope="function")
async def client(
    fake_storage: FakeStorageClient, test_settings: Settings
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client backed by the fake storage client."""
    storage = StorageContext(provider="fake", client=fake_storage)
    app = get_test_app(storage, test_settings)
    
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    
    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def unconfigured_client(test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client whose storage failed to initialize."""
    storage = StorageContext(
        provider="gcs",
        error="Bucket key file not found: /nonexistent/key.json",
    )
    app = get_test_app(storage, test_settings)
    
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    
    app.dependency_overrides.clear()
