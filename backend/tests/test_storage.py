"""
Tests for credential loading and the storage lifecycle.
"""
import json
import logging

import pytest
from google.oauth2 import service_account

from signed_upload.config import Settings
from signed_upload.storage.credentials import CredentialProvider, HmacCredentials
from signed_upload.storage.exceptions import StorageConfigurationError
from signed_upload.storage.factory import StorageContext, close_storage, init_storage
from signed_upload.storage.gcs_client import GCSStorageClient
from signed_upload.storage.s3_client import S3StorageClient

from conftest import FakeStorageClient


class TestCredentialProvider:
    """Tests for CredentialProvider."""
    
    def test_loads_service_account_key(self, service_account_key_file):
        provider = CredentialProvider(service_account_key_file, provider="gcs")
        
        assert provider.load() is True
        assert provider.is_loaded
        assert provider.error is None
        
        credentials = provider.current_credentials()
        assert isinstance(credentials, service_account.Credentials)
        assert credentials.service_account_email == "uploader@test-project.iam.gserviceaccount.com"
    
    def test_loads_hmac_key(self, hmac_key_file):
        provider = CredentialProvider(hmac_key_file, provider="s3")
        
        assert provider.load() is True
        assert provider.current_credentials() == HmacCredentials(
            access_id="GOOGTESTACCESSID0000000000",
            secret="dGVzdC1zZWNyZXQtZm9yLXNpZ25pbmctb25seQ",
        )
    
    def test_loads_flat_hmac_key(self, tmp_path):
        path = tmp_path / "hmac.json"
        path.write_text(json.dumps({"accessId": "GOOGFLAT", "secret": "s3cr3t"}))
        provider = CredentialProvider(str(path), provider="s3")
        
        assert provider.load() is True
        assert provider.current_credentials().access_id == "GOOGFLAT"
    
    def test_hmac_secret_not_in_repr(self):
        assert "s3cr3t" not in repr(HmacCredentials(access_id="GOOG", secret="s3cr3t"))
    
    def test_missing_file_fails_silently(self, tmp_path, caplog):
        """A missing key file is logged, not raised."""
        provider = CredentialProvider(str(tmp_path / "key.json"))
        
        with caplog.at_level(logging.ERROR):
            assert provider.load() is False
        
        assert not provider.is_loaded
        assert "not found" in provider.error
        assert any("Failing silently" in r.getMessage() for r in caplog.records)
    
    @pytest.mark.parametrize("content", [
        "{not json",
        "[]",
        json.dumps({"type": "service_account", "project_id": "p"}),
    ])
    def test_malformed_service_account_key(self, tmp_path, content):
        path = tmp_path / "key.json"
        path.write_text(content)
        provider = CredentialProvider(str(path), provider="gcs")
        
        assert provider.load() is False
        assert "Malformed credentials" in provider.error
    
    @pytest.mark.parametrize("content", [
        "{not json",
        "[]",
        json.dumps({"metadata": {"accessId": "GOOG"}}),
        json.dumps({"secret": "only-secret"}),
    ])
    def test_malformed_hmac_key(self, tmp_path, content):
        path = tmp_path / "hmac.json"
        path.write_text(content)
        provider = CredentialProvider(str(path), provider="s3")
        
        assert provider.load() is False
        assert "Malformed credentials" in provider.error
    
    def test_unreadable_path(self, tmp_path):
        """A directory in place of the key file is an I/O failure."""
        provider = CredentialProvider(str(tmp_path))
        
        assert provider.load() is False
        assert provider.error
    
    def test_unsupported_provider(self, service_account_key_file):
        provider = CredentialProvider(service_account_key_file, provider="azure")
        
        assert provider.load() is False
        assert "Unsupported storage provider" in provider.error
    
    def test_current_credentials_before_load_raises(self, service_account_key_file):
        provider = CredentialProvider(service_account_key_file)
        
        with pytest.raises(StorageConfigurationError):
            provider.current_credentials()
    
    def test_current_credentials_after_failed_load_carries_reason(self, tmp_path):
        provider = CredentialProvider(str(tmp_path / "missing.json"))
        provider.load()
        
        with pytest.raises(StorageConfigurationError) as exc_info:
            provider.current_credentials()
        
        assert "not found" in exc_info.value.message
        assert exc_info.value.details["credentials_path"].endswith("missing.json")


class TestStorageLifecycle:
    """Tests for init_storage / StorageContext / close_storage."""
    
    def test_missing_credentials_leaves_client_unset(self, tmp_path):
        """Startup succeeds without credentials; the client stays unset."""
        context = init_storage(Settings(credentials_path=str(tmp_path / "key.json")))
        
        assert context.client is None
        assert not context.is_configured
        assert "not found" in context.error
    
    def test_require_client_raises_configuration_error(self, tmp_path):
        context = init_storage(Settings(credentials_path=str(tmp_path / "key.json")))
        
        with pytest.raises(StorageConfigurationError):
            context.require_client()
    
    def test_every_failing_request_logged(self, caplog):
        """Each request that finds no client logs the configuration error."""
        context = StorageContext(provider="gcs", error="no key")
        
        with caplog.at_level(logging.ERROR):
            for _ in range(3):
                with pytest.raises(StorageConfigurationError):
                    context.require_client()
        
        failures = [r for r in caplog.records if "Storage unavailable (request)" in r.getMessage()]
        assert len(failures) == 3
    
    def test_context_is_immutable(self):
        """Requests cannot change the shared storage context."""
        context = StorageContext(provider="gcs", error="no key")
        
        with pytest.raises(AttributeError):
            context.client = FakeStorageClient()
    
    def test_gcs_client_built_from_service_account(self, service_account_key_file):
        context = init_storage(Settings(
            storage_provider="gcs", credentials_path=service_account_key_file
        ))
        
        assert context.is_configured
        assert isinstance(context.require_client(), GCSStorageClient)
        close_storage(context)
    
    def test_s3_client_built_from_hmac_key(self, hmac_key_file):
        context = init_storage(Settings(storage_provider="s3", credentials_path=hmac_key_file))
        
        assert context.is_configured
        assert isinstance(context.require_client(), S3StorageClient)
        close_storage(context)
    
    def test_unsupported_provider_degrades(self, service_account_key_file):
        context = init_storage(Settings(
            storage_provider="azure", credentials_path=service_account_key_file
        ))
        
        assert not context.is_configured
        assert "Unsupported storage provider" in context.error
    
    def test_close_storage_closes_client(self):
        fake = FakeStorageClient()
        context = StorageContext(provider="fake", client=fake)
        
        close_storage(context)
        
        assert fake.closed
    
    def test_close_storage_without_client(self):
        close_storage(StorageContext(provider="gcs", error="no key"))


class TestGetStorageDependency:
    """Tests for the get_storage dependency."""
    
    def test_missing_context_not_written_to_app_state(self):
        """A request before startup gets an unconfigured context without touching app state."""
        from types import SimpleNamespace
        from starlette.datastructures import State
        
        from signed_upload.api.dependencies import get_storage
        
        state = State()
        request = SimpleNamespace(app=SimpleNamespace(state=state))
        
        storage = get_storage(request)
        
        assert not storage.is_configured
        assert getattr(state, "storage", None) is None
    
    def test_returns_startup_context(self):
        from types import SimpleNamespace
        from starlette.datastructures import State
        
        from signed_upload.api.dependencies import get_storage
        
        context = StorageContext(provider="fake", client=FakeStorageClient())
        state = State()
        state.storage = context
        
        assert get_storage(SimpleNamespace(app=SimpleNamespace(state=state))) is context
