"""
Shared fixtures.

Adapter settings are read from the environment, so every test starts
with the GHOST_STORAGE_ADAPTER_COS_* variables cleared.
"""

import os
from uuid import uuid4

import pytest

from cos_store.config.settings import CosSettings, get_cos_settings, get_settings
from cos_store.core.store import COSStore
from cos_store.infrastructure.storage.client import MockObjectClient

ENV_PREFIX = "GHOST_STORAGE_ADAPTER_COS_"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    get_cos_settings.cache_clear()
    yield
    get_settings.cache_clear()
    get_cos_settings.cache_clear()


@pytest.fixture
def mock_client():
    return MockObjectClient()


@pytest.fixture
def make_store(mock_client):
    """Build a store over the shared in-memory client from config values."""
    def _make(**config):
        config.setdefault("bucket", "assets-1250000000")
        config.setdefault("region", "ap-guangzhou")
        return COSStore(CosSettings(**config), client=mock_client)
    return _make


@pytest.fixture
def upload_file(tmp_path):
    """Write bytes to a temp file, the way the CMS spools uploads."""
    def _write(name: str, data: bytes = b"\x89PNG fake image bytes") -> str:
        path = tmp_path / f"{uuid4().hex}-{name}"
        path.write_bytes(data)
        return str(path)
    return _write
