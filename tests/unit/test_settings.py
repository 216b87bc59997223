"""
Tests for adapter configuration resolution.

Resolution is pure: no client is built and nothing touches the network,
so these tests only construct settings objects.
"""

import pytest
from pydantic import ValidationError

from cos_store.config.settings import CosSettings, Settings


class TestSourcePrecedence:
    """Environment, then config object, then defaults."""

    def test_environment_beats_config_object(self, monkeypatch):
        """Operators can override a deployed config through the environment."""
        monkeypatch.setenv("GHOST_STORAGE_ADAPTER_COS_BUCKET", "env-bucket")

        settings = CosSettings.from_config({"bucket": "config-bucket", "region": "ap-beijing"})

        assert settings.bucket == "env-bucket"
        assert settings.region == "ap-beijing"

    def test_empty_environment_value_falls_through(self, monkeypatch):
        """An empty variable is treated as unset."""
        monkeypatch.setenv("GHOST_STORAGE_ADAPTER_COS_DOMAIN", "")

        settings = CosSettings.from_config({"domain": "img.example.com"})

        assert settings.domain == "img.example.com"

    def test_defaults(self):
        settings = CosSettings()

        assert settings.protocol == "https:"
        assert settings.path_prefix == ""
        assert settings.domain == ""
        assert settings.private_storage is False
        assert settings.debug is False

    def test_camel_case_config_keys(self):
        """The CMS config file uses camelCase keys."""
        settings = CosSettings.from_config({
            "secretId": "id",
            "secretKey": "key",
            "pathPrefix": "blog",
            "assetHost": "https://cdn.example.com",
            "privateStorage": True,
            "unknownKey": "ignored",
        })

        assert settings.secret_id == "id"
        assert settings.secret_key == "key"
        assert settings.path_prefix == "blog"
        assert settings.asset_host == "https://cdn.example.com"
        assert settings.private_storage is True

    def test_private_storage_from_environment(self, monkeypatch):
        monkeypatch.setenv("GHOST_STORAGE_ADAPTER_COS_PRIVATE_STORAGE", "true")

        assert CosSettings().private_storage is True

    def test_leading_slash_stripped_from_path_prefix(self):
        assert CosSettings(path_prefix="/blog/images").path_prefix == "blog/images"

    def test_settings_are_immutable(self):
        settings = CosSettings(bucket="b")

        with pytest.raises(ValidationError):
            settings.bucket = "other"


class TestHostResolution:
    """Which host prefixes returned URLs."""

    def test_default_bucket_domain(self):
        """Without asset host or domain, use the bucket's COS domain."""
        settings = CosSettings(bucket="b", region="ap-1", domain="", asset_host="")

        assert settings.host == "https://b.cos.ap-1.myqcloud.com"

    def test_custom_domain(self):
        settings = CosSettings(bucket="b", region="ap-1", domain="img.example.com")

        assert settings.host == "https://img.example.com"

    def test_custom_domain_uses_protocol(self):
        settings = CosSettings(bucket="b", region="ap-1", domain="img.example.com", protocol="http:")

        assert settings.host == "http://img.example.com"

    def test_asset_host_beats_domain(self):
        settings = CosSettings(
            bucket="b",
            region="ap-1",
            domain="img.example.com",
            asset_host="https://cdn.example.com/",
        )

        assert settings.host == "https://cdn.example.com"

    def test_private_storage_without_asset_host_has_no_host(self):
        """None, not an empty string: the signal for relative URLs."""
        settings = CosSettings(bucket="b", region="ap-1", private_storage=True, asset_host="")

        assert settings.host is None

    def test_private_storage_blank_asset_host_has_no_host(self):
        settings = CosSettings(bucket="b", region="ap-1", private_storage=True, asset_host="   ")

        assert settings.host is None

    def test_private_storage_with_asset_host(self):
        """An explicit host switches private storage back to absolute URLs."""
        settings = CosSettings(
            bucket="b",
            region="ap-1",
            private_storage=True,
            asset_host="https://signed-cdn.example.com",
        )

        assert settings.host == "https://signed-cdn.example.com"


class TestEndpointAndValidation:

    def test_default_endpoint_follows_region(self):
        assert CosSettings(region="ap-shanghai").endpoint == "https://cos.ap-shanghai.myqcloud.com"

    def test_endpoint_override(self):
        settings = CosSettings(region="ap-shanghai", endpoint_url="http://localhost:9000")

        assert settings.endpoint == "http://localhost:9000"

    def test_missing_required_fields_reported_by_env_name(self):
        settings = CosSettings(bucket="b", region="ap-1")

        assert settings.validate_required_fields() == [
            "GHOST_STORAGE_ADAPTER_COS_SECRET_ID",
            "GHOST_STORAGE_ADAPTER_COS_SECRET_KEY",
        ]

    def test_mock_mode_requires_nothing(self):
        assert CosSettings(mock_mode=True).validate_required_fields() == []


class TestAppSettings:

    def test_api_keys_parsed_from_comma_list(self):
        settings = Settings(api_keys="a, b,,c")

        assert settings.api_keys_list == ["a", "b", "c"]

    def test_wildcard_cors(self):
        assert Settings(cors_origins="*").cors_origins_list == ["*"]
