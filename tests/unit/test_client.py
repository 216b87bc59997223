"""
Tests for the object storage clients.

COSObjectClient is exercised against a fake boto3 client so we can check
the request parameters and the error translation without a bucket.
"""

import io

import pytest
from botocore.exceptions import ClientError

from cos_store.config.settings import CosSettings
from cos_store.core.exceptions import DeleteError, FetchError, NotFoundError, UploadError
from cos_store.infrastructure.storage.client import (
    COSObjectClient,
    MockObjectClient,
    create_object_client,
)


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeS3:
    """Records calls and answers like boto3's S3 client."""

    def __init__(self, objects=None, fail_with=None):
        self.objects = dict(objects or {})
        self.fail_with = fail_with
        self.calls = []

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    def put_object(self, **params):
        self.calls.append(("put_object", params))
        self._maybe_fail()
        self.objects[params["Key"]] = params["Body"]
        return {}

    def get_object(self, **params):
        self.calls.append(("get_object", params))
        self._maybe_fail()
        if params["Key"] not in self.objects:
            raise client_error("NoSuchKey", "GetObject")
        return {
            "Body": io.BytesIO(self.objects[params["Key"]]),
            "ResponseMetadata": {
                "HTTPHeaders": {"content-type": "image/png", "x-cos-request-id": "abc"},
            },
        }

    def head_object(self, **params):
        self.calls.append(("head_object", params))
        self._maybe_fail()
        if params["Key"] not in self.objects:
            raise client_error("404", "HeadObject")
        return {"ResponseMetadata": {"HTTPHeaders": {"content-length": "3"}}}

    def delete_object(self, **params):
        self.calls.append(("delete_object", params))
        self._maybe_fail()
        return {}


@pytest.fixture
def settings():
    return CosSettings(bucket="assets-1250000000", region="ap-guangzhou", secret_id="id", secret_key="key")


def make_client(settings, fake):
    client = COSObjectClient(settings)
    client._s3_client = fake
    return client


class TestCOSObjectClient:

    def test_construction_builds_no_sdk_client(self, settings):
        """The boto3 client is only created on first use."""
        client = COSObjectClient(settings)

        assert client._s3_client is None

    @pytest.mark.asyncio
    async def test_put_object_parameters(self, settings):
        fake = FakeS3()
        client = make_client(settings, fake)

        await client.put_object("a.png", b"abc", content_type="image/png", cache_control="max-age=2592000")

        assert fake.calls == [("put_object", {
            "Bucket": "assets-1250000000",
            "Key": "a.png",
            "Body": b"abc",
            "ContentType": "image/png",
            "CacheControl": "max-age=2592000",
        })]

    @pytest.mark.asyncio
    async def test_put_object_failure_is_upload_error(self, settings):
        client = make_client(settings, FakeS3(fail_with=client_error("AccessDenied", "PutObject")))

        with pytest.raises(UploadError) as exc_info:
            await client.put_object("a.png", b"abc")

        assert isinstance(exc_info.value.__cause__, ClientError)

    @pytest.mark.asyncio
    async def test_get_object_returns_body_and_headers(self, settings):
        client = make_client(settings, FakeS3(objects={"a.png": b"abc"}))

        stored = await client.get_object("a.png")

        assert stored.key == "a.png"
        assert stored.body == b"abc"
        assert stored.headers == {"content-type": "image/png", "x-cos-request-id": "abc"}

    @pytest.mark.asyncio
    async def test_get_missing_object_is_not_found(self, settings):
        client = make_client(settings, FakeS3())

        with pytest.raises(NotFoundError):
            await client.get_object("missing.png")

    @pytest.mark.asyncio
    async def test_get_object_transport_failure_is_fetch_error(self, settings):
        client = make_client(settings, FakeS3(fail_with=client_error("InternalError", "GetObject")))

        with pytest.raises(FetchError) as exc_info:
            await client.get_object("a.png")

        assert not isinstance(exc_info.value, NotFoundError)

    @pytest.mark.asyncio
    async def test_head_object(self, settings):
        client = make_client(settings, FakeS3(objects={"a.png": b"abc"}))

        assert await client.head_object("a.png") == {"content-length": "3"}

        with pytest.raises(NotFoundError):
            await client.head_object("b.png")

    @pytest.mark.asyncio
    async def test_delete_failure_is_delete_error(self, settings):
        client = make_client(settings, FakeS3(fail_with=client_error("AccessDenied", "DeleteObject")))

        with pytest.raises(DeleteError):
            await client.delete_object("a.png")


class TestMockObjectClient:

    @pytest.mark.asyncio
    async def test_keys_are_case_sensitive(self):
        client = MockObjectClient()
        await client.put_object("Photo.jpg", b"x")

        with pytest.raises(NotFoundError):
            await client.head_object("photo.jpg")

    @pytest.mark.asyncio
    async def test_delete_missing_key_fails(self):
        with pytest.raises(DeleteError):
            await MockObjectClient().delete_object("nope.png")


class TestFactory:

    def test_mock_mode_flag(self):
        assert isinstance(create_object_client(mock_mode=True), MockObjectClient)

    def test_mock_mode_from_settings(self):
        assert isinstance(create_object_client(CosSettings(mock_mode=True)), MockObjectClient)

    def test_cos_client_by_default(self, settings):
        assert isinstance(create_object_client(settings), COSObjectClient)

    def test_config_required_without_mock_mode(self):
        with pytest.raises(ValueError):
            create_object_client()
