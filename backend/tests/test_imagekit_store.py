"""
SnapShare Backend: ImageKit Object Store Tests
================================================

What:  Tests for ImageKitObjectStore request shape and failure mapping.
How:   httpx.MockTransport answers in-process; no request leaves the test.
"""

import base64

import httpx
import pytest

from snapshare.exceptions import UploadFailedError
from snapshare.services.imagekit_store import ImageKitObjectStore

UPLOAD_URL = "https://upload.imagekit.test/api/v1/files/upload"
API_URL = "https://api.imagekit.test/v1"


def make_store(handler) -> ImageKitObjectStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ImageKitObjectStore(
        private_key="private_test_key",
        upload_url=UPLOAD_URL,
        api_url=API_URL,
        folder="/posts",
        client=client,
    )


class TestUpload:

    @pytest.mark.asyncio
    async def test_success_returns_url_and_file_id(self, sample_image_bytes):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            seen["body"] = request.read()
            return httpx.Response(
                200,
                json={"fileId": "abc123", "url": "https://ik.imagekit.io/demo/posts/image_1.jpg"},
            )

        store = make_store(handler)
        result = await store.upload(sample_image_bytes, "image_1.jpg", "image/jpeg")
        await store.aclose()

        assert result.url == "https://ik.imagekit.io/demo/posts/image_1.jpg"
        assert result.external_id == "abc123"

        request = seen["request"]
        assert request.method == "POST"
        assert str(request.url) == UPLOAD_URL
        expected_auth = base64.b64encode(b"private_test_key:").decode()
        assert request.headers["Authorization"] == f"Basic {expected_auth}"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="fileName"' in seen["body"]
        assert b"image_1.jpg" in seen["body"]
        assert b'name="folder"' in seen["body"]
        assert sample_image_bytes in seen["body"]

    @pytest.mark.asyncio
    async def test_error_response_carries_imagekit_message(self):
        def handler(request):
            return httpx.Response(403, json={"message": "Your account has exceeded its quota"})

        store = make_store(handler)
        with pytest.raises(UploadFailedError, match="exceeded its quota") as exc_info:
            await store.upload(b"abc", "image_1.jpg", "image/jpeg")

        assert exc_info.value.context["status"] == 403

    @pytest.mark.asyncio
    async def test_error_response_without_json(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        store = make_store(handler)
        with pytest.raises(UploadFailedError, match="HTTP 502"):
            await store.upload(b"abc", "image_1.jpg", "image/jpeg")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        store = make_store(handler)
        with pytest.raises(UploadFailedError, match="timed out"):
            await store.upload(b"abc", "image_1.jpg", "image/jpeg")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = make_store(handler)
        with pytest.raises(UploadFailedError, match="connection refused"):
            await store.upload(b"abc", "image_1.jpg", "image/jpeg")

    @pytest.mark.asyncio
    async def test_malformed_success_response(self):
        def handler(request):
            return httpx.Response(200, json={"name": "image_1.jpg"})

        store = make_store(handler)
        with pytest.raises(UploadFailedError, match="unexpected response"):
            await store.upload(b"abc", "image_1.jpg", "image/jpeg")


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_calls_management_api(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(204)

        store = make_store(handler)
        await store.delete("abc123")

        assert seen["request"].method == "DELETE"
        assert str(seen["request"].url) == f"{API_URL}/files/abc123"

    @pytest.mark.asyncio
    async def test_delete_missing_file_is_not_an_error(self):
        store = make_store(lambda request: httpx.Response(404, json={"message": "not found"}))
        await store.delete("gone")

    @pytest.mark.asyncio
    async def test_delete_server_error_raises(self):
        store = make_store(lambda request: httpx.Response(500, json={"message": "oops"}))
        with pytest.raises(UploadFailedError, match="oops"):
            await store.delete("abc123")
