"""
Tests for the Cloudinary storage client.

HTTP traffic goes through httpx.MockTransport; nothing leaves the process.
"""
import asyncio
import hashlib
import json

import httpx
import pytest

from dialysis_care.exceptions import StorageError
from dialysis_care.services import storage_service
from dialysis_care.services.storage_service import CloudinaryStorage

NOW = 1700000000


def make_storage(handler, **overrides):
    options = {
        "cloud_name": "demo-cloud",
        "api_key": "key-123",
        "api_secret": "shh",
        "transport": httpx.MockTransport(handler),
    }
    options.update(overrides)
    return CloudinaryStorage(**options)


@pytest.fixture
def frozen_time(monkeypatch):
    monkeypatch.setattr(storage_service.time, "time", lambda: NOW)


class TestSigning:
    def test_signature_is_sha1_of_sorted_params_and_secret(self):
        storage = make_storage(lambda request: httpx.Response(200))
        expected = hashlib.sha1(b"a=1&b=two&c=3shh").hexdigest()
        assert storage.sign({"c": 3, "a": 1, "b": "two"}) == expected


class TestUpload:
    def test_successful_upload(self, frozen_time):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = request.content
            return httpx.Response(200, json={
                "secure_url": "https://res.cloudinary.com/demo-cloud/image/upload/dialysis_app/proof.jpg",
                "public_id": "dialysis_app/proof",
            })

        storage = make_storage(handler)
        stored = asyncio.run(storage.upload(b"jpeg-bytes", "proof.jpg", "image/jpeg"))

        assert stored.url == "https://res.cloudinary.com/demo-cloud/image/upload/dialysis_app/proof.jpg"
        assert stored.public_id == "dialysis_app/proof"
        assert seen["url"] == "https://api.cloudinary.com/v1_1/demo-cloud/image/upload"

        signature = hashlib.sha1(
            f"folder=dialysis_app&timestamp={NOW}&unique_filename=false&use_filename=true".encode() + b"shh"
        ).hexdigest()
        body = seen["body"]
        assert signature.encode() in body
        assert b"key-123" in body
        assert b"jpeg-bytes" in body
        assert b'filename="proof.jpg"' in body
        # The secret itself is never sent
        assert b"shh" not in body

    def test_http_error_becomes_storage_error(self):
        storage = make_storage(lambda request: httpx.Response(401, json={"error": {"message": "bad key"}}))
        with pytest.raises(StorageError) as exc_info:
            asyncio.run(storage.upload(b"jpeg-bytes", "proof.jpg", "image/jpeg"))
        assert exc_info.value.message == "Image upload failed"
        assert exc_info.value.status_code == 500

    def test_malformed_reply_becomes_storage_error(self):
        storage = make_storage(lambda request: httpx.Response(200, content=json.dumps({"unexpected": True})))
        with pytest.raises(StorageError):
            asyncio.run(storage.upload(b"jpeg-bytes", "proof.jpg", "image/jpeg"))

    def test_network_error_becomes_storage_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        storage = make_storage(handler)
        with pytest.raises(StorageError):
            asyncio.run(storage.upload(b"jpeg-bytes", "proof.jpg", "image/jpeg"))

    def test_unconfigured_storage(self):
        calls = []
        storage = make_storage(lambda request: calls.append(request), cloud_name="")
        with pytest.raises(StorageError) as exc_info:
            asyncio.run(storage.upload(b"jpeg-bytes", "proof.jpg", "image/jpeg"))
        assert exc_info.value.message == "Image storage is not configured"
        assert calls == []

    def test_custom_folder(self, frozen_time):
        seen = {}

        def handler(request):
            seen["body"] = request.content
            return httpx.Response(200, json={"secure_url": "https://x/y.jpg", "public_id": "clinic_a/y"})

        storage = make_storage(handler, folder="clinic_a")
        asyncio.run(storage.upload(b"jpeg-bytes", "y.jpg", "image/jpeg"))
        assert b"clinic_a" in seen["body"]
