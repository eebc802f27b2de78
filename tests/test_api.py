"""Tests for the upload URL HTTP API."""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from image_jobs.api import create_app
from image_jobs.core.services import UploadCredentialIssuer
from image_jobs.core.storage import S3ObjectStore
from image_jobs.testing.fakes import FakeLogger, FakeS3Client


@pytest.fixture
def s3_client():
    client = FakeS3Client()
    client.create_bucket("originals")
    return client


@pytest.fixture
def client(s3_client):
    issuer = UploadCredentialIssuer(
        store=S3ObjectStore(s3_client), bucket="originals", logger=FakeLogger()
    )
    return TestClient(create_app(issuer_factory=lambda: issuer))


class TestGetUploadUrl:
    """Tests for POST /get-upload-url."""

    def test_success(self, client, s3_client):
        response = client.post(
            "/get-upload-url",
            json={
                "fileName": "cat.jpg",
                "fileType": "image/jpeg",
                "metadata": {"compress-format": "webp"},
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["processingType"] == "compress"
        assert body["key"].endswith("-cat.jpg")
        assert body["uploadURL"].startswith("https://originals.s3.amazonaws.com/")
        assert s3_client.presigned_requests[0]["Params"]["Metadata"] == {
            "compress-quality": "75",
            "compress-format": "webp",
            "compress-optimization": "medium",
        }
        assert body["metadata"] == s3_client.presigned_requests[0]["Params"]["Metadata"]

    def test_returns_signed_metadata(self, client, s3_client):
        response = client.post(
            "/get-upload-url",
            json={
                "fileName": "cat.jpg",
                "fileType": "image/jpeg",
                "metadata": {"watermark-text": "© ACME", "resize-width": "300"},
            },
        )

        body = response.json()
        signed = s3_client.presigned_requests[0]["Params"]["Metadata"]
        assert body["processingType"] == "watermark"
        assert body["metadata"] == signed
        assert body["metadata"]["watermark-text"] == "%C2%A9%20ACME"
        assert "resize-width" not in body["metadata"]
        assert all(value.isascii() for value in body["metadata"].values())

    def test_metadata_is_optional(self, client):
        response = client.post(
            "/get-upload-url", json={"fileName": "cat.jpg", "fileType": "image/jpeg"}
        )
        assert response.status_code == 200
        assert response.json()["processingType"] == "resize"

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"fileType": "image/jpeg"}, "fileName is required"),
            ({"fileName": "cat.jpg"}, "fileType is required"),
        ],
    )
    def test_missing_fields(self, client, payload, message):
        response = client.post("/get-upload-url", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": message}

    def test_malformed_body(self, client):
        response = client.post(
            "/get-upload-url",
            json={"fileName": "cat.jpg", "fileType": "image/jpeg", "metadata": "resize"},
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_storage_failure_is_500(self, client, s3_client):
        s3_client.set_failure_mode(True, "Signing failed")
        response = client.post(
            "/get-upload-url", json={"fileName": "cat.jpg", "fileType": "image/jpeg"}
        )
        assert response.status_code == 500
        assert "error" in response.json()

    def test_unexpected_failure_is_json_500(self):
        issuer = Mock()
        issuer.issue.side_effect = RuntimeError("boom")
        response = TestClient(create_app(issuer_factory=lambda: issuer)).post(
            "/get-upload-url", json={"fileName": "cat.jpg", "fileType": "image/jpeg"}
        )
        assert response.status_code == 500
        assert response.json() == {"error": "boom"}

    def test_missing_configuration_is_500(self, monkeypatch):
        monkeypatch.delenv("ORIGINAL_IMAGES_BUCKET", raising=False)
        response = TestClient(create_app()).post(
            "/get-upload-url", json={"fileName": "cat.jpg", "fileType": "image/jpeg"}
        )
        assert response.status_code == 500
        assert "ORIGINAL" in response.json()["error"].upper()

    def test_cors_preflight(self, client):
        response = client.options(
            "/get-upload-url",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
