"""Tests for the function-style event handlers."""

import pytest

from image_jobs import handlers
from image_jobs.core.config import PipelineConfig
from image_jobs.core.exceptions import ConfigurationError, UpstreamFetchFailure
from image_jobs.core.factories import PipelineFactory
from image_jobs.testing.fakes import (
    FakeLogger,
    FakeSNSClient,
    make_s3_event,
    setup_test_s3_environment,
)


@pytest.fixture
def fakes(monkeypatch):
    s3_client = setup_test_s3_environment()
    sns_client = FakeSNSClient()
    factory = PipelineFactory(
        PipelineConfig(
            original_bucket="test-originals",
            processed_bucket="test-processed",
            topic_arn="arn:aws:sns:us-east-1:123456789012:image-jobs",
        ),
        s3_client=s3_client,
        sns_client=sns_client,
        logger=FakeLogger(),
    )
    handlers.reset_cache()
    monkeypatch.setattr(handlers, "_factory", lambda: factory)
    yield s3_client, sns_client
    monkeypatch.undo()
    handlers.reset_cache()


class TestHandlers:
    def test_publish_notification(self, fakes):
        _, sns_client = fakes

        response = handlers.publish_notification(
            make_s3_event("test-originals", "watermark/photo2.jpg"), None
        )

        assert response["statusCode"] == 200
        assert response["published"][0]["processingType"] == "watermark"
        assert len(sns_client.published) == 1

    @pytest.mark.parametrize(
        "handler,key,prefix",
        [
            (handlers.resize, "resize/photo1.jpg", "resized/"),
            (handlers.watermark, "watermark/photo2.jpg", "watermarked/"),
            (handlers.compress, "compress/photo3.png", "compressed/"),
        ],
    )
    def test_workers(self, fakes, handler, key, prefix):
        s3_client, sns_client = fakes
        handlers.publish_notification(make_s3_event("test-originals", key), None)

        response = handler(sns_client.as_sqs_event(), None)

        processed = response["processed"][0]
        assert response["statusCode"] == 200
        assert processed["processed_key"].startswith(prefix)
        assert processed["original_key"] == key
        assert s3_client.get_bucket("test-processed").get_object(processed["processed_key"])

    def test_worker_failure_propagates(self, fakes):
        with pytest.raises(UpstreamFetchFailure):
            handlers.resize(make_s3_event("test-originals", "missing.jpg"), None)


def test_missing_configuration(monkeypatch):
    for name in ["ORIGINAL_IMAGES_BUCKET", "PROCESSED_IMAGES_BUCKET", "SNS_TOPIC_ARN"]:
        monkeypatch.delenv(name, raising=False)
    handlers.reset_cache()
    try:
        with pytest.raises(ConfigurationError):
            handlers.compress(make_s3_event("b", "k.jpg"), None)
    finally:
        handlers.reset_cache()
