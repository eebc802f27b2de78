"""Testing utilities and fakes for the image jobs pipeline."""

from .fakes import (
    FakeS3Client,
    FakeSNSClient,
    FakeLogger,
    S3Object,
    S3Bucket,
    create_test_image,
    make_s3_event,
    make_s3_record,
    make_sns_event,
    make_sqs_sns_event,
    setup_test_s3_environment,
    upload_headers,
)

__all__ = [
    "FakeS3Client",
    "FakeSNSClient",
    "FakeLogger",
    "S3Object",
    "S3Bucket",
    "create_test_image",
    "make_s3_event",
    "make_s3_record",
    "make_sns_event",
    "make_sqs_sns_event",
    "setup_test_s3_environment",
    "upload_headers",
]
