"""boto3-backed ObjectStore and Publisher adapters."""

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional
from urllib.parse import quote

from .error_handling import translate_storage_errors
from .exceptions import (
    OutputWriteFailure,
    PresignFailure,
    PublishFailure,
    UpstreamFetchFailure,
)
from .models import OutputObject, StoredObject
from .protocols import ObjectStore, Publisher, S3ClientProtocol, SNSClientProtocol

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client
    from mypy_boto3_sns.client import SNSClient
else:
    S3Client = Any
    SNSClient = Any


def ascii_metadata(metadata: Mapping[str, str]) -> Dict[str, str]:
    """S3 user metadata travels in HTTP headers, so non-ASCII values are percent-encoded."""
    return {
        key: value if value.isascii() else quote(value, safe=" ")
        for key, value in metadata.items()
    }


class S3ObjectStore(ObjectStore):
    """ObjectStore over an S3 client."""

    def __init__(self, s3_client: "S3ClientProtocol | S3Client"):
        self._s3_client = s3_client

    @translate_storage_errors(UpstreamFetchFailure)
    def get(self, bucket: str, key: str) -> StoredObject:
        response = self._s3_client.get_object(Bucket=bucket, Key=key)
        return StoredObject(
            bucket=bucket,
            key=key,
            body=response["Body"].read(),
            content_type=response.get("ContentType", "application/octet-stream"),
            metadata=response.get("Metadata", {}),
        )

    @translate_storage_errors(UpstreamFetchFailure)
    def head_metadata(self, bucket: str, key: str) -> Dict[str, str]:
        response = self._s3_client.head_object(Bucket=bucket, Key=key)
        return dict(response.get("Metadata", {}))

    @translate_storage_errors(OutputWriteFailure)
    def put(self, obj: OutputObject) -> None:
        self._s3_client.put_object(
            Bucket=obj.bucket,
            Key=obj.key,
            Body=obj.body,
            ContentType=obj.content_type,
            Metadata=ascii_metadata(obj.metadata),
        )

    @translate_storage_errors(PresignFailure)
    def presign_put(
        self,
        bucket: str,
        key: str,
        content_type: str,
        metadata: Mapping[str, str],
        expires_in: int,
    ) -> str:
        return self._s3_client.generate_presigned_url(
            ClientMethod="put_object",
            Params={
                "Bucket": bucket,
                "Key": key,
                "ContentType": content_type,
                "Metadata": ascii_metadata(metadata),
            },
            ExpiresIn=expires_in,
        )


class SnsPublisher(Publisher):
    """Publisher over an SNS topic, using String message attributes."""

    def __init__(self, sns_client: "SNSClientProtocol | SNSClient", topic_arn: str):
        self._sns_client = sns_client
        self._topic_arn = topic_arn

    @translate_storage_errors(PublishFailure)
    def publish(
        self, message: str, attributes: Mapping[str, str], subject: Optional[str] = None
    ) -> str:
        kwargs: Dict[str, Any] = {
            "TopicArn": self._topic_arn,
            "Message": message,
            "MessageAttributes": {
                name: {"DataType": "String", "StringValue": value}
                for name, value in attributes.items()
            },
        }
        if subject:
            kwargs["Subject"] = subject
        response = self._sns_client.publish(**kwargs)
        return response.get("MessageId", "")
