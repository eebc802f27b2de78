"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3

from .config import PipelineConfig
from .models import OperationTag
from .observability import MetricsCollector, StructuredLogger
from .protocols import LoggerProtocol, S3ClientProtocol, SNSClientProtocol
from .services import (
    JobDispatcher,
    NotificationPublisher,
    TransformWorker,
    UploadCredentialIssuer,
)
from .storage import S3ObjectStore, SnsPublisher


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: Optional[str] = None) -> LoggerProtocol:
        return StructuredLogger(name, level)


class AwsClientFactory:
    """Factory for boto3 clients, optionally pinned to a region."""

    @staticmethod
    def create_s3_client(region_name: Optional[str] = None, **kwargs: Any) -> S3ClientProtocol:
        session = boto3.Session(region_name=region_name)
        return session.client("s3", **kwargs)  # type: ignore

    @staticmethod
    def create_sns_client(region_name: Optional[str] = None, **kwargs: Any) -> SNSClientProtocol:
        session = boto3.Session(region_name=region_name)
        return session.client("sns", **kwargs)  # type: ignore


class PipelineFactory:
    """Builds the pipeline services from a PipelineConfig."""

    def __init__(
        self,
        config: PipelineConfig,
        s3_client: Optional[S3ClientProtocol] = None,
        sns_client: Optional[SNSClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self.config = config
        self._s3_client = s3_client
        self._sns_client = sns_client
        self._logger = logger
        self.metrics_collector = metrics_collector

    @property
    def s3_client(self) -> S3ClientProtocol:
        if self._s3_client is None:
            self._s3_client = AwsClientFactory.create_s3_client(self.config.region_name)
        return self._s3_client

    @property
    def sns_client(self) -> SNSClientProtocol:
        if self._sns_client is None:
            self._sns_client = AwsClientFactory.create_sns_client(self.config.region_name)
        return self._sns_client

    def logger(self, component: str) -> LoggerProtocol:
        if self._logger is not None:
            return self._logger
        return LoggerFactory.create_logger(f"image-jobs.{component}")

    def create_issuer(self) -> UploadCredentialIssuer:
        self.config.require("original_bucket")
        return UploadCredentialIssuer(
            store=S3ObjectStore(self.s3_client),
            bucket=self.config.original_bucket,
            logger=self.logger("issuer"),
            expires_in=self.config.upload_expiry_seconds,
        )

    def create_notification_publisher(self) -> NotificationPublisher:
        self.config.require("topic_arn")
        return NotificationPublisher(
            store=S3ObjectStore(self.s3_client),
            publisher=SnsPublisher(self.sns_client, self.config.topic_arn),
            logger=self.logger("publisher"),
        )

    def create_dispatcher(self, operation: OperationTag) -> JobDispatcher:
        self.config.require("processed_bucket")
        return JobDispatcher(
            worker=TransformWorker(operation, font_path=self.config.watermark_font),
            store=S3ObjectStore(self.s3_client),
            output_bucket=self.config.processed_bucket,
            logger=self.logger(f"{operation.value}-worker"),
            metrics_collector=self.metrics_collector,
        )
