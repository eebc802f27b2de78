"""Pipeline services: credential issuing, notification routing and job dispatch."""

import json
import re
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from ..transforms import apply_transform
from .events import is_raw_s3_event, iter_s3_records
from .exceptions import InvalidRequest
from .models import (
    JobResult,
    ObjectRef,
    OperationTag,
    OutputObject,
    ProcessingJob,
    StoredObject,
    UploadRequest,
    WriteCredential,
)
from .naming import build_output
from .observability import LogContext, MetricsCollector, PerformanceMetrics
from .parameters import (
    RESIZE_MODE,
    classify,
    decode,
    is_supported_mode,
    migrate_legacy_keys,
    normalize,
)
from .protocols import LoggerProtocol, ObjectStore, Publisher
from .storage import ascii_metadata
from .config import UPLOAD_URL_EXPIRY_SECONDS

PROCESSING_TYPE_ATTRIBUTE = "processing_type"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_file_name(file_name: str) -> str:
    """Reduce a client file name to a safe single path segment."""
    base_name = re.split(r"[\\/]", file_name.strip())[-1]
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", base_name).lstrip(".")
    return cleaned or "upload"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UploadCredentialIssuer:
    """Issues presigned PUT URLs that carry the normalized processing metadata."""

    def __init__(
        self,
        store: ObjectStore,
        bucket: str,
        logger: LoggerProtocol,
        expires_in: int = UPLOAD_URL_EXPIRY_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = store
        self._bucket = bucket
        self._logger = logger
        self._expires_in = expires_in
        self._clock = clock

    def unique_prefix(self, now: datetime) -> str:
        """Millisecond timestamp plus a random suffix; unique across concurrent requests."""
        return f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:8]}"

    def issue(self, request: UploadRequest) -> WriteCredential:
        if not request.file_name.strip():
            raise InvalidRequest("fileName is required")
        if not request.content_type.strip():
            raise InvalidRequest("fileType is required")

        now = self._clock()
        key = f"{self.unique_prefix(now)}-{sanitize_file_name(request.file_name)}"

        raw_metadata = migrate_legacy_keys(request.raw_metadata)
        operation = classify(raw_metadata)
        # Signed into the URL; the client must send exactly these x-amz-meta-* headers.
        metadata = ascii_metadata(normalize(raw_metadata))

        context = LogContext(
            operation="issue_credential", component="upload_credential_issuer"
        ).with_metadata(key=key, processing_type=operation.value)

        if operation == OperationTag.RESIZE and not is_supported_mode(metadata[RESIZE_MODE]):
            self._logger.warning(
                f"Resize mode '{metadata[RESIZE_MODE]}' will be rejected by the worker",
                context,
            )

        url = self._store.presign_put(
            bucket=self._bucket,
            key=key,
            content_type=request.content_type,
            metadata=metadata,
            expires_in=self._expires_in,
        )
        self._logger.info("Issued upload URL", context)

        return WriteCredential(
            url=url,
            object_key=key,
            expires_at=now + timedelta(seconds=self._expires_in),
            operation=operation,
            metadata=metadata,
        )


class NotificationPublisher:
    """Tags storage-write notifications with their operation and republishes them."""

    def __init__(self, store: ObjectStore, publisher: Publisher, logger: LoggerProtocol):
        self._store = store
        self._publisher = publisher
        self._logger = logger

    def classify_object(self, ref: ObjectRef) -> OperationTag:
        """Read only the object's metadata and classify it."""
        metadata = self._store.head_metadata(ref.bucket, ref.key)
        return classify(migrate_legacy_keys(metadata))

    def handle(self, event: Any) -> List[Dict[str, str]]:
        """
        Publish one tagged message per S3 record in ``event``.

        A raw S3 event holding a single record is forwarded unchanged. Otherwise
        each record is published as its own ``{"Records": [record]}`` event.
        A metadata read failure propagates and nothing is published for that
        record.
        """
        records = list(iter_s3_records(event))
        forward_unchanged = len(records) == 1 and is_raw_s3_event(event)
        published = []
        for record, ref in records:
            operation = self.classify_object(ref)
            body = event if forward_unchanged else {"Records": [record]}
            message_id = self._publisher.publish(
                json.dumps(body),
                {PROCESSING_TYPE_ATTRIBUTE: operation.value},
            )
            self._logger.info(
                f"Published notification for {operation.value} processing",
                LogContext(operation="publish", component="notification_publisher"),
                bucket=ref.bucket,
                key=ref.key,
                message_id=message_id,
            )
            published.append(
                {"key": ref.key, "processingType": operation.value, "messageId": message_id}
            )
        return published


class TransformWorker:
    """Pure job runner: decodes parameters, transforms bytes, names the output."""

    def __init__(self, operation: OperationTag, font_path: Optional[str] = None):
        self.operation = operation
        self._font_path = font_path

    def build_job(self, stored: StoredObject) -> ProcessingJob:
        metadata = migrate_legacy_keys(stored.metadata)
        return ProcessingJob(
            source_bucket=stored.bucket,
            source_key=stored.key,
            operation=self.operation,
            parameters=decode(self.operation, metadata),
        )

    def process(
        self,
        job: ProcessingJob,
        data: bytes,
        output_bucket: str,
        processed_at: Optional[datetime] = None,
    ) -> OutputObject:
        result = apply_transform(data, job.parameters, font_path=self._font_path)
        return build_output(
            job.parameters, job.source_key, result, output_bucket, processed_at
        )


class JobDispatcher:
    """Queue-facing entry for one worker: fetch, transform, write."""

    def __init__(
        self,
        worker: TransformWorker,
        store: ObjectStore,
        output_bucket: str,
        logger: LoggerProtocol,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._worker = worker
        self._store = store
        self._output_bucket = output_bucket
        self._logger = logger
        self._metrics_collector = metrics_collector

    @property
    def operation(self) -> OperationTag:
        return self._worker.operation

    def handle(self, event: Any) -> List[JobResult]:
        """Process every object named by a queue delivery; any failure propagates."""
        return [self.process(ref) for _, ref in iter_s3_records(event)]

    def process(self, ref: ObjectRef) -> JobResult:
        start_time = time.time()
        log_context = LogContext(
            correlation_id=f"{self.operation.value}_{ref.key}_{int(start_time * 1000)}",
            operation=f"{self.operation.value}_image",
            component="job_dispatcher",
        ).with_metadata(bucket=ref.bucket, key=ref.key)

        success = False
        error_message = None
        try:
            self._logger.info("Starting job", log_context)
            stored = self._store.get(ref.bucket, ref.key)

            routed = classify(migrate_legacy_keys(stored.metadata))
            if routed != self.operation:
                self._logger.warning(
                    f"Object metadata classifies as {routed.value}; processing as "
                    f"{self.operation.value}",
                    log_context,
                )

            job = self._worker.build_job(stored)
            output = self._worker.process(job, stored.body, self._output_bucket)
            self._store.put(output)
            success = True
        except Exception as e:
            error_message = str(e)
            self._logger.error(
                "Job failed", log_context.with_metadata(error=error_message)
            )
            raise
        finally:
            end_time = time.time()
            if self._metrics_collector:
                self._metrics_collector.record_metric(
                    PerformanceMetrics(
                        operation=self.operation.value,
                        start_time=start_time,
                        end_time=end_time,
                        success=success,
                        error_message=error_message,
                        metadata={"key": ref.key},
                    )
                )

        processing_time = end_time - start_time
        self._logger.info(
            "Processed image",
            log_context,
            processed_key=output.key,
            processing_time_ms=round(processing_time * 1000, 1),
        )
        return JobResult(
            operation=self.operation,
            original_key=ref.key,
            processed_key=output.key,
            stats=dict(output.metadata),
            processing_time=processing_time,
        )
