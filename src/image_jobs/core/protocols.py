"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Protocol

from .models import OutputObject, StoredObject


class S3ClientProtocol(Protocol):
    """Subset of the boto3 S3 client used by the pipeline."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        ...

    def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        ...

    def put_object(self, **kwargs: Any) -> Dict[str, Any]:
        ...

    def generate_presigned_url(
        self, ClientMethod: str, Params: Dict[str, Any], ExpiresIn: int
    ) -> str:
        ...


class SNSClientProtocol(Protocol):
    """Subset of the boto3 SNS client used by the pipeline."""

    def publish(self, **kwargs: Any) -> Dict[str, Any]:
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...


class ObjectStore(ABC):
    """Object storage as seen by the pipeline: read with metadata, write, presign."""

    @abstractmethod
    def get(self, bucket: str, key: str) -> StoredObject:
        """Fetch an object's bytes and attached metadata."""
        ...

    @abstractmethod
    def head_metadata(self, bucket: str, key: str) -> Dict[str, str]:
        """Fetch only an object's attached metadata."""
        ...

    @abstractmethod
    def put(self, obj: OutputObject) -> None:
        """Write (or overwrite) an object."""
        ...

    @abstractmethod
    def presign_put(
        self,
        bucket: str,
        key: str,
        content_type: str,
        metadata: Mapping[str, str],
        expires_in: int,
    ) -> str:
        """Return a URL allowing a single PUT of ``key`` with the given metadata."""
        ...


class Publisher(ABC):
    """Fan-out topic that tagged notifications are published to."""

    @abstractmethod
    def publish(
        self, message: str, attributes: Mapping[str, str], subject: Optional[str] = None
    ) -> str:
        """Publish a message with string attributes; returns the message id."""
        ...
