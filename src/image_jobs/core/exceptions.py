"""Custom exceptions and error handling utilities for the image jobs pipeline."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, TypeVar

from .logging_config import get_logger


class ImageJobsError(Exception):
    """Base exception for all image jobs errors."""


class InvalidRequest(ImageJobsError):
    """Raised for a malformed upload credential request."""


class ConfigurationError(ImageJobsError):
    """Error raised for invalid configuration options."""


class UnsupportedMode(ImageJobsError):
    """Raised when a resize mode is outside the supported set."""

    def __init__(self, mode: str):
        super().__init__(f"Unknown resize mode: {mode}")
        self.mode = mode


class StorageError(ImageJobsError):
    """Error raised for object storage or messaging failures."""


class UpstreamFetchFailure(StorageError):
    """The source object or its metadata could not be read."""


class OutputWriteFailure(StorageError):
    """The derived object could not be written."""


class PublishFailure(StorageError):
    """The tagged notification could not be published."""


class PresignFailure(StorageError):
    """A write credential could not be signed."""


class EncodeFailure(ImageJobsError):
    """The image codec rejected the input or failed to encode the output."""


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(func: F) -> F:
    """Translate codec failures raised inside a transform into EncodeFailure."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:  # type: ignore[override]
        logger = get_logger("image-jobs.transforms")
        try:
            return func(*args, **kwargs)
        except ImageJobsError:
            logger.error(f"Pipeline error in {func.__name__}", exc_info=True)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Codec error in {func.__name__}: {exc}", exc_info=True)
            raise EncodeFailure(f"{func.__name__} failed: {exc}") from exc

    return wrapper  # type: ignore[return-value]
