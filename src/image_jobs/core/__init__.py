"""Core models, codec and services for the image jobs pipeline."""

from .logging_config import get_logger, quiet_library_loggers, setup_logger
from .exceptions import (
    ImageJobsError,
    InvalidRequest,
    ConfigurationError,
    UnsupportedMode,
    StorageError,
    UpstreamFetchFailure,
    OutputWriteFailure,
    PublishFailure,
    PresignFailure,
    EncodeFailure,
    with_error_handling,
)
from .models import (
    CompressFormat,
    CompressParameters,
    JobResult,
    ObjectRef,
    OperationTag,
    Optimization,
    OutputObject,
    ProcessingJob,
    ProcessingParameters,
    ResizeMode,
    ResizeParameters,
    StoredObject,
    TransformResult,
    UploadRequest,
    WatermarkParameters,
    WatermarkPosition,
    WriteCredential,
)
from .parameters import ParameterDefaulted, classify, decode, encode, normalize
from .config import PipelineConfig

__all__ = [
    "CompressFormat",
    "CompressParameters",
    "ConfigurationError",
    "EncodeFailure",
    "ImageJobsError",
    "InvalidRequest",
    "JobResult",
    "ObjectRef",
    "OperationTag",
    "Optimization",
    "OutputObject",
    "OutputWriteFailure",
    "ParameterDefaulted",
    "PresignFailure",
    "PipelineConfig",
    "ProcessingJob",
    "ProcessingParameters",
    "PublishFailure",
    "ResizeMode",
    "ResizeParameters",
    "StorageError",
    "StoredObject",
    "TransformResult",
    "UnsupportedMode",
    "UploadRequest",
    "UpstreamFetchFailure",
    "WatermarkParameters",
    "WatermarkPosition",
    "WriteCredential",
    "classify",
    "decode",
    "encode",
    "get_logger",
    "normalize",
    "quiet_library_loggers",
    "setup_logger",
    "with_error_handling",
]
