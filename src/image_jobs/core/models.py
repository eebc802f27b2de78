"""Shared data models for the image jobs pipeline."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, Union

from pydantic import BaseModel, Field


class OperationTag(str, Enum):
    """Transform selected for an uploaded object."""

    RESIZE = "resize"
    WATERMARK = "watermark"
    COMPRESS = "compress"


class ResizeMode(str, Enum):
    FIT = "fit"
    FILL = "fill"
    STRETCH = "stretch"
    CROP = "crop"


class WatermarkPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    CENTER = "center"


class CompressFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    AVIF = "avif"


class Optimization(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ResizeParameters(BaseModel):
    """Resize job parameters.

    ``mode`` stays a plain string: an unknown mode must reach the resize
    worker so it can be refused instead of silently replaced.
    """

    operation: Literal[OperationTag.RESIZE] = OperationTag.RESIZE
    width: int = Field(800, ge=1, le=4000)
    height: int = Field(600, ge=1, le=4000)
    mode: str = ResizeMode.FIT.value
    quality: int = Field(90, ge=1, le=100)


class WatermarkParameters(BaseModel):
    """Watermark job parameters."""

    operation: Literal[OperationTag.WATERMARK] = OperationTag.WATERMARK
    text: str = "© Your Brand"
    position: WatermarkPosition = WatermarkPosition.BOTTOM_RIGHT
    opacity: float = Field(0.7, ge=0.1, le=1.0)
    font_size: int = Field(24, ge=1, le=1000)


class CompressParameters(BaseModel):
    """Compression job parameters."""

    operation: Literal[OperationTag.COMPRESS] = OperationTag.COMPRESS
    quality: int = Field(75, ge=10, le=100)
    format: CompressFormat = CompressFormat.JPEG
    optimization: Optimization = Optimization.MEDIUM


ProcessingParameters = Union[ResizeParameters, WatermarkParameters, CompressParameters]


class UploadRequest(BaseModel):
    """A client's request for a write credential."""

    file_name: str
    content_type: str
    raw_metadata: Dict[str, str] = Field(default_factory=dict)


class WriteCredential(BaseModel):
    """Time-limited, write-only authorization for exactly one object key."""

    url: str
    object_key: str
    expires_at: datetime
    operation: OperationTag
    metadata: Dict[str, str] = Field(default_factory=dict)


class ObjectRef(BaseModel):
    """Location of an object named by a storage-write notification."""

    bucket: str
    key: str


class StoredObject(BaseModel):
    """An uploaded object together with its attached metadata."""

    bucket: str
    key: str
    body: bytes
    content_type: str = "application/octet-stream"
    metadata: Dict[str, str] = Field(default_factory=dict)


class ProcessingJob(BaseModel):
    """A single in-flight transform request."""

    source_bucket: str
    source_key: str
    operation: OperationTag
    parameters: ProcessingParameters = Field(discriminator="operation")


class TransformResult(BaseModel):
    """Output of a pure transform, before it is named."""

    body: bytes
    content_type: str
    extension: str = "jpg"
    stats: Dict[str, Any] = Field(default_factory=dict)


class OutputObject(BaseModel):
    """A derived artifact ready to be written to the processed bucket."""

    bucket: str
    key: str
    body: bytes
    content_type: str
    metadata: Dict[str, str] = Field(default_factory=dict)


class JobResult(BaseModel):
    """Summary returned by a worker for one processed object."""

    operation: OperationTag
    original_key: str
    processed_key: str
    stats: Dict[str, Any] = Field(default_factory=dict)
    processing_time: float = 0.0
