"""Pure transform workers: (image bytes, parameters) -> TransformResult."""

from typing import Callable, Dict, Optional

from ..core.models import (
    OperationTag,
    ProcessingParameters,
    TransformResult,
    WatermarkParameters,
)
from .compress import compress_image
from .resize import resize_image
from .watermark import watermark_image

TRANSFORMS: Dict[OperationTag, Callable[..., TransformResult]] = {
    OperationTag.RESIZE: resize_image,
    OperationTag.WATERMARK: watermark_image,
    OperationTag.COMPRESS: compress_image,
}


def apply_transform(
    data: bytes, params: ProcessingParameters, font_path: Optional[str] = None
) -> TransformResult:
    """Run the transform matching the parameters' operation."""
    if font_path and isinstance(params, WatermarkParameters):
        return watermark_image(data, params, font_path=font_path)
    return TRANSFORMS[params.operation](data, params)


__all__ = [
    "TRANSFORMS",
    "apply_transform",
    "compress_image",
    "resize_image",
    "watermark_image",
]
