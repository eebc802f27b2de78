"""
Compress worker: re-encode an image with a chosen codec and quality.

Optimization levels map onto each codec's own effort knob:

    format  low  medium  high
    webp    2    4       6      (method)
    png     9    8       6      (zlib compress_level, inverse direction)
    avif    3    6       9      (effort; Pillow takes speed = 9 - effort)
    jpeg    progressive encoding on high only
"""

from dataclasses import dataclass
from typing import Any, Dict

from PIL import Image

from ..core.exceptions import with_error_handling
from ..core.models import CompressFormat, CompressParameters, Optimization, TransformResult
from ..core.naming import compression_ratio
from .common import encode_image, flatten_to_rgb, has_alpha, load_image

WEBP_EFFORT = {Optimization.LOW: 2, Optimization.MEDIUM: 4, Optimization.HIGH: 6}
# Higher optimization means a LOWER png compression level.
PNG_COMPRESS_LEVEL = {Optimization.LOW: 9, Optimization.MEDIUM: 8, Optimization.HIGH: 6}
AVIF_EFFORT = {Optimization.LOW: 3, Optimization.MEDIUM: 6, Optimization.HIGH: 9}
AVIF_MAX_EFFORT = 9


@dataclass(frozen=True)
class Codec:
    """Pillow format name plus the MIME type and extension of its output."""

    pillow_format: str
    content_type: str
    extension: str


CODECS: Dict[CompressFormat, Codec] = {
    CompressFormat.JPEG: Codec("JPEG", "image/jpeg", "jpg"),
    CompressFormat.PNG: Codec("PNG", "image/png", "png"),
    CompressFormat.WEBP: Codec("WEBP", "image/webp", "webp"),
    CompressFormat.AVIF: Codec("AVIF", "image/avif", "avif"),
}


def select_codec(format: CompressFormat) -> Codec:
    return CODECS.get(format, CODECS[CompressFormat.JPEG])


def encoder_options(params: CompressParameters) -> Dict[str, Any]:
    """Pillow ``save`` keyword arguments for the requested codec and optimization."""
    optimization = params.optimization
    if params.format == CompressFormat.WEBP:
        return {"quality": params.quality, "method": WEBP_EFFORT[optimization]}
    if params.format == CompressFormat.PNG:
        return {"compress_level": PNG_COMPRESS_LEVEL[optimization]}
    if params.format == CompressFormat.AVIF:
        return {
            "quality": params.quality,
            "speed": AVIF_MAX_EFFORT - AVIF_EFFORT[optimization],
        }
    return {
        "quality": params.quality,
        "optimize": True,
        "progressive": optimization == Optimization.HIGH,
    }


def _prepare(image: Image.Image, format: CompressFormat) -> Image.Image:
    if format == CompressFormat.JPEG:
        return flatten_to_rgb(image)
    if format == CompressFormat.PNG and image.mode in ("1", "L", "LA", "P", "RGB", "RGBA"):
        return image
    if image.mode in ("RGB", "RGBA"):
        return image
    return image.convert("RGBA" if has_alpha(image) else "RGB")


@with_error_handling
def compress_image(data: bytes, params: CompressParameters) -> TransformResult:
    """Re-encode image bytes; the ratio is measured on the encoded output."""
    codec = select_codec(params.format)
    image = _prepare(load_image(data), params.format)
    options = encoder_options(params)
    body = encode_image(image, codec.pillow_format, **options)

    original_size = len(data)
    compressed_size = len(body)
    return TransformResult(
        body=body,
        content_type=codec.content_type,
        extension=codec.extension,
        stats={
            "format": params.format.value,
            "quality": params.quality,
            "optimization": params.optimization.value,
            "encoder_options": options,
            "original_size": original_size,
            "compressed_size": compressed_size,
            "compression_ratio": compression_ratio(original_size, compressed_size),
        },
    )
