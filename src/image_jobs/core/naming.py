"""Output key and provenance metadata for derived images."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .models import (
    CompressParameters,
    OutputObject,
    ProcessingParameters,
    ResizeParameters,
    TransformResult,
    WatermarkParameters,
)

RESIZED_PREFIX = "resized/"
WATERMARKED_PREFIX = "watermarked/"
COMPRESSED_PREFIX = "compressed/"

_NON_WORD = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_EXTENSION = re.compile(r"\.[^/.]+$")


def sanitize_watermark_text(text: str) -> str:
    """Keep ASCII letters, digits and whitespace; join whitespace runs with '_'."""
    return _WHITESPACE.sub("_", _NON_WORD.sub("", text))


def strip_extension(key: str) -> str:
    """
    Remove the final extension of the last path segment.

    Args:
        key: Object key, e.g. ``"uploads/photo.final.png"``

    Returns:
        Key without the extension, e.g. ``"uploads/photo.final"``
    """
    return _EXTENSION.sub("", key)


def compression_ratio(original_size: int, compressed_size: int) -> float:
    """Percentage saved by compression, rounded to 2 decimals (negative if it grew)."""
    if original_size <= 0:
        return 0.0
    return round((original_size - compressed_size) / original_size * 100, 2)


def format_ratio(ratio: float) -> str:
    return f"{ratio:.2f}"


def resize_key(params: ResizeParameters, original_key: str) -> str:
    return f"{RESIZED_PREFIX}{params.width}x{params.height}_{params.mode}_{original_key}"


def watermark_key(params: WatermarkParameters, original_key: str) -> str:
    text = sanitize_watermark_text(params.text)
    return f"{WATERMARKED_PREFIX}{text}_{params.position.value}_{original_key}"


def compress_key(
    params: CompressParameters, original_key: str, ratio: float, extension: str
) -> str:
    return (
        f"{COMPRESSED_PREFIX}{params.quality}q_{params.format.value}_"
        f"{format_ratio(ratio)}percent_{strip_extension(original_key)}.{extension}"
    )


def output_key(
    params: ProcessingParameters, original_key: str, result: TransformResult
) -> str:
    """Deterministic key: the same job always maps onto the same output object."""
    if isinstance(params, WatermarkParameters):
        return watermark_key(params, original_key)
    if isinstance(params, CompressParameters):
        return compress_key(
            params, original_key, result.stats["compression_ratio"], result.extension
        )
    return resize_key(params, original_key)


def provenance_metadata(
    params: ProcessingParameters,
    original_key: str,
    stats: Mapping[str, Any],
    processed_at: Optional[datetime] = None,
) -> Dict[str, str]:
    """Metadata recording how an output object was derived."""
    timestamp = (processed_at or datetime.now(timezone.utc)).isoformat()

    if isinstance(params, WatermarkParameters):
        return {
            "original-key": original_key,
            "processing-type": "watermark",
            "watermark-text": params.text,
            "watermark-position": params.position.value,
            "watermark-opacity": repr(float(params.opacity)),
            "processed-at": timestamp,
        }
    if isinstance(params, CompressParameters):
        return {
            "original-key": original_key,
            "processing-type": "compression",
            "compress-quality": str(params.quality),
            "compress-format": params.format.value,
            "compress-optimization": params.optimization.value,
            "original-size": str(stats["original_size"]),
            "compressed-size": str(stats["compressed_size"]),
            "compression-ratio": format_ratio(stats["compression_ratio"]),
            "processed-at": timestamp,
        }
    metadata = {
        "original-key": original_key,
        "processing-type": "resize",
        "dimensions": f"{params.width}x{params.height}",
        "mode": params.mode,
        "quality": str(params.quality),
        "processed-at": timestamp,
    }
    if "output_width" in stats:
        metadata["output-dimensions"] = f"{stats['output_width']}x{stats['output_height']}"
    return metadata


def build_output(
    params: ProcessingParameters,
    original_key: str,
    result: TransformResult,
    bucket: str,
    processed_at: Optional[datetime] = None,
) -> OutputObject:
    """Name a transform result and attach its provenance."""
    return OutputObject(
        bucket=bucket,
        key=output_key(params, original_key, result),
        body=result.body,
        content_type=result.content_type,
        metadata=provenance_metadata(params, original_key, result.stats, processed_at),
    )
