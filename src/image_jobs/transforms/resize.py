"""
Resize worker.

Modes:
  fit:     scale down to fit inside width x height, keep aspect ratio, never upscale
  fill:    scale and crop so the output is exactly width x height
  stretch: scale to exactly width x height, ignoring aspect ratio
  crop:    scale to cover width x height, then cut the centre

The result is always a JPEG at the requested quality.
"""

from typing import Callable, Dict, Tuple

from PIL import Image, ImageOps

from ..core.exceptions import UnsupportedMode, with_error_handling
from ..core.models import ResizeMode, ResizeParameters, TransformResult
from .common import JPEG_CONTENT_TYPE, encode_jpeg, flatten_to_rgb, load_image

RESAMPLE = Image.Resampling.LANCZOS

Size = Tuple[int, int]


def fit_size(source: Size, target: Size) -> Size:
    """Largest size inside ``target`` with the source aspect ratio, capped at the source size."""
    src_w, src_h = source
    max_w, max_h = target
    if src_w <= max_w and src_h <= max_h:
        return source
    if max_w * src_h <= max_h * src_w:
        # width is the binding side
        return max_w, max(1, min(max_h, round(src_h * max_w / src_w)))
    return max(1, min(max_w, round(src_w * max_h / src_h))), max_h


def cover_size(source: Size, target: Size) -> Size:
    """Smallest size with the source aspect ratio that covers ``target``."""
    src_w, src_h = source
    min_w, min_h = target
    if min_w * src_h >= min_h * src_w:
        return min_w, max(min_h, round(src_h * min_w / src_w))
    return max(min_w, round(src_w * min_h / src_h)), min_h


def center_box(size: Size, target: Size) -> Tuple[int, int, int, int]:
    width, height = size
    target_w, target_h = target
    left = (width - target_w) // 2
    top = (height - target_h) // 2
    return left, top, left + target_w, top + target_h


def _fit(image: Image.Image, width: int, height: int) -> Image.Image:
    size = fit_size(image.size, (width, height))
    if size == image.size:
        return image.copy()
    return image.resize(size, RESAMPLE)


def _fill(image: Image.Image, width: int, height: int) -> Image.Image:
    return ImageOps.fit(image, (width, height), method=RESAMPLE, centering=(0.5, 0.5))


def _stretch(image: Image.Image, width: int, height: int) -> Image.Image:
    return image.resize((width, height), RESAMPLE)


def _crop(image: Image.Image, width: int, height: int) -> Image.Image:
    covered = image.resize(cover_size(image.size, (width, height)), RESAMPLE)
    return covered.crop(center_box(covered.size, (width, height)))


STRATEGIES: Dict[ResizeMode, Callable[[Image.Image, int, int], Image.Image]] = {
    ResizeMode.FIT: _fit,
    ResizeMode.FILL: _fill,
    ResizeMode.STRETCH: _stretch,
    ResizeMode.CROP: _crop,
}


def resolve_mode(mode: str) -> ResizeMode:
    """Map a mode string onto ResizeMode, refusing anything unknown."""
    try:
        return ResizeMode(mode)
    except ValueError:
        raise UnsupportedMode(mode) from None


@with_error_handling
def resize_image(data: bytes, params: ResizeParameters) -> TransformResult:
    """Resize image bytes according to ``params``; raises UnsupportedMode before decoding."""
    mode = resolve_mode(params.mode)
    image = flatten_to_rgb(load_image(data))
    resized = STRATEGIES[mode](image, params.width, params.height)

    return TransformResult(
        body=encode_jpeg(resized, params.quality),
        content_type=JPEG_CONTENT_TYPE,
        extension="jpg",
        stats={
            "mode": mode.value,
            "source_width": image.width,
            "source_height": image.height,
            "output_width": resized.width,
            "output_height": resized.height,
        },
    )
