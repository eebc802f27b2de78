"""Decode/encode helpers shared by the transform workers."""

import io
from typing import Any

from PIL import Image

JPEG_CONTENT_TYPE = "image/jpeg"


def load_image(data: bytes) -> Image.Image:
    """Decode image bytes, forcing the pixel data to load."""
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )


def flatten_to_rgb(image: Image.Image) -> Image.Image:
    """Composite transparent images onto white and convert everything else to RGB."""
    if has_alpha(image):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def encode_image(image: Image.Image, format: str, **options: Any) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=format, **options)
    return buffer.getvalue()


def encode_jpeg(image: Image.Image, quality: int, **options: Any) -> bytes:
    return encode_image(flatten_to_rgb(image), "JPEG", quality=quality, **options)
