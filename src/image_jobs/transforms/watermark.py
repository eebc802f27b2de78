"""Watermark worker: draws semi-transparent text over the source image."""

from typing import Tuple

from PIL import Image, ImageDraw, ImageFont

from ..core.exceptions import with_error_handling
from ..core.models import TransformResult, WatermarkParameters, WatermarkPosition
from .common import JPEG_CONTENT_TYPE, encode_jpeg, flatten_to_rgb, load_image

PADDING = 20
WATERMARK_QUALITY = 90
DEFAULT_FONT = "DejaVuSans.ttf"
OUTLINE_OPACITY_FACTOR = 0.3

# text-anchor -> Pillow anchor on the text baseline
PILLOW_ANCHORS = {"start": "ls", "end": "rs", "middle": "ms"}


def anchor_point(
    position: WatermarkPosition, width: int, height: int, font_size: int
) -> Tuple[float, float, str]:
    """
    Compute the text origin and anchor for a watermark position.

    Args:
        position: Corner or centre of the image
        width: Source image width in pixels
        height: Source image height in pixels
        font_size: Font size in pixels; top positions sit one line below the padding

    Returns:
        Tuple of (x, y, text_anchor) with text_anchor one of start/end/middle
    """
    if position == WatermarkPosition.TOP_LEFT:
        return PADDING, font_size + PADDING, "start"
    if position == WatermarkPosition.TOP_RIGHT:
        return width - PADDING, font_size + PADDING, "end"
    if position == WatermarkPosition.BOTTOM_LEFT:
        return PADDING, height - PADDING, "start"
    if position == WatermarkPosition.CENTER:
        return width / 2, height / 2, "middle"
    return width - PADDING, height - PADDING, "end"


def load_font(font_size: int, font_path: str = DEFAULT_FONT) -> ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(font_path, font_size)
    except OSError:
        # Pillow's bundled font, for hosts without the TrueType file installed
        return ImageFont.load_default(size=font_size)


def _alpha(opacity: float) -> int:
    return max(0, min(255, round(opacity * 255)))


@with_error_handling
def watermark_image(
    data: bytes, params: WatermarkParameters, font_path: str = DEFAULT_FONT
) -> TransformResult:
    """Overlay ``params.text`` on the image and re-encode it as JPEG quality 90."""
    source = flatten_to_rgb(load_image(data))
    width, height = source.size
    x, y, text_anchor = anchor_point(params.position, width, height, params.font_size)

    overlay = Image.new("RGBA", source.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    draw.text(
        (x, y),
        params.text,
        font=load_font(params.font_size, font_path),
        fill=(255, 255, 255, _alpha(params.opacity)),
        anchor=PILLOW_ANCHORS[text_anchor],
        stroke_width=1,
        stroke_fill=(0, 0, 0, _alpha(params.opacity * OUTLINE_OPACITY_FACTOR)),
    )
    composed = Image.alpha_composite(source.convert("RGBA"), overlay)

    return TransformResult(
        body=encode_jpeg(composed, WATERMARK_QUALITY),
        content_type=JPEG_CONTENT_TYPE,
        extension="jpg",
        stats={
            "width": width,
            "height": height,
            "x": x,
            "y": y,
            "text_anchor": text_anchor,
            "font_size": params.font_size,
        },
    )
