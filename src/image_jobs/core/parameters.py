"""
Parameter codec: attached object metadata <-> typed transform parameters.

Object metadata is a flat bag of strings set by the client when it asked for
an upload URL. ``classify`` picks the operation, ``decode`` turns the bag into
one of the ``ProcessingParameters`` variants and ``encode`` goes back the
other way. Bad values never fail a job: they are replaced by the field's
default and reported as ``ParameterDefaulted``.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type
from urllib.parse import quote, unquote

from .logging_config import get_logger
from .models import (
    CompressFormat,
    CompressParameters,
    OperationTag,
    Optimization,
    ProcessingParameters,
    ResizeMode,
    ResizeParameters,
    WatermarkParameters,
    WatermarkPosition,
)

RESIZE_WIDTH = "resize-width"
RESIZE_HEIGHT = "resize-height"
RESIZE_MODE = "resize-mode"
QUALITY = "quality"
WATERMARK_TEXT = "watermark-text"
WATERMARK_POSITION = "watermark-position"
WATERMARK_OPACITY = "watermark-opacity"
WATERMARK_FONTSIZE = "watermark-fontsize"
COMPRESS_QUALITY = "compress-quality"
COMPRESS_FORMAT = "compress-format"
COMPRESS_OPTIMIZATION = "compress-optimization"

# Underscore spellings written by an older client revision.
LEGACY_KEY_ALIASES: Dict[str, str] = {
    "resize_width": RESIZE_WIDTH,
    "resize_height": RESIZE_HEIGHT,
    "resize_mode": RESIZE_MODE,
}

FORMAT_ALIASES: Dict[str, CompressFormat] = {"jpg": CompressFormat.JPEG}

MAX_DIMENSION = 4000
MAX_FONT_SIZE = 1000


@dataclass(frozen=True)
class ParameterDefaulted:
    """A metadata value that was unparsable or out of range and got replaced."""

    key: str
    raw_value: str
    default: Any


def _present(metadata: Mapping[str, str], key: str) -> bool:
    value = metadata.get(key)
    return value is not None and value.strip() != ""


def classify(metadata: Mapping[str, str]) -> OperationTag:
    """
    Select the operation for a metadata bag.

    Precedence is fixed: watermark text wins over compression keys, which win
    over the resize default. Bags often carry leftover keys from other UI
    tabs, so the order must not depend on key order or on which keys appear
    last.
    """
    if _present(metadata, WATERMARK_TEXT):
        return OperationTag.WATERMARK
    if _present(metadata, COMPRESS_QUALITY) or _present(metadata, COMPRESS_FORMAT):
        return OperationTag.COMPRESS
    return OperationTag.RESIZE


_UNSIGNED_INT = re.compile(r"[0-9]+")
_UNSIGNED_DECIMAL = re.compile(r"[0-9]+(\.[0-9]*)?|\.[0-9]+")


def _int_in(low: int, high: int) -> Callable[[str], Optional[int]]:
    def parse(raw: str) -> Optional[int]:
        text = raw.strip()
        if not _UNSIGNED_INT.fullmatch(text):
            return None
        value = int(text)
        if value < low or value > high:
            return None
        return value

    return parse


def _float_in(low: float, high: float) -> Callable[[str], Optional[float]]:
    def parse(raw: str) -> Optional[float]:
        text = raw.strip()
        if not _UNSIGNED_DECIMAL.fullmatch(text):
            return None
        value = float(text)
        if value < low or value > high:
            return None
        return value

    return parse


def _choice(
    enum_cls: Type[Enum], aliases: Optional[Mapping[str, Enum]] = None
) -> Callable[[str], Optional[Enum]]:
    def parse(raw: str) -> Optional[Enum]:
        value = raw.strip().lower()
        if aliases and value in aliases:
            return aliases[value]
        try:
            return enum_cls(value)
        except ValueError:
            return None

    return parse


class _FieldReader:
    """Reads typed fields from a metadata bag, recording substituted defaults."""

    def __init__(self, metadata: Mapping[str, str]):
        self._metadata = metadata
        self.defaulted: List[ParameterDefaulted] = []

    def read(self, key: str, parse: Callable[[str], Any], default: Any) -> Any:
        if not _present(self._metadata, key):
            return default
        raw = self._metadata[key]
        value = parse(raw)
        if value is None:
            self.defaulted.append(ParameterDefaulted(key, raw, default))
            return default
        return value


def _decode_resize(reader: _FieldReader, metadata: Mapping[str, str]) -> ResizeParameters:
    defaults = ResizeParameters()
    mode = defaults.mode
    if _present(metadata, RESIZE_MODE):
        mode = metadata[RESIZE_MODE].strip().lower()
    return ResizeParameters(
        width=reader.read(RESIZE_WIDTH, _int_in(1, MAX_DIMENSION), defaults.width),
        height=reader.read(RESIZE_HEIGHT, _int_in(1, MAX_DIMENSION), defaults.height),
        mode=mode,
        quality=reader.read(QUALITY, _int_in(1, 100), defaults.quality),
    )


def _decode_watermark(reader: _FieldReader) -> WatermarkParameters:
    defaults = WatermarkParameters()
    return WatermarkParameters(
        text=reader.read(WATERMARK_TEXT, unquote, defaults.text),
        position=reader.read(
            WATERMARK_POSITION, _choice(WatermarkPosition), defaults.position
        ),
        opacity=reader.read(WATERMARK_OPACITY, _float_in(0.1, 1.0), defaults.opacity),
        font_size=reader.read(
            WATERMARK_FONTSIZE, _int_in(1, MAX_FONT_SIZE), defaults.font_size
        ),
    )


def _decode_compress(reader: _FieldReader) -> CompressParameters:
    defaults = CompressParameters()
    return CompressParameters(
        quality=reader.read(COMPRESS_QUALITY, _int_in(10, 100), defaults.quality),
        format=reader.read(
            COMPRESS_FORMAT, _choice(CompressFormat, FORMAT_ALIASES), defaults.format
        ),
        optimization=reader.read(
            COMPRESS_OPTIMIZATION, _choice(Optimization), defaults.optimization
        ),
    )


def decode_with_report(
    tag: OperationTag, metadata: Mapping[str, str]
) -> Tuple[ProcessingParameters, List[ParameterDefaulted]]:
    """Decode parameters for ``tag`` and list every field that fell back to its default."""
    reader = _FieldReader(metadata)
    params: ProcessingParameters
    if tag == OperationTag.WATERMARK:
        params = _decode_watermark(reader)
    elif tag == OperationTag.COMPRESS:
        params = _decode_compress(reader)
    else:
        params = _decode_resize(reader, metadata)
    return params, reader.defaulted


def decode(tag: OperationTag, metadata: Mapping[str, str]) -> ProcessingParameters:
    """Decode parameters for ``tag``, logging each substituted default."""
    params, defaulted = decode_with_report(tag, metadata)
    if defaulted:
        logger = get_logger("image-jobs.parameters")
        for item in defaulted:
            default = item.default.value if isinstance(item.default, Enum) else item.default
            logger.warning(
                f"Parameter '{item.key}' value {item.raw_value!r} rejected; "
                f"using default {default!r}"
            )
    return params


def encode(params: ProcessingParameters) -> Dict[str, str]:
    """Render parameters back into the canonical metadata bag."""
    if isinstance(params, WatermarkParameters):
        return {
            WATERMARK_TEXT: quote(params.text, safe=""),
            WATERMARK_POSITION: params.position.value,
            WATERMARK_OPACITY: repr(float(params.opacity)),
            WATERMARK_FONTSIZE: str(params.font_size),
        }
    if isinstance(params, CompressParameters):
        return {
            COMPRESS_QUALITY: str(params.quality),
            COMPRESS_FORMAT: params.format.value,
            COMPRESS_OPTIMIZATION: params.optimization.value,
        }
    return {
        RESIZE_WIDTH: str(params.width),
        RESIZE_HEIGHT: str(params.height),
        RESIZE_MODE: params.mode,
        QUALITY: str(params.quality),
    }


def normalize(metadata: Mapping[str, str]) -> Dict[str, str]:
    """Classify, decode and re-encode a bag; applying it twice changes nothing."""
    return encode(decode(classify(metadata), metadata))


def migrate_legacy_keys(metadata: Mapping[str, str]) -> Dict[str, str]:
    """
    Rewrite underscore resize keys to their hyphenated form.

    The canonical key wins when both spellings are present. Every legacy key
    seen is logged so remaining old clients can be found and updated.
    """
    migrated = dict(metadata)
    for legacy, canonical in LEGACY_KEY_ALIASES.items():
        if legacy not in migrated:
            continue
        value = migrated.pop(legacy)
        get_logger("image-jobs.parameters").warning(
            f"Legacy metadata key '{legacy}' seen; use '{canonical}'"
        )
        migrated.setdefault(canonical, value)
    return migrated


def is_supported_mode(mode: str) -> bool:
    return mode in {m.value for m in ResizeMode}
