"""Tests for output key naming and provenance metadata."""

from datetime import datetime, timezone

import pytest

from image_jobs.core.models import (
    CompressFormat,
    CompressParameters,
    ResizeParameters,
    TransformResult,
    WatermarkParameters,
    WatermarkPosition,
)
from image_jobs.core.naming import (
    build_output,
    compress_key,
    compression_ratio,
    output_key,
    provenance_metadata,
    resize_key,
    sanitize_watermark_text,
    strip_extension,
    watermark_key,
)

PROCESSED_AT = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestHelpers:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("ACME", "ACME"),
            ("ACME Corp", "ACME_Corp"),
            ("Hello,   World!", "Hello_World"),
            ("© Your Brand", "_Your_Brand"),
            ("tab\tand\nnewline", "tab_and_newline"),
            ("Hello, World! 2024", "Hello_World_2024"),
        ],
    )
    def test_sanitize_watermark_text(self, text, expected):
        assert sanitize_watermark_text(text) == expected

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("photo.jpg", "photo"),
            ("uploads/photo.final.png", "uploads/photo.final"),
            ("uploads.v2/photo", "uploads.v2/photo"),
            ("noext", "noext"),
        ],
    )
    def test_strip_extension(self, key, expected):
        assert strip_extension(key) == expected

    def test_compression_ratio(self):
        assert compression_ratio(1000, 250) == 75.0
        assert compression_ratio(1000, 1200) == -20.0
        assert compression_ratio(3, 1) == 66.67
        assert compression_ratio(0, 10) == 0.0


class TestOutputKeys:
    def test_resize_key(self):
        params = ResizeParameters(width=300, height=200, mode="crop")
        assert resize_key(params, "171-ab12cd34-cat.jpg") == "resized/300x200_crop_171-ab12cd34-cat.jpg"

    def test_watermark_key(self):
        params = WatermarkParameters(text="ACME Corp", position=WatermarkPosition.CENTER)
        assert watermark_key(params, "cat.jpg") == "watermarked/ACME_Corp_center_cat.jpg"

    def test_compress_key_replaces_extension(self):
        params = CompressParameters(quality=60, format=CompressFormat.WEBP)
        key = compress_key(params, "uploads/cat.png", 42.5, "webp")
        assert key == "compressed/60q_webp_42.50percent_uploads/cat.webp"

    def test_compress_key_negative_ratio(self):
        params = CompressParameters(quality=95, format=CompressFormat.PNG)
        assert compress_key(params, "cat.jpg", -12.0, "png") == "compressed/95q_png_-12.00percent_cat.png"

    def test_output_key_is_deterministic(self):
        params = CompressParameters()
        result = TransformResult(
            body=b"x", content_type="image/jpeg", stats={"compression_ratio": 10.0}
        )
        assert output_key(params, "a.png", result) == output_key(params, "a.png", result)
        assert output_key(params, "a.png", result) == "compressed/75q_jpeg_10.00percent_a.jpg"


class TestProvenance:
    def test_resize(self):
        metadata = provenance_metadata(
            ResizeParameters(width=300, height=200),
            "cat.jpg",
            {"output_width": 300, "output_height": 150},
            PROCESSED_AT,
        )
        assert metadata == {
            "original-key": "cat.jpg",
            "processing-type": "resize",
            "dimensions": "300x200",
            "mode": "fit",
            "quality": "90",
            "processed-at": "2024-01-02T03:04:05+00:00",
            "output-dimensions": "300x150",
        }

    def test_watermark_records_raw_text(self):
        metadata = provenance_metadata(
            WatermarkParameters(text="© ACME"), "cat.jpg", {}, PROCESSED_AT
        )
        assert metadata["watermark-text"] == "© ACME"
        assert metadata["watermark-position"] == "bottom-right"
        assert metadata["watermark-opacity"] == "0.7"
        assert metadata["processing-type"] == "watermark"

    def test_compression(self):
        metadata = provenance_metadata(
            CompressParameters(quality=60, format=CompressFormat.WEBP),
            "cat.png",
            {"original_size": 1000, "compressed_size": 400, "compression_ratio": 60.0},
            PROCESSED_AT,
        )
        assert metadata["processing-type"] == "compression"
        assert metadata["compress-quality"] == "60"
        assert metadata["compress-format"] == "webp"
        assert metadata["compress-optimization"] == "medium"
        assert metadata["original-size"] == "1000"
        assert metadata["compressed-size"] == "400"
        assert metadata["compression-ratio"] == "60.00"

    def test_build_output(self):
        result = TransformResult(body=b"jpeg", content_type="image/jpeg")
        output = build_output(
            WatermarkParameters(text="ACME"), "cat.jpg", result, "processed", PROCESSED_AT
        )
        assert output.bucket == "processed"
        assert output.key == "watermarked/ACME_bottom-right_cat.jpg"
        assert output.body == b"jpeg"
        assert output.metadata["original-key"] == "cat.jpg"
