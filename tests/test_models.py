"""Tests for core data models."""

import pytest
from pydantic import ValidationError

from image_jobs.core.config import PipelineConfig
from image_jobs.core.exceptions import ConfigurationError
from image_jobs.core.models import (
    CompressFormat,
    CompressParameters,
    JobResult,
    OperationTag,
    ProcessingJob,
    ResizeParameters,
    WatermarkParameters,
)


class TestParameterModels:
    """Tests for the parameter variants."""

    def test_defaults(self):
        assert ResizeParameters().model_dump() == {
            "operation": OperationTag.RESIZE,
            "width": 800,
            "height": 600,
            "mode": "fit",
            "quality": 90,
        }
        assert WatermarkParameters().opacity == 0.7
        assert CompressParameters().format == CompressFormat.JPEG

    @pytest.mark.parametrize(
        "model,field,value",
        [
            (ResizeParameters, "width", 0),
            (ResizeParameters, "height", 4001),
            (WatermarkParameters, "opacity", 0.05),
            (WatermarkParameters, "font_size", 0),
            (WatermarkParameters, "font_size", 1001),
            (CompressParameters, "quality", 9),
        ],
    )
    def test_out_of_range_values_rejected(self, model, field, value):
        with pytest.raises(ValidationError):
            model(**{field: value})


class TestProcessingJob:
    """Tests for ProcessingJob."""

    def test_parameters_discriminated_by_operation(self):
        job = ProcessingJob.model_validate(
            {
                "source_bucket": "originals",
                "source_key": "cat.jpg",
                "operation": "compress",
                "parameters": {"operation": "compress", "quality": 50, "format": "webp"},
            }
        )
        assert isinstance(job.parameters, CompressParameters)
        assert job.parameters.format == CompressFormat.WEBP

    def test_job_result_serializes(self):
        result = JobResult(
            operation=OperationTag.RESIZE,
            original_key="cat.jpg",
            processed_key="resized/800x600_fit_cat.jpg",
            stats={"mode": "fit"},
            processing_time=0.25,
        )
        dumped = result.model_dump(mode="json")
        assert dumped["operation"] == "resize"
        assert dumped["processed_key"] == "resized/800x600_fit_cat.jpg"


class TestPipelineConfig:
    """Tests for PipelineConfig."""

    def test_from_env(self):
        config = PipelineConfig.from_env(
            {
                "ORIGINAL_IMAGES_BUCKET": "originals",
                "PROCESSED_IMAGES_BUCKET": "processed",
                "SNS_TOPIC_ARN": "arn:aws:sns:us-east-1:123456789012:image-jobs",
                "AWS_REGION": "us-east-1",
            }
        )
        assert config.original_bucket == "originals"
        assert config.processed_bucket == "processed"
        assert config.topic_arn.endswith(":image-jobs")
        assert config.region_name == "us-east-1"
        assert config.upload_expiry_seconds == 300
        assert config.watermark_font == "DejaVuSans.ttf"

    def test_from_empty_env(self):
        config = PipelineConfig.from_env({})
        assert config.original_bucket == ""
        assert config.region_name is None

    def test_require_missing(self):
        config = PipelineConfig(original_bucket="originals")
        assert config.require("original_bucket") is config
        with pytest.raises(ConfigurationError, match="processed_bucket, topic_arn"):
            config.require("topic_arn", "processed_bucket")
