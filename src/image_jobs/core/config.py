"""Runtime configuration read from the environment."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel

from .exceptions import ConfigurationError

# Lifetime of an upload URL. Fixed; not configurable per deployment.
UPLOAD_URL_EXPIRY_SECONDS = 300


class PipelineConfig(BaseModel):
    """Buckets, topic and options shared by the issuer, publisher and workers."""

    original_bucket: str = ""
    processed_bucket: str = ""
    topic_arn: str = ""
    region_name: Optional[str] = None
    watermark_font: str = "DejaVuSans.ttf"
    upload_expiry_seconds: int = UPLOAD_URL_EXPIRY_SECONDS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PipelineConfig":
        """
        Build the configuration from environment variables.

        Environment Variables:
            ORIGINAL_IMAGES_BUCKET: Bucket clients upload into
            PROCESSED_IMAGES_BUCKET: Bucket derived images are written to
            SNS_TOPIC_ARN: Topic tagged notifications are published to
            AWS_REGION: Region for boto3 clients (optional)
            WATERMARK_FONT: TrueType font file used for watermarks (optional)
        """
        env = os.environ if environ is None else environ
        return cls(
            original_bucket=env.get("ORIGINAL_IMAGES_BUCKET", ""),
            processed_bucket=env.get("PROCESSED_IMAGES_BUCKET", ""),
            topic_arn=env.get("SNS_TOPIC_ARN", ""),
            region_name=env.get("AWS_REGION") or None,
            watermark_font=env.get("WATERMARK_FONT", "DejaVuSans.ttf"),
        )

    def require(self, *fields: str) -> "PipelineConfig":
        """Raise ConfigurationError unless every named field is set."""
        missing = [name for name in fields if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(sorted(missing))}"
            )
        return self
