"""
HTTP API for upload URL issuing.

Upload flow:
  1. Client POSTs file name, content type and processing metadata to /get-upload-url.
  2. Client PUTs the file to the returned URL with the Content-Type and the
     returned metadata as x-amz-meta-* headers.
  3. The S3 write notification is classified and routed to the matching worker.
"""

from typing import Callable, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .core.config import PipelineConfig
from .core.exceptions import InvalidRequest
from .core.factories import PipelineFactory
from .core.logging_config import get_logger
from .core.models import OperationTag, UploadRequest
from .core.services import UploadCredentialIssuer

logger = get_logger("image-jobs.api")


class UploadUrlRequest(BaseModel):
    fileName: str = ""
    fileType: str = ""
    metadata: Dict[str, str] = Field(default_factory=dict)


class UploadUrlResponse(BaseModel):
    uploadURL: str
    key: str
    processingType: OperationTag
    # Signed into uploadURL; send each entry as an x-amz-meta-<key> header.
    metadata: Dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: str


def _default_issuer() -> UploadCredentialIssuer:
    return PipelineFactory(PipelineConfig.from_env()).create_issuer()


def create_app(
    issuer_factory: Callable[[], UploadCredentialIssuer] = _default_issuer,
) -> FastAPI:
    """Create the API; the issuer is built on first use and reused afterwards."""
    app = FastAPI(title="image-jobs", version="0.1.0")
    app.state.issuer = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": f"Invalid request body: {exc.errors()}"},
        )

    def get_issuer() -> UploadCredentialIssuer:
        if app.state.issuer is None:
            app.state.issuer = issuer_factory()
        return app.state.issuer

    @app.post(
        "/get-upload-url",
        response_model=UploadUrlResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def get_upload_url(body: UploadUrlRequest):
        try:
            issuer = get_issuer()
            credential = issuer.issue(
                UploadRequest(
                    file_name=body.fileName,
                    content_type=body.fileType,
                    raw_metadata=body.metadata,
                )
            )
        except InvalidRequest as exc:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)}
            )
        except Exception as exc:
            logger.error(f"Failed to issue upload URL: {exc}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": str(exc)},
            )

        return UploadUrlResponse(
            uploadURL=credential.url,
            key=credential.object_key,
            processingType=credential.operation,
            metadata=credential.metadata,
        )

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok", "service": "image-jobs"}

    return app


app = create_app()
