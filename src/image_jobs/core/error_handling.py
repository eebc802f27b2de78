# src/image_jobs/core/error_handling.py

import functools
import logging
from typing import Type

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import StorageError


def client_error_code(exc: Exception) -> str:
    """Return the AWS error code carried by a botocore ClientError, if any."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


def translate_storage_errors(failure_cls: Type[StorageError]):
    """
    Decorator converting botocore failures into the given StorageError subclass.

    Failures surface on the first attempt; redelivery is the queue's job.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__ + '.' + func.__name__)
            try:
                return func(*args, **kwargs)
            except (ClientError, BotoCoreError) as e:
                code = client_error_code(e)
                logger.error(
                    f"Storage operation '{func.__name__}' failed"
                    f"{f' ({code})' if code else ''}: {e}"
                )
                raise failure_cls(f"{func.__name__} failed: {e}") from e
        return wrapper
    return decorator
