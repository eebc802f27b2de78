"""
Function-style entrypoints for the event-driven stages.

Each handler takes ``(event, context)`` as delivered by the platform and
returns a small summary. Failures propagate so the delivering queue
redelivers the message.
"""

from functools import lru_cache
from typing import Any, Dict

from .core.config import PipelineConfig
from .core.factories import PipelineFactory
from .core.logging_config import get_logger
from .core.models import OperationTag
from .core.services import JobDispatcher, NotificationPublisher

logger = get_logger("image-jobs.handlers")


@lru_cache(maxsize=1)
def _factory() -> PipelineFactory:
    return PipelineFactory(PipelineConfig.from_env())


@lru_cache(maxsize=1)
def _publisher() -> NotificationPublisher:
    return _factory().create_notification_publisher()


@lru_cache(maxsize=None)
def _dispatcher(operation: OperationTag) -> JobDispatcher:
    return _factory().create_dispatcher(operation)


def reset_cache() -> None:
    """Forget cached services so the next call re-reads the environment."""
    _factory.cache_clear()
    _publisher.cache_clear()
    _dispatcher.cache_clear()


def publish_notification(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    published = _publisher().handle(event)
    logger.info(f"Published {len(published)} notification(s)")
    return {"statusCode": 200, "published": published}


def _run_worker(operation: OperationTag, event: Dict[str, Any]) -> Dict[str, Any]:
    results = _dispatcher(operation).handle(event)
    return {
        "statusCode": 200,
        "processed": [result.model_dump(mode="json") for result in results],
    }


def resize(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return _run_worker(OperationTag.RESIZE, event)


def watermark(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return _run_worker(OperationTag.WATERMARK, event)


def compress(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return _run_worker(OperationTag.COMPRESS, event)
