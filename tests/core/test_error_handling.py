# tests/core/test_error_handling.py

import pytest
from unittest import mock

from botocore.exceptions import ClientError, EndpointConnectionError

from image_jobs.core.exceptions import (
    OutputWriteFailure,
    StorageError,
    UpstreamFetchFailure,
)
from image_jobs.core.error_handling import client_error_code, translate_storage_errors


def _client_error(code="NoSuchKey", operation="GetObject"):
    return ClientError({"Error": {"Code": code, "Message": "details"}}, operation)


@pytest.fixture
def mock_logger():
    with mock.patch("logging.getLogger") as mock_get_logger:
        yield mock_get_logger.return_value


def test_client_error_code():
    assert client_error_code(_client_error("AccessDenied")) == "AccessDenied"
    assert client_error_code(ValueError("not boto")) == ""


def test_translate_client_error(mock_logger):
    @translate_storage_errors(UpstreamFetchFailure)
    def fetch():
        raise _client_error()

    with pytest.raises(UpstreamFetchFailure, match="fetch failed") as exc_info:
        fetch()

    assert isinstance(exc_info.value.__cause__, ClientError)
    mock_logger.error.assert_called_once()
    assert "(NoSuchKey)" in mock_logger.error.call_args[0][0]


def test_translate_botocore_error(mock_logger):
    @translate_storage_errors(OutputWriteFailure)
    def write():
        raise EndpointConnectionError(endpoint_url="https://s3.amazonaws.com")

    with pytest.raises(OutputWriteFailure):
        write()


def test_failure_surfaces_on_first_attempt(mock_logger):
    calls = []

    @translate_storage_errors(UpstreamFetchFailure)
    def fetch():
        calls.append(1)
        raise _client_error("SlowDown")

    with pytest.raises(StorageError):
        fetch()
    assert len(calls) == 1


def test_other_errors_propagate_unchanged(mock_logger):
    @translate_storage_errors(UpstreamFetchFailure)
    def broken():
        raise KeyError("Body")

    with pytest.raises(KeyError):
        broken()


def test_success_returns_value(mock_logger):
    @translate_storage_errors(UpstreamFetchFailure)
    def fetch(key):
        return f"value-{key}"

    assert fetch("a") == "value-a"
    mock_logger.error.assert_not_called()
