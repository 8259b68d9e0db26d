"""Unit tests for ServiceHelper retry and error classification."""

from unittest.mock import patch

import pytest
import requests

from conftest import make_response
from layout_predict.core.errors import (
    AuthError,
    ModelNotFoundError,
    PredictForbiddenError,
    ServiceConnectionError,
    ServiceError,
)
from layout_predict.core.service_helper import CREDENTIAL_HEADER, ServiceHelper
from layout_predict.schemas.config import ServiceConfig

URL = "https://svc.test/formrecognizer/v2.1/layout/analyze"


@pytest.fixture
def helper():
    return ServiceHelper(ServiceConfig(max_retries=3, backoff_base=1.5, timeout_sec=5))


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("layout_predict.core.service_helper.time.sleep") as mock_sleep:
        yield mock_sleep


class TestRetry:
    """Retry on transient failures."""

    def test_retry_on_429_then_success(self, helper, no_sleep):
        responses = [make_response(429, text="busy"), make_response(202, {"ok": True})]
        with patch("requests.post", side_effect=responses) as mock_post:
            resp = helper.post_with_auto_retry(URL, {"Content-Type": "application/pdf"}, "key", data=b"x")

        assert resp.status_code == 202
        assert mock_post.call_count == 2
        no_sleep.assert_called_once_with(1.0)

    def test_backoff_is_exponential(self, helper, no_sleep):
        responses = [make_response(503), make_response(503), make_response(200, {})]
        with patch("requests.get", side_effect=responses):
            helper.get_with_auto_retry(URL, {}, "key")

        assert [c.args[0] for c in no_sleep.call_args_list] == [1.0, 1.5]

    def test_retry_exhaustion_raises_service_error(self, helper):
        with patch("requests.post", return_value=make_response(503, text="unavailable")) as mock_post:
            with pytest.raises(ServiceError) as exc_info:
                helper.post_with_auto_retry(URL, {}, "key", data=b"x")

        assert mock_post.call_count == 3
        assert exc_info.value.status_code == 503

    def test_network_error_retried_then_connection_error(self, helper):
        with patch("requests.get", side_effect=requests.ConnectionError("refused")) as mock_get:
            with pytest.raises(ServiceConnectionError):
                helper.get_with_auto_retry(URL, {}, "key")

        assert mock_get.call_count == 3

    def test_connection_error_is_builtin_connection_error(self, helper):
        with patch("requests.get", side_effect=requests.Timeout("slow")):
            with pytest.raises(ConnectionError):
                helper.get_with_auto_retry(URL, {}, "key")


class TestClassification:
    """Non-retryable statuses map onto the error taxonomy."""

    def test_401_is_auth_error_without_retry(self, helper):
        body = {"error": {"code": "401", "message": "Access denied due to invalid subscription key"}}
        with patch("requests.post", return_value=make_response(401, body)) as mock_post:
            with pytest.raises(AuthError, match="invalid subscription key"):
                helper.post_with_auto_retry(URL, {}, "bad", data=b"x")

        assert mock_post.call_count == 1

    def test_403_is_predict_forbidden(self, helper):
        with patch("requests.post", return_value=make_response(403, text="forbidden")):
            with pytest.raises(PredictForbiddenError):
                helper.post_with_auto_retry(URL, {}, "key", data=b"x")

    def test_404_is_model_not_found(self, helper):
        body = {"error": {"code": "404", "message": "Resource not found"}}
        with patch("requests.post", return_value=make_response(404, body)):
            with pytest.raises(ModelNotFoundError, match="404: Resource not found"):
                helper.post_with_auto_retry(URL, {}, "key", data=b"x")

    def test_400_is_service_error_with_raw_text(self, helper):
        with patch("requests.post", return_value=make_response(400, text="bad request body")):
            with pytest.raises(ServiceError, match="bad request body") as exc_info:
                helper.post_with_auto_retry(URL, {}, "key", data=b"x")

        assert exc_info.value.status_code == 400

    def test_malformed_endpoint_is_auth_error(self, helper):
        with patch("requests.post", side_effect=requests.exceptions.MissingSchema("no schema")):
            with pytest.raises(AuthError):
                helper.post_with_auto_retry("not-a-url", {}, "key", data=b"x")


class TestRequestShape:
    def test_credential_header_added(self, helper):
        with patch("requests.post", return_value=make_response(202, {})) as mock_post:
            helper.post_with_auto_retry(URL, {"cache-control": "no-cache"}, "secret", json_body={"source": "u"})

        kwargs = mock_post.call_args.kwargs
        assert kwargs["headers"][CREDENTIAL_HEADER] == "secret"
        assert kwargs["headers"]["cache-control"] == "no-cache"
        assert kwargs["json"] == {"source": "u"}
        assert kwargs["timeout"] == 5

    def test_caller_headers_not_mutated(self, helper):
        headers = {"cache-control": "no-cache"}
        with patch("requests.get", return_value=make_response(200, {})):
            helper.get_with_auto_retry(URL, headers, "secret")

        assert CREDENTIAL_HEADER not in headers
