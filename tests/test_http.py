"""Tests for the timeout-bounded HTTP client."""
from unittest.mock import patch

import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import ReadTimeout

from aps_nodepack.node_sdk import HttpApiError, HttpClient, HttpResponse, NodeTimeoutError

REQUEST = "aps_nodepack.node_sdk.http.requests.request"


class TestHttpClient:
    def test_base_url_joined(self, response_factory):
        client = HttpClient(base_url="https://api.example.test/", timeout=5)
        with patch(REQUEST, return_value=response_factory(body={})) as mock_request:
            client.get("/v1/things", params={"page": 2})

        kwargs = mock_request.call_args.kwargs
        assert kwargs["url"] == "https://api.example.test/v1/things"
        assert kwargs["params"] == {"page": 2}
        assert kwargs["timeout"] == 5

    def test_absolute_url_bypasses_base(self, response_factory):
        client = HttpClient(base_url="https://api.example.test")
        with patch(REQUEST, return_value=response_factory(body={})) as mock_request:
            client.get("https://other.example.test/x")
        assert mock_request.call_args.kwargs["url"] == "https://other.example.test/x"

    def test_default_timeout_from_settings(self, response_factory):
        with patch(REQUEST, return_value=response_factory(body={})) as mock_request:
            HttpClient().get("https://api.example.test")
        assert mock_request.call_args.kwargs["timeout"] == 30

    def test_headers_merged(self, response_factory):
        client = HttpClient(default_headers={"X-A": "1"}, bearer_token="tok")
        with patch(REQUEST, return_value=response_factory(body={})) as mock_request:
            client.get("https://api.example.test", headers={"X-B": "2"})

        headers = mock_request.call_args.kwargs["headers"]
        assert headers == {"X-A": "1", "X-B": "2", "Authorization": "Bearer tok"}

    def test_timeout_mapped(self):
        with patch(REQUEST, side_effect=ReadTimeout()):
            with pytest.raises(NodeTimeoutError) as exc_info:
                HttpClient(timeout=2).get("https://api.example.test")
        assert exc_info.value.timeout == 2
        assert exc_info.value.url == "https://api.example.test"

    def test_connection_error_mapped(self):
        with patch(REQUEST, side_effect=RequestsConnectionError("refused")):
            with pytest.raises(HttpApiError) as exc_info:
                HttpClient().post("https://api.example.test", data="x")
        assert exc_info.value.method == "POST"
        assert exc_info.value.status_code is None


class TestHttpResponse:
    def test_json_api_body(self, response_factory):
        response = HttpResponse(response_factory(body={"data": []}))
        assert response.is_json
        assert response.body() == {"data": []}

    def test_content_type_parameters_ignored(self, response_factory):
        raw = response_factory(body={"a": 1}, content_type="application/json; charset=utf-8")
        assert HttpResponse(raw).body() == {"a": 1}

    def test_text_body(self, response_factory):
        response = HttpResponse(response_factory(body="hello", content_type="text/plain"))
        assert not response.is_json
        assert response.body() == "hello"

    def test_malformed_json_falls_back_to_text(self, response_factory):
        raw = response_factory(body="{broken", content_type="application/json")
        assert HttpResponse(raw).body() == "{broken"

    def test_raise_for_status(self, response_factory):
        raw = response_factory(status_code=401, body={"detail": "no"}, reason="Unauthorized")
        with pytest.raises(HttpApiError) as exc_info:
            HttpResponse(raw).raise_for_status()
        assert exc_info.value.status_code == 401
        assert str(exc_info.value) == "HTTP 401: Unauthorized"
        assert exc_info.value.response_body == '{"detail": "no"}'

    def test_ok_does_not_raise(self, response_factory):
        HttpResponse(response_factory(body={})).raise_for_status()
