"""Pytest configuration and fixtures."""
import json
import logging
import os
import time
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

# Set test environment variables
os.environ["APS_NODEPACK_ENV"] = "test"
os.environ["APS_NODEPACK_LOG_FORMAT"] = "text"


@pytest.fixture(autouse=True)
def reset_globals():
    """Start every test with fresh settings and registry."""
    from aps_nodepack.config import reset_settings
    from aps_nodepack.registry import reset_global_registry

    reset_settings()
    reset_global_registry()
    yield
    reset_settings()
    reset_global_registry()
    # Handlers may point at streams closed by the CLI runner
    logging.getLogger().handlers.clear()


def make_response(
    status_code: int = 200,
    body: Any = None,
    content_type: str = "application/vnd.api+json",
    reason: str = "OK",
) -> MagicMock:
    """Build a stand-in for requests.Response."""
    text = body if isinstance(body, str) else json.dumps(body)
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.text = text
    response.headers = {"Content-Type": content_type}
    response.url = "https://developer.api.autodesk.com/test"
    response.request.method = "GET"
    if isinstance(body, str):
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def response_factory():
    """Factory for fake HTTP responses."""
    return make_response


@pytest.fixture
def token_data() -> Dict[str, Any]:
    """Token data that is still valid for an hour."""
    return {
        "access_token": "test-access-token",
        "refresh_token": "test-refresh-token",
        "token_type": "Bearer",
        "expires_at": time.time() + 3600,
    }


@pytest.fixture
def three_legged_data(token_data) -> Dict[str, Any]:
    """Stored data for the authorization-code credential."""
    return {
        "clientId": "test-client-id",
        "clientSecret": "test-client-secret",
        "scope": "data:read",
        "oauthTokenData": token_data,
    }


@pytest.fixture
def two_legged_data() -> Dict[str, Any]:
    """Stored data for the client-credentials credential, no token yet."""
    return {
        "clientId": "test-client-id",
        "clientSecret": "test-client-secret",
        "scope": "data:read",
    }


@pytest.fixture
def sample_entities():
    """Two JSON:API resource objects as the Data Management API returns them."""
    return [
        {
            "id": "a",
            "type": "hubs",
            "links": {"self": {"href": "https://example.test/hubs/a"}},
            "attributes": {"name": "Hub A", "region": "US"},
        },
        {
            "id": "b",
            "type": "hubs",
            "links": {"self": {"href": "https://example.test/hubs/b"}},
            "attributes": {"name": "Hub B", "region": "EMEA"},
        },
    ]


@pytest.fixture
def run_node(three_legged_data):
    """Run the Data Management node through a NodeRunner."""
    from aps_nodepack.node_sdk import NodeRunner

    def _run(
        parameters: Dict[str, Any],
        input_data: Optional[list] = None,
        continue_on_fail: bool = False,
        credentials: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        if credentials is None:
            credentials = {"autodeskPlatformServicesOAuth2Api": dict(three_legged_data)}
        return NodeRunner().run(
            "apsDataManagement",
            parameters=parameters,
            credentials=credentials,
            input_data=input_data,
            continue_on_fail=continue_on_fail,
        )

    return _run
