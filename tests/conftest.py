"""Shared pytest fixtures for request-reconciler tests."""

from unittest.mock import MagicMock, Mock

import pytest
from dotenv import load_dotenv

from request_reconciler.config import Config
from request_reconciler.models import (
    HttpDetails,
    HttpRequest,
    HttpResponse,
    RequestStatus,
    Resource,
)

load_dotenv()


TEST_BODY = '{"username": "john_doe", "email": "john.doe@example.com"}'
TEST_BASE_URL = "https://api.example.com/users"


def make_resource(status: RequestStatus | None = None, **spec_overrides):
    """Build a Resource with the four standard user mappings."""
    spec = {
        "payload": {"base_url": TEST_BASE_URL, "body": TEST_BODY},
        "mappings": [
            {
                "method": "POST",
                "body": "{{ .payload.body }}",
                "url": "{{ .payload.base_url }}",
                "headers": {"Content-Type": ["application/json"]},
            },
            {
                "method": "GET",
                "url": "{{ .payload.base_url }}/{{ .response.body.id }}",
            },
            {
                "method": "PUT",
                "body": '{"username": "{{ .payload.body.username }}", '
                '"email": "{{ .payload.body.email }}"}',
                "url": "{{ .payload.base_url }}/{{ .response.body.id }}",
            },
            {
                "method": "DELETE",
                "url": "{{ .payload.base_url }}/{{ .response.body.id }}",
            },
        ],
    }
    spec.update(spec_overrides)
    return Resource(
        name="test-request",
        spec=spec,
        status=status or RequestStatus(),
    )


def make_details(status_code=200, body="", method="GET", url=""):
    return HttpDetails(
        request=HttpRequest(method=method, url=url),
        response=HttpResponse(status_code=status_code, body=body),
    )


def created_status(body='{"id": 1, "username": "john_doe"}', code=201):
    """Status recorded after a successful POST."""
    return RequestStatus(
        request_details=HttpRequest(method="POST", url=TEST_BASE_URL),
        response=HttpResponse(status_code=code, body=body),
    )


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(timeout=5.0, connect_timeout=2.0)


@pytest.fixture
def mock_http_client(mock_config):
    """Create a mock HttpClient instance for testing."""
    from request_reconciler.core.client import HttpClient

    client = MagicMock(spec=HttpClient)
    client.config = mock_config
    return client


@pytest.fixture
def mock_store():
    """Create a mock ResourceStore that accepts every save."""
    return MagicMock()


@pytest.fixture
def mock_http_response():
    """Factory fixture for creating requests.Response mocks."""

    def _create_response(status_code=200, text="", headers=None):
        response = Mock()
        response.status_code = status_code
        response.text = text
        response.headers = headers or {}
        return response

    return _create_response
