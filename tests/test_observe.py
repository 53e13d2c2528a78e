"""Tests for reconciler/observe.py -- the synchronization decision engine.

Covers:
- Validity gate (empty body, failed POST)
- 404 short-circuit vs. other transport errors carried into the result
- Desired state resolved from the PUT mapping
- The four comparison outcomes surfaced through is_up_to_date()
"""

import threading

import pytest
from conftest import (
    TEST_BASE_URL,
    created_status,
    make_details,
    make_resource,
)

from request_reconciler.compare.json_value import ArrayMode
from request_reconciler.errors import (
    InvalidJSONError,
    MappingNotFoundError,
    ObjectNotFoundError,
    TransportError,
)
from request_reconciler.models import (
    HttpDetails,
    HttpRequest,
    HttpResponse,
    RequestStatus,
)
from request_reconciler.reconciler.observe import (
    ObservationEngine,
    ObservationResult,
    is_valid_for_observation,
)

LIVE_USER = (
    '{"id": 1, "username": "john_doe", "email": "john.doe@example.com"}'
)


def _status(method="POST", code=201, body='{"id": 1}') -> RequestStatus:
    return RequestStatus(
        request_details=HttpRequest(method=method),
        response=HttpResponse(status_code=code, body=body),
    )


# ---------------------------------------------------------------------------
# Validity gate
# ---------------------------------------------------------------------------


class TestValidityGate:
    def test_empty_body_is_invalid(self):
        resource = make_resource(status=_status(method="GET", code=200, body=""))
        assert not is_valid_for_observation(resource)

    def test_fresh_resource_is_invalid(self):
        assert not is_valid_for_observation(make_resource())

    @pytest.mark.parametrize("code", [400, 404, 409, 500, 503])
    def test_failed_post_is_invalid_regardless_of_body(self, code):
        resource = make_resource(
            status=_status(method="POST", code=code, body=LIVE_USER)
        )
        assert not is_valid_for_observation(resource)

    def test_successful_post_is_valid(self):
        assert is_valid_for_observation(make_resource(status=_status()))

    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
    def test_error_after_other_methods_is_valid(self, method):
        resource = make_resource(status=_status(method=method, code=500))
        assert is_valid_for_observation(resource)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


@pytest.fixture
def engine(mock_http_client):
    return ObservationEngine(mock_http_client)


class TestIsUpToDate:
    def test_gate_rejects_without_network_call(self, engine, mock_http_client):
        with pytest.raises(ObjectNotFoundError):
            engine.is_up_to_date(make_resource())
        mock_http_client.send_request.assert_not_called()

    def test_synced(self, engine, mock_http_client):
        details = make_details(200, LIVE_USER)
        mock_http_client.send_request.return_value = details

        result = engine.is_up_to_date(make_resource(status=created_status()))

        assert result.synced is True
        assert result.details == details
        assert result.response_error is None

    def test_get_request_uses_resolved_mapping(self, engine, mock_http_client):
        mock_http_client.send_request.return_value = make_details(
            200, LIVE_USER
        )
        cancel = threading.Event()

        engine.is_up_to_date(make_resource(status=created_status()), cancel)

        mock_http_client.send_request.assert_called_once_with(
            "GET", f"{TEST_BASE_URL}/1", "", {}, False, cancel=cancel
        )

    def test_out_of_sync_is_not_an_error(self, engine, mock_http_client):
        mock_http_client.send_request.return_value = make_details(
            200, '{"id": 1, "username": "john_doe", "email": "x@y.com"}'
        )

        result = engine.is_up_to_date(make_resource(status=created_status()))

        assert result.synced is False
        assert result.response_error is None

    def test_non_2xx_is_never_synced(self, engine, mock_http_client):
        mock_http_client.send_request.return_value = make_details(
            500, LIVE_USER
        )
        result = engine.is_up_to_date(make_resource(status=created_status()))
        assert result.synced is False

    def test_404_is_object_not_found_even_with_json_body(
        self, engine, mock_http_client
    ):
        mock_http_client.send_request.return_value = make_details(
            404, LIVE_USER
        )
        with pytest.raises(ObjectNotFoundError, match="object wasn't found"):
            engine.is_up_to_date(make_resource(status=created_status()))

    def test_transport_error_does_not_abort_comparison(
        self, engine, mock_http_client
    ):
        # The error is carried in the result; the empty body then fails
        # the JSON comparison with the response body named as culprit.
        mock_http_client.send_request.side_effect = TransportError("timeout")
        with pytest.raises(InvalidJSONError, match="response body"):
            engine.is_up_to_date(make_resource(status=created_status()))

    def test_transport_error_carried_in_result_for_text_apis(
        self, mock_http_client
    ):
        resource = make_resource(
            status=created_status(body="id=1"),
            mappings=[
                {"method": "GET"},
                {"method": "PUT", "body": ""},
            ],
        )
        error = TransportError("connection reset")
        mock_http_client.send_request.side_effect = error

        result = ObservationEngine(mock_http_client).is_up_to_date(resource)

        assert result.response_error is error
        assert result.synced is False
        assert result.details.request.url == TEST_BASE_URL

    def test_missing_get_mapping(self, engine, mock_http_client):
        resource = make_resource(
            status=created_status(), mappings=[{"method": "PUT"}]
        )
        with pytest.raises(MappingNotFoundError, match="GET"):
            engine.is_up_to_date(resource)
        mock_http_client.send_request.assert_not_called()

    def test_missing_put_mapping(self, engine, mock_http_client):
        resource = make_resource(
            status=created_status(), mappings=[{"method": "GET"}]
        )
        mock_http_client.send_request.return_value = make_details(
            200, LIVE_USER
        )
        with pytest.raises(MappingNotFoundError, match="PUT"):
            engine.is_up_to_date(resource)

    def test_non_json_live_state(self, engine, mock_http_client):
        mock_http_client.send_request.return_value = make_details(
            200, "not json"
        )
        with pytest.raises(InvalidJSONError, match="response body"):
            engine.is_up_to_date(make_resource(status=created_status()))

    def test_non_json_desired_state(self, mock_http_client):
        resource = make_resource(
            status=created_status(),
            mappings=[
                {"method": "GET"},
                {"method": "PUT", "body": "username=john_doe"},
            ],
        )
        mock_http_client.send_request.return_value = make_details(
            200, LIVE_USER
        )
        with pytest.raises(InvalidJSONError, match="PUT mapping result"):
            ObservationEngine(mock_http_client).is_up_to_date(resource)

    def test_plain_text_containment(self, mock_http_client):
        resource = make_resource(
            status=created_status(body="created"),
            mappings=[
                {"method": "GET"},
                {"method": "PUT", "body": "plain-text"},
            ],
        )
        mock_http_client.send_request.return_value = make_details(
            201, "contains plain-text substring"
        )
        result = ObservationEngine(mock_http_client).is_up_to_date(resource)
        assert result.synced is True

    def test_array_mode(self, mock_http_client):
        resource = make_resource(
            status=created_status(),
            mappings=[
                {"method": "GET"},
                {"method": "PUT", "body": '{"tags": ["a", "b"]}'},
            ],
        )
        mock_http_client.send_request.return_value = make_details(
            200, '{"tags": ["b", "a"]}'
        )
        ordered = ObservationEngine(mock_http_client)
        unordered = ObservationEngine(
            mock_http_client, array_mode=ArrayMode.UNORDERED
        )
        assert ordered.is_up_to_date(resource).synced is False
        assert unordered.is_up_to_date(resource).synced is True


class TestObservationResult:
    def test_failed_sentinel(self):
        result = ObservationResult.failed()
        assert result.synced is False
        assert result.details == HttpDetails()
        assert result.response_error is None
