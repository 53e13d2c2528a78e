"""Compare an observed response body with the desired state text."""

from __future__ import annotations

from request_reconciler.compare.json_value import (
    ArrayMode,
    contains,
    parse_object,
)
from request_reconciler.errors import InvalidJSONError
from request_reconciler.httputil import is_http_success

RESPONSE_BODY_LABEL = "response body"
DESIRED_STATE_LABEL = "PUT mapping result"


def compare(
    observed_body: str,
    desired_state: str,
    status_code: int,
    array_mode: ArrayMode = ArrayMode.ORDERED,
) -> bool:
    """Decide whether *observed_body* satisfies *desired_state*.

    When both texts are JSON objects, the desired object must be
    structurally contained in the observed one.  When neither is JSON,
    the desired text must be a substring of the observed body.  In both
    cases the response status must be 2xx.

    Args:
        observed_body: Body returned by the GET request.
        desired_state: Resolved body of the PUT mapping.
        status_code: HTTP status of the GET response.
        array_mode: Array semantics for JSON containment.

    Returns:
        True if the resource is in sync.

    Raises:
        InvalidJSONError: If exactly one of the two texts is JSON.
    """
    observed = parse_object(observed_body)
    desired = parse_object(desired_state)

    if observed is not None and desired is not None:
        return contains(observed, desired, array_mode) and is_http_success(
            status_code
        )

    if observed is None and desired is not None:
        raise InvalidJSONError(RESPONSE_BODY_LABEL, observed_body)

    if observed is not None and desired is None:
        raise InvalidJSONError(DESIRED_STATE_LABEL, desired_state)

    return desired_state in observed_body and is_http_success(status_code)
