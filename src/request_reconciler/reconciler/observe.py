"""Decide whether a remote resource matches its declared desired state.

``ObservationEngine.is_up_to_date()`` runs four sequential steps:

1. **Gate** -- without any I/O, reject resources whose recorded status
   shows nothing was ever created (empty body) or the creating POST
   failed with an HTTP error.  Both raise ``ObjectNotFoundError``.
2. **Fetch** -- resolve and send the GET mapping.  A 404 raises
   ``ObjectNotFoundError``.  Any other transport failure is kept as
   ``response_error`` and the comparison still runs.
3. **Desired state** -- resolve the PUT mapping; its body text is the
   target.
4. **Compare** -- see ``request_reconciler.compare.comparator``.

The engine holds no state between calls and does not log; every failure
is raised to the caller.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from request_reconciler.compare.comparator import compare
from request_reconciler.compare.json_value import ArrayMode
from request_reconciler.core.client import HttpClient
from request_reconciler.errors import ObjectNotFoundError, TransportError
from request_reconciler.httputil import is_http_error
from request_reconciler.models import (
    HttpDetails,
    HttpMethod,
    HttpRequest,
    Resource,
)
from request_reconciler.requestgen import RequestResolver

HTTP_NOT_FOUND = 404


@dataclass(frozen=True)
class ObservationResult:
    """Outcome of one observation.

    Attributes:
        synced: True only if the GET response was 2xx and matched the
            desired state.
        details: The GET exchange that was compared.
        response_error: Transport error raised while fetching, if any.
    """

    synced: bool = False
    details: HttpDetails = field(default_factory=HttpDetails)
    response_error: BaseException | None = None

    @classmethod
    def failed(cls) -> ObservationResult:
        """Unsynced result carrying no request details and no error."""
        return cls()


def is_valid_for_observation(resource: Resource) -> bool:
    status = resource.status
    if status.response.body == "":
        return False
    return not (
        status.request_details.method == HttpMethod.POST.value
        and is_http_error(status.response.status_code)
    )


class ObservationEngine:
    """Compare a resource's live state (GET) with its desired state (PUT).

    Args:
        client: Transport used for the GET request.
        resolver: Renders mappings into requests.
        array_mode: Array semantics for JSON containment.
    """

    def __init__(
        self,
        client: HttpClient,
        resolver: RequestResolver | None = None,
        array_mode: ArrayMode = ArrayMode.ORDERED,
    ) -> None:
        self.client = client
        self.resolver = resolver or RequestResolver()
        self.array_mode = array_mode

    def is_up_to_date(
        self,
        resource: Resource,
        cancel: threading.Event | None = None,
    ) -> ObservationResult:
        """Observe *resource* once.

        Args:
            resource: Snapshot of the resource spec and status.
            cancel: Cancellation signal passed to the transport.

        Returns:
            The observation result.

        Raises:
            ObjectNotFoundError: The gate rejected the resource or GET
                returned 404.
            MappingNotFoundError: No GET or PUT mapping is declared.
            InvalidRequestError: A mapping did not render.
            InvalidJSONError: Exactly one of live/desired state is JSON.
        """
        if not is_valid_for_observation(resource):
            raise ObjectNotFoundError()

        details, response_error = self._fetch(resource, cancel)

        # A 404 means the object is gone, whatever the body says. Other
        # failures fall through so the comparison can still use the body.
        if details.response.status_code == HTTP_NOT_FOUND:
            raise ObjectNotFoundError()

        desired_state = self.desired_state(resource)

        synced = compare(
            details.response.body,
            desired_state,
            details.response.status_code,
            self.array_mode,
        )
        return ObservationResult(
            synced=synced, details=details, response_error=response_error
        )

    def desired_state(self, resource: Resource) -> str:
        """Return the resolved PUT body of *resource*."""
        return self.resolver.resolve(resource, HttpMethod.PUT).body

    def _fetch(
        self, resource: Resource, cancel: threading.Event | None
    ) -> tuple[HttpDetails, TransportError | None]:
        request = self.resolver.resolve(resource, HttpMethod.GET)
        try:
            details = self.client.send_request(
                HttpMethod.GET.value,
                request.url,
                request.body,
                request.headers,
                resource.spec.insecure_skip_tls_verify,
                cancel=cancel,
            )
        except TransportError as e:
            details = HttpDetails(
                request=HttpRequest(
                    method=HttpMethod.GET.value,
                    url=request.url,
                    body=request.body,
                    headers=request.headers,
                )
            )
            return details, e
        return details, None
