"""Lifecycle operations for a declared HTTP resource.

``RequestExternal`` maps the reconciliation verbs onto the resource's
mappings:

- ``observe``  -- GET vs. PUT comparison via ``ObservationEngine``.
- ``create``   -- send the POST mapping.
- ``update``   -- send the PUT mapping.
- ``delete``   -- send the DELETE mapping.

Every verb rejects objects that are not a ``Resource`` before doing any
I/O.  A transport failure while creating, updating or deleting raises
``FailedToSendHttpRequestError`` and leaves the stored status untouched.
Successful exchanges (including HTTP error statuses) are written back
through the ``StatusHandler``.

``reconcile`` runs one pass of the usual managed-resource loop: observe,
then create or update as needed, or delete when the resource is being
removed.  How often it runs is up to the caller.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum

from request_reconciler.compare.json_value import ArrayMode
from request_reconciler.core.client import HttpClient
from request_reconciler.errors import (
    FailedToSendHttpRequestError,
    NotRequestResourceError,
    ObjectNotFoundError,
    TransportError,
)
from request_reconciler.models import HttpMethod, Resource
from request_reconciler.reconciler.observe import (
    ObservationEngine,
    ObservationResult,
)
from request_reconciler.reconciler.status import StatusHandler
from request_reconciler.reconciler.store import ResourceStore
from request_reconciler.requestgen import RequestResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExternalObservation:
    """What ``observe`` learned about the remote object.

    Attributes:
        resource_exists: False when the object must be (re)created.
        resource_up_to_date: True when live state matches desired state.
        resource: The resource as persisted after observing.
        observation: The raw observation result.
    """

    resource_exists: bool
    resource_up_to_date: bool
    resource: Resource
    observation: ObservationResult = field(
        default_factory=ObservationResult.failed
    )


class ReconcileOutcome(str, Enum):
    """What a single ``reconcile`` pass did."""

    CREATED = "created"
    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    DELETED = "deleted"
    ABSENT = "absent"


@dataclass(frozen=True)
class ReconcileResult:
    outcome: ReconcileOutcome
    resource: Resource


class RequestExternal:
    """Drive observe/create/update/delete for resources.

    Args:
        client: HTTP transport.
        store: Where resources with updated status are written.
        resolver: Renders mappings into requests.
        array_mode: Array semantics for JSON containment.
    """

    def __init__(
        self,
        client: HttpClient,
        store: ResourceStore,
        resolver: RequestResolver | None = None,
        array_mode: ArrayMode = ArrayMode.ORDERED,
    ) -> None:
        self.client = client
        self.resolver = resolver or RequestResolver()
        self.status_handler = StatusHandler(store)
        self.engine = ObservationEngine(
            client, self.resolver, array_mode=array_mode
        )

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def observe(
        self, resource: Resource, cancel: threading.Event | None = None
    ) -> ExternalObservation:
        """Check whether the remote object exists and is up to date.

        Raises:
            NotRequestResourceError: If *resource* is not a ``Resource``.
            FailedToUpdateStatusError: If the status write fails.
            ReconcilerError: Any engine error other than
                ``ObjectNotFoundError``.
        """
        resource = _as_resource(resource)
        try:
            result = self.engine.is_up_to_date(resource, cancel)
        except ObjectNotFoundError:
            logger.debug("%s does not exist remotely", resource.name)
            return ExternalObservation(
                resource_exists=False,
                resource_up_to_date=False,
                resource=resource,
            )

        if result.synced:
            resource = self.status_handler.reset_failures(resource)
        resource = self.status_handler.set_request_status(
            resource, result.details, result.response_error
        )
        return ExternalObservation(
            resource_exists=True,
            resource_up_to_date=result.synced,
            resource=resource,
            observation=result,
        )

    def create(
        self, resource: Resource, cancel: threading.Event | None = None
    ) -> Resource:
        return self._deploy(resource, HttpMethod.POST, cancel)

    def update(
        self, resource: Resource, cancel: threading.Event | None = None
    ) -> Resource:
        return self._deploy(resource, HttpMethod.PUT, cancel)

    def delete(
        self, resource: Resource, cancel: threading.Event | None = None
    ) -> Resource:
        return self._deploy(resource, HttpMethod.DELETE, cancel)

    def reconcile(
        self,
        resource: Resource,
        deleting: bool = False,
        cancel: threading.Event | None = None,
    ) -> ReconcileResult:
        """Run one observe-then-act pass for *resource*."""
        observation = self.observe(resource, cancel)
        current = observation.resource

        if deleting:
            if not observation.resource_exists:
                return ReconcileResult(ReconcileOutcome.ABSENT, current)
            return ReconcileResult(
                ReconcileOutcome.DELETED, self.delete(current, cancel)
            )

        if not observation.resource_exists:
            return ReconcileResult(
                ReconcileOutcome.CREATED, self.create(current, cancel)
            )
        if not observation.resource_up_to_date:
            return ReconcileResult(
                ReconcileOutcome.UPDATED, self.update(current, cancel)
            )
        return ReconcileResult(ReconcileOutcome.UP_TO_DATE, current)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _deploy(
        self,
        resource: Resource,
        method: HttpMethod,
        cancel: threading.Event | None,
    ) -> Resource:
        resource = _as_resource(resource)
        request = self.resolver.resolve(resource, method)

        logger.debug("%s %s for %s", method.value, request.url, resource.name)
        try:
            details = self.client.send_request(
                method.value,
                request.url,
                request.body,
                request.headers,
                resource.spec.insecure_skip_tls_verify,
                cancel=cancel,
            )
        except TransportError as e:
            raise FailedToSendHttpRequestError(e) from e

        return self.status_handler.set_request_status(resource, details)


def _as_resource(obj: object) -> Resource:
    if not isinstance(obj, Resource):
        raise NotRequestResourceError(obj)
    return obj
