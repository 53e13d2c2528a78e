"""Write the outcome of an HTTP exchange back to a resource's status."""

from __future__ import annotations

import logging

from request_reconciler.errors import FailedToUpdateStatusError
from request_reconciler.httputil import is_http_error
from request_reconciler.models import HttpDetails, RequestStatus, Resource
from request_reconciler.reconciler.store import ResourceStore

logger = logging.getLogger(__name__)


class StatusHandler:
    """Compute and persist the next ``RequestStatus`` of a resource.

    Args:
        store: Where updated resources are written.
    """

    def __init__(self, store: ResourceStore) -> None:
        self.store = store

    def set_request_status(
        self,
        resource: Resource,
        details: HttpDetails,
        error: BaseException | None = None,
    ) -> Resource:
        """Record *details* (or *error*) on *resource* and persist it.

        A transport *error* keeps the previously recorded request and
        response so the next observation still has something to compare.
        An HTTP error status is recorded and counted as a failure.

        Returns:
            The updated resource.

        Raises:
            FailedToUpdateStatusError: If the store rejects the write.
        """
        current = resource.status
        if error is not None:
            status = current.model_copy(
                update={"failed": current.failed + 1, "error": str(error)}
            )
        elif is_http_error(details.response.status_code):
            status = RequestStatus(
                request_details=details.request,
                response=details.response,
                failed=current.failed + 1,
                error=(
                    "HTTP request failed with status code "
                    f"{details.response.status_code}"
                ),
            )
        else:
            status = RequestStatus(
                request_details=details.request,
                response=details.response,
                failed=current.failed,
                error="",
            )
        return self._save(resource.with_status(status))

    def reset_failures(self, resource: Resource) -> Resource:
        """Return *resource* with its failure counter cleared (not persisted)."""
        return resource.with_status(
            resource.status.model_copy(update={"failed": 0})
        )

    def _save(self, resource: Resource) -> Resource:
        try:
            self.store.save(resource)
        except Exception as e:
            raise FailedToUpdateStatusError(resource.name, e) from e
        logger.debug(
            "Updated status of %s (failed=%d)",
            resource.name,
            resource.status.failed,
        )
        return resource
