"""Exception hierarchy for request_reconciler.

Every error raised by the decision engine and the lifecycle orchestrator
derives from ``ReconcilerError`` so callers (the CLI, an enclosing
controller loop) can catch the whole family in one place.

- ``ObjectNotFoundError``: the remote object does not exist (or never
  existed); the caller should run the create path.
- ``MappingNotFoundError``: the resource declares no mapping for a method.
- ``InvalidRequestError``: a mapping rendered into an unusable request.
- ``InvalidJSONError``: live and desired state disagree on format.
- ``TransportError``: the HTTP exchange itself failed.
- ``FailedToSendHttpRequestError``: a lifecycle step could not send.
- ``NotRequestResourceError``: the object handed in is not a ``Resource``.
- ``FailedToUpdateStatusError``: status could not be written back.
"""

from __future__ import annotations


class ReconcilerError(Exception):
    """Base class for all request_reconciler errors."""


class ObjectNotFoundError(ReconcilerError):
    def __init__(self, message: str = "object wasn't found") -> None:
        super().__init__(message)


class MappingNotFoundError(ReconcilerError):
    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(
            f"{method} mapping doesn't exist in request, skipping operation"
        )


class InvalidRequestError(ReconcilerError):
    """Raised when a mapping renders into a request that cannot be sent.

    Attributes:
        method: HTTP method of the mapping being resolved.
        unresolved: Template paths that did not resolve to a value.
    """

    def __init__(
        self, method: str, unresolved: list[str] | None = None
    ) -> None:
        self.method = method
        self.unresolved = unresolved or []
        if self.unresolved:
            detail = "unresolved expressions: " + ", ".join(
                self.unresolved
            )
        else:
            detail = "resolved URL is empty"
        super().__init__(
            f"{method} request details are not valid ({detail})"
        )


class InvalidJSONError(ReconcilerError):
    """Raised when exactly one side of a comparison is JSON.

    Attributes:
        label: Which value is malformed ("response body" or
            "PUT mapping result").
        value: The offending text.
    """

    def __init__(self, label: str, value: str) -> None:
        self.label = label
        self.value = value
        super().__init__(f"{label} is not a valid JSON string: {value}")


class TransportError(ReconcilerError):
    pass


class FailedToSendHttpRequestError(ReconcilerError):
    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"failed to send http request: {cause}")


class NotRequestResourceError(ReconcilerError, TypeError):
    def __init__(self, obj: object = None) -> None:
        super().__init__(
            "managed resource is not a Request custom resource"
            + (f" (got {type(obj).__name__})" if obj is not None else "")
        )


class FailedToUpdateStatusError(ReconcilerError):
    def __init__(self, name: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(
            f"failed to update status of resource '{name}': {cause}"
        )
