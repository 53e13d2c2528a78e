"""Pydantic models describing a declared HTTP resource and its status.

Defines the data contracts shared by the resolver, the decision engine and
the lifecycle orchestrator:

- ``HttpMethod``: Enum of the four CRUD verbs a resource can map.
- ``Mapping``: URL/body/header templates for one method.
- ``Payload``: Base URL and body template data.
- ``RequestParameters``: The declared spec of a resource.
- ``HttpRequest`` / ``HttpResponse`` / ``HttpDetails``: One HTTP exchange.
- ``RequestStatus``: What the previous reconcile cycle recorded.
- ``Resource``: Spec plus status, the unit of reconciliation.
- ``ResolvedRequest``: A ready-to-send request for one method.

All models are frozen; status changes produce new ``Resource`` instances
via ``model_copy``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class HttpMethod(str, Enum):
    """HTTP methods a resource can map to request templates."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


def _as_method(method: HttpMethod | str) -> HttpMethod:
    if isinstance(method, HttpMethod):
        return method
    if not isinstance(method, str):
        raise ValueError(f"mapping method must be a string, got {method!r}")
    return HttpMethod(method.upper())


class Mapping(BaseModel):
    """Request templates for a single HTTP method.

    Attributes:
        method: The HTTP method this mapping serves.
        url: URL template. Empty means the payload base URL.
        body: Body template.
        headers: Header templates, one list of values per header name.
    """

    method: HttpMethod
    url: str = ""
    body: str = ""
    headers: dict[str, list[str]] = {}

    model_config = {"frozen": True}


class Payload(BaseModel):
    base_url: str
    body: str = ""

    model_config = {"frozen": True}


class RequestParameters(BaseModel):
    """Declared spec of a resource.

    ``mappings`` may be given as a list of ``Mapping`` (or dicts); it is
    keyed by method during validation and rejects a method declared twice.

    Attributes:
        payload: Base URL and body data available to templates.
        mappings: One mapping per HTTP method.
        headers: Default headers, overridden per key by mapping headers.
        insecure_skip_tls_verify: Disable TLS verification for this resource.
    """

    payload: Payload
    mappings: dict[HttpMethod, Mapping] = {}
    headers: dict[str, list[str]] = {}
    insecure_skip_tls_verify: bool = False

    model_config = {"frozen": True}

    @field_validator("mappings", mode="before")
    @classmethod
    def _key_mappings_by_method(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        keyed: dict[str, Any] = {}
        for item in value:
            if isinstance(item, Mapping):
                method = item.method
            elif isinstance(item, dict):
                method = item.get("method", "")
            else:
                raise ValueError(
                    f"each mapping must be an object, got {item!r}"
                )
            key = _as_method(method).value
            if key in keyed:
                raise ValueError(
                    f"duplicate mapping for method {key}: "
                    "at most one mapping per method is allowed"
                )
            keyed[key] = item
        return keyed

    @model_validator(mode="after")
    def _check_mapping_keys(self) -> RequestParameters:
        for method, mapping in self.mappings.items():
            if mapping.method != method:
                raise ValueError(
                    f"mapping registered under {method.value} "
                    f"declares method {mapping.method.value}"
                )
        return self


class HttpRequest(BaseModel):
    method: str = ""
    url: str = ""
    body: str = ""
    headers: dict[str, list[str]] = {}

    model_config = {"frozen": True}


class HttpResponse(BaseModel):
    status_code: int = 0
    body: str = ""
    headers: dict[str, list[str]] = {}

    model_config = {"frozen": True}


class HttpDetails(BaseModel):
    """One HTTP exchange: the request sent and the response received."""

    request: HttpRequest = Field(default_factory=HttpRequest)
    response: HttpResponse = Field(default_factory=HttpResponse)

    model_config = {"frozen": True}


class RequestStatus(BaseModel):
    """Outcome recorded by the previous reconcile cycle.

    Attributes:
        request_details: Method and resolved request last sent.
        response: Last HTTP response received.
        failed: Number of consecutive failed cycles.
        error: Text of the last error, empty when the last cycle succeeded.
    """

    request_details: HttpRequest = Field(default_factory=HttpRequest)
    response: HttpResponse = Field(default_factory=HttpResponse)
    failed: int = 0
    error: str = ""

    model_config = {"frozen": True}


class Resource(BaseModel):
    name: str
    spec: RequestParameters
    status: RequestStatus = Field(default_factory=RequestStatus)

    model_config = {"frozen": True}

    def get_mapping(self, method: HttpMethod | str) -> Mapping | None:
        """Return the mapping declared for *method*, or ``None``."""
        try:
            key = _as_method(method)
        except ValueError:
            return None
        return self.spec.mappings.get(key)

    def with_status(self, status: RequestStatus) -> Resource:
        return self.model_copy(update={"status": status})


class ResolvedRequest(BaseModel):
    url: str
    body: str = ""
    headers: dict[str, list[str]] = {}

    model_config = {"frozen": True}
