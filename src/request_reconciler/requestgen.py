"""Render a resource mapping into a ready-to-send request.

Mapping templates embed ``{{ .path }}`` expressions that are looked up in
a context built from the resource::

    {
        "payload":  {"base_url": ..., "body": <payload body>},
        "response": {"status_code": ..., "body": <last body>, "headers": ...},
    }

Bodies that are JSON text are exposed parsed, so ``{{ .payload.body.email }}``
and ``{{ .response.body.items[0].id }}`` work.  Anything else is exposed as
the raw string, as is JSON nested deeper than
``compare.json_value.MAX_DEPTH``.

Rendering rules:

* strings are inserted verbatim;
* ``true`` / ``false`` / ``null`` for booleans and null;
* numbers via ``str()``;
* objects and arrays as JSON text.

A path that does not resolve makes the whole request invalid.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from request_reconciler.compare.json_value import loads as load_json
from request_reconciler.errors import (
    InvalidRequestError,
    MappingNotFoundError,
)
from request_reconciler.models import (
    HttpMethod,
    Mapping,
    ResolvedRequest,
    Resource,
)

logger = logging.getLogger(__name__)

# Matches {{ .path.to[0].value }}
_EXPRESSION_PATTERN = re.compile(r"\{\{\s*(\.[^{}]*?)\s*\}\}")
_SEGMENT_PATTERN = re.compile(r"\.([A-Za-z_][A-Za-z0-9_-]*)|\[(\d+)\]")

_MISSING = object()


def _maybe_json(text: str) -> Any:
    if not text:
        return text
    try:
        return load_json(text)
    except ValueError:
        return text


def build_context(resource: Resource) -> dict[str, Any]:
    """Build the template lookup context for *resource*."""
    response = resource.status.response
    return {
        "payload": {
            "base_url": resource.spec.payload.base_url,
            "body": _maybe_json(resource.spec.payload.body),
        },
        "response": {
            "status_code": response.status_code,
            "body": _maybe_json(response.body),
            "headers": dict(response.headers),
        },
    }


def lookup(context: Any, path: str) -> Any:
    """Evaluate a dotted *path* (``.a.b[0]``) against *context*.

    A bare ``.`` returns the whole context.  Returns a private sentinel when
    any segment is missing, so that a present JSON ``null`` stays
    distinguishable from an absent key.
    """
    if path == ".":
        return context

    value = context
    position = 0
    for match in _SEGMENT_PATTERN.finditer(path):
        if match.start() != position:
            return _MISSING
        position = match.end()
        key, index = match.group(1), match.group(2)
        if key is not None:
            if not isinstance(value, dict) or key not in value:
                return _MISSING
            value = value[key]
        else:
            idx = int(index)
            if not isinstance(value, list) or idx >= len(value):
                return _MISSING
            value = value[idx]

    if position != len(path):
        return _MISSING
    return value


def render_value(value: Any) -> str:
    match value:
        case str():
            return value
        case bool():
            return "true" if value else "false"
        case None:
            return "null"
        case int() | float():
            return str(value)
        case _:
            return json.dumps(value)


def render(template: str, context: dict[str, Any]) -> tuple[str, list[str]]:
    """Render *template* against *context*.

    Returns:
        Tuple of ``(rendered_text, unresolved_paths)``.
    """
    unresolved: list[str] = []

    def _replace(match: re.Match) -> str:
        path = match.group(1)
        value = lookup(context, path)
        if value is _MISSING:
            unresolved.append(path)
            return ""
        return render_value(value)

    return _EXPRESSION_PATTERN.sub(_replace, template), unresolved


class RequestResolver:
    """Resolve a resource's mapping for a method into a ``ResolvedRequest``."""

    def resolve(
        self, resource: Resource, method: HttpMethod | str
    ) -> ResolvedRequest:
        """Resolve the mapping declared for *method*.

        Raises:
            MappingNotFoundError: If *resource* has no mapping for *method*.
            InvalidRequestError: If a template path does not resolve or
                the URL renders empty.
        """
        mapping = resource.get_mapping(method)
        if mapping is None:
            name = method.value if isinstance(method, HttpMethod) else method
            raise MappingNotFoundError(str(name).upper())
        return self.generate(resource, mapping)

    def generate(
        self, resource: Resource, mapping: Mapping
    ) -> ResolvedRequest:
        context = build_context(resource)
        unresolved: list[str] = []

        url_template = mapping.url or resource.spec.payload.base_url
        url, missing = render(url_template, context)
        unresolved.extend(missing)

        body, missing = render(mapping.body, context)
        unresolved.extend(missing)

        merged_headers = {**resource.spec.headers, **mapping.headers}
        headers: dict[str, list[str]] = {}
        for name, values in merged_headers.items():
            rendered_values = []
            for value in values:
                text, missing = render(value, context)
                unresolved.extend(missing)
                rendered_values.append(text)
            headers[name] = rendered_values

        if unresolved or not url.strip():
            raise InvalidRequestError(mapping.method.value, unresolved)

        logger.debug(
            "Resolved %s mapping of %s to %s",
            mapping.method.value,
            resource.name,
            url,
        )
        return ResolvedRequest(url=url.strip(), body=body, headers=headers)
