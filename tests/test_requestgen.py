"""Tests for requestgen.py -- template rendering and mapping resolution."""

import pytest
from conftest import TEST_BASE_URL, created_status, make_resource

from request_reconciler.errors import (
    InvalidRequestError,
    MappingNotFoundError,
)
from request_reconciler.models import HttpMethod, RequestStatus
from request_reconciler.requestgen import (
    RequestResolver,
    build_context,
    lookup,
    render,
    render_value,
)

# ---------------------------------------------------------------------------
# lookup / render
# ---------------------------------------------------------------------------


class TestLookup:
    CONTEXT = {"a": {"b": [{"c": 1}, {"c": None}]}, "s": "x"}

    def test_dotted_path(self):
        assert lookup(self.CONTEXT, ".s") == "x"

    def test_index_path(self):
        assert lookup(self.CONTEXT, ".a.b[0].c") == 1

    def test_present_null(self):
        assert lookup(self.CONTEXT, ".a.b[1].c") is None

    def test_root(self):
        assert lookup(self.CONTEXT, ".") is self.CONTEXT

    @pytest.mark.parametrize(
        "path", [".missing", ".a.b[5]", ".s.deeper", ".a b", ".a.b[0]c"]
    )
    def test_missing_paths(self, path):
        _, unresolved = render("{{ %s }}" % path, self.CONTEXT)
        assert unresolved == [path]


class TestRender:
    def test_scalar_rendering(self):
        assert render_value("x") == "x"
        assert render_value(True) == "true"
        assert render_value(None) == "null"
        assert render_value(3) == "3"
        assert render_value({"a": 1}) == '{"a": 1}'

    def test_multiple_expressions(self):
        text, unresolved = render(
            "{{.a}}/{{ .b }}?q={{ .c }}", {"a": "x", "b": 2, "c": False}
        )
        assert text == "x/2?q=false"
        assert unresolved == []

    def test_text_without_expressions_unchanged(self):
        assert render('{"plain": "json"}', {}) == ('{"plain": "json"}', [])


class TestBuildContext:
    def test_json_bodies_are_parsed(self):
        resource = make_resource(status=created_status())
        context = build_context(resource)
        assert context["payload"]["body"]["username"] == "john_doe"
        assert context["response"]["body"]["id"] == 1
        assert context["response"]["status_code"] == 201

    def test_text_bodies_stay_strings(self):
        resource = make_resource(
            payload={"base_url": TEST_BASE_URL, "body": "name=john"}
        )
        assert build_context(resource)["payload"]["body"] == "name=john"


# ---------------------------------------------------------------------------
# RequestResolver
# ---------------------------------------------------------------------------


class TestRequestResolver:
    def test_post_renders_whole_payload(self):
        request = RequestResolver().resolve(make_resource(), HttpMethod.POST)
        assert request.url == TEST_BASE_URL
        assert '"username": "john_doe"' in request.body
        assert request.headers == {"Content-Type": ["application/json"]}

    def test_put_uses_response_id(self):
        resource = make_resource(status=created_status())
        request = RequestResolver().resolve(resource, "put")
        assert request.url == f"{TEST_BASE_URL}/1"
        assert request.body == (
            '{"username": "john_doe", "email": "john.doe@example.com"}'
        )

    def test_missing_mapping(self):
        resource = make_resource(mappings=[{"method": "GET"}])
        with pytest.raises(MappingNotFoundError, match="PUT mapping"):
            RequestResolver().resolve(resource, HttpMethod.PUT)

    def test_unknown_method_is_missing_mapping(self):
        with pytest.raises(MappingNotFoundError, match="PATCH"):
            RequestResolver().resolve(make_resource(), "patch")

    def test_empty_url_defaults_to_base_url(self):
        resource = make_resource(mappings=[{"method": "GET"}])
        request = RequestResolver().resolve(resource, HttpMethod.GET)
        assert request.url == TEST_BASE_URL

    def test_unresolved_expression_is_invalid(self):
        # No response recorded yet, so .response.body.id cannot resolve
        resource = make_resource(status=RequestStatus())
        with pytest.raises(InvalidRequestError) as exc:
            RequestResolver().resolve(resource, HttpMethod.GET)
        assert exc.value.unresolved == [".response.body.id"]

    def test_empty_url_is_invalid(self):
        resource = make_resource(
            payload={"base_url": "", "body": ""},
            mappings=[{"method": "GET"}],
        )
        with pytest.raises(InvalidRequestError, match="URL is empty"):
            RequestResolver().resolve(resource, HttpMethod.GET)

    def test_mapping_headers_override_defaults(self):
        resource = make_resource(
            headers={
                "Authorization": ["Bearer token"],
                "Accept": ["text/plain"],
            },
            mappings=[
                {
                    "method": "GET",
                    "headers": {
                        "Accept": ["application/json"],
                        "X-User": ["{{ .payload.body.username }}"],
                    },
                }
            ],
        )
        request = RequestResolver().resolve(resource, HttpMethod.GET)
        assert request.headers == {
            "Authorization": ["Bearer token"],
            "Accept": ["application/json"],
            "X-User": ["john_doe"],
        }


class TestDeeplyNestedBodies:
    def test_deep_response_body_stays_a_string(self):
        body = "[" * 100000 + "]" * 100000
        resource = make_resource(status=created_status(body=body))
        assert build_context(resource)["response"]["body"] == body

    def test_mappings_not_using_the_body_still_resolve(self):
        body = '{"id":' * 2000 + "1" + "}" * 2000
        resource = make_resource(status=created_status(body=body))
        request = RequestResolver().resolve(resource, HttpMethod.POST)
        assert request.url == TEST_BASE_URL

    def test_body_paths_are_unresolved(self):
        body = '{"id":' * 2000 + "1" + "}" * 2000
        resource = make_resource(status=created_status(body=body))
        with pytest.raises(InvalidRequestError, match=r"\.response\.body\.id"):
            RequestResolver().resolve(resource, HttpMethod.GET)
