"""Emit the Request and Response classes for an endpoint.

Each binding renders one dataclass holding the section's fields, plus the
client half and the server half of its HTTP conversion:

  Request.try_into_http_request    client  (build outgoing httpx.Request)
  Request.try_from_http_request    server  (parse incoming httpx.Request)
  Response.try_from_http_response  client  (parse incoming httpx.Response)
  Response.try_into_http_response  server  (build outgoing httpx.Response)

Field attributes select where a field travels:
  @path, @query, @query_map, @header(NAME), @body (default), @raw_body
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from .ast_nodes import Attribute, FieldSpec, RequestSpec, ResponseSpec, Span
from .errors import SpecSemanticError
from .loader import render_template
from .metadata import MetadataDescriptor
from .naming import header_name, path_variables

FIELD_KINDS = ("path", "query", "query_map", "header", "body", "raw_body")

# Field kinds that only make sense on the request side
_REQUEST_ONLY_KINDS = {"path", "query", "query_map"}


class EmitsBinding(Protocol):
    """Code emitter for one half-pair of HTTP bindings."""

    def emit_client(self, metadata: MetadataDescriptor, error_type: str) -> str | None:
        ...

    def emit_server(self, metadata: MetadataDescriptor, error_type: str) -> str | None:
        ...

    def emit(self, metadata: MetadataDescriptor, error_type: str) -> str:
        ...


@dataclass(frozen=True)
class BindingField:
    name: str
    annotation: str
    kind: str
    span: Span
    header: str | None = None
    optional: bool = False
    is_list: bool = False


def _header_from_attribute(attr: Attribute, field: FieldSpec) -> str:
    if len(attr.args) != 1 or attr.args[0].key is not None:
        raise SpecSemanticError(
            f"`@header` on field `{field.name}` takes exactly one header name", attr.span
        )
    value = attr.args[0].value
    if value.kind not in ("ident", "string"):
        raise SpecSemanticError(
            f"`@header` on field `{field.name}` expects a header constant or string", value.span
        )
    return header_name(str(value.value))


def classify_field(field: FieldSpec, section: str) -> BindingField:
    """Resolve a field's attributes to its location in the HTTP message."""
    if keyword.iskeyword(field.name):
        raise SpecSemanticError(f"field name `{field.name}` is a Python keyword", field.span)

    kind = None
    header = None
    for attr in field.attributes:
        if attr.name not in FIELD_KINDS:
            raise SpecSemanticError(
                f"unknown attribute `@{attr.name}` on field `{field.name}`", attr.span
            )
        if kind is not None:
            raise SpecSemanticError(
                f"field `{field.name}` can only have one of "
                + ", ".join(f"@{k}" for k in FIELD_KINDS),
                attr.span,
            )
        if section == "response" and attr.name in _REQUEST_ONLY_KINDS:
            raise SpecSemanticError(
                f"`@{attr.name}` is not supported on response fields", attr.span
            )
        if attr.name == "header":
            header = _header_from_attribute(attr, field)
        elif attr.has_parens:
            raise SpecSemanticError(f"`@{attr.name}` does not take arguments", attr.span)
        kind = attr.name

    annotation = field.type.render()
    return BindingField(
        name=field.name,
        annotation=annotation,
        kind=kind or "body",
        span=field.span,
        header=header,
        optional=field.type.is_optional,
        is_list=field.type.name in ("list", "typing.List", "List"),
    )


def _docstring(summary: str, description: str) -> str:
    if not description:
        return summary
    return f"{summary}\n\n{description}"


class _Binding:
    section = ""
    class_name = ""
    summary = ""
    client_template = ""
    server_template = ""

    def __init__(self, spec: RequestSpec | ResponseSpec | None) -> None:
        self.spec = spec
        self.fields: list[BindingField] = []
        if spec is not None:
            self.fields = [classify_field(f, self.section) for f in spec.fields]

    def of_kind(self, kind: str) -> list[BindingField]:
        return [f for f in self.fields if f.kind == kind]

    def validate(self, metadata: MetadataDescriptor) -> None:
        raw = self.of_kind("raw_body")
        if len(raw) > 1:
            raise SpecSemanticError(
                f"{self.section} can only have one @raw_body field", raw[1].span
            )
        body = self.of_kind("body")
        if raw and body:
            raise SpecSemanticError(
                f"{self.section} cannot have both a @raw_body field and body fields", raw[0].span
            )

    def context(self, metadata: MetadataDescriptor, error_type: str) -> dict[str, Any]:
        raw = self.of_kind("raw_body")
        query_map = self.of_kind("query_map")
        return {
            "class_name": self.class_name,
            "endpoint_name": metadata.endpoint_name,
            "auth": metadata.auth_symbol,
            "error_type": error_type,
            "fields": self.fields,
            "path_fields": self.of_kind("path"),
            "query_fields": self.of_kind("query"),
            "query_map_field": query_map[0] if query_map else None,
            "header_fields": self.of_kind("header"),
            "body_fields": self.of_kind("body"),
            "raw_body_field": raw[0] if raw else None,
        }

    def emit_client(self, metadata: MetadataDescriptor, error_type: str) -> str | None:
        if self.spec is None:
            return None
        return render_template(self.client_template, **self.context(metadata, error_type)).rstrip()

    def emit_server(self, metadata: MetadataDescriptor, error_type: str) -> str | None:
        if self.spec is None:
            return None
        return render_template(self.server_template, **self.context(metadata, error_type)).rstrip()

    def emit(self, metadata: MetadataDescriptor, error_type: str) -> str:
        """Render the whole class, or nothing when the section is absent."""
        if self.spec is None:
            return ""
        self.validate(metadata)
        summary = self.summary.format(name=metadata.endpoint_name)
        return render_template(
            "binding.py.j2",
            class_name=self.class_name,
            decorators=[a.render() for a in self.spec.attributes],
            doc=_docstring(summary, metadata.description_text),
            fields=self.fields,
            client=self.emit_client(metadata, error_type),
            server=self.emit_server(metadata, error_type),
        ).rstrip()


class RequestBinding(_Binding):
    section = "request"
    class_name = "Request"
    summary = "Data for a request to the `{name}` API endpoint."
    client_template = "request_client.py.j2"
    server_template = "request_server.py.j2"

    def validate(self, metadata: MetadataDescriptor) -> None:
        super().validate(metadata)

        query_map = self.of_kind("query_map")
        if len(query_map) > 1:
            raise SpecSemanticError("request can only have one @query_map field", query_map[1].span)
        if query_map and self.of_kind("query"):
            raise SpecSemanticError(
                "request cannot have both a @query_map field and @query fields", query_map[0].span
            )

        if metadata.method_symbol == "GET" and (self.of_kind("body") or self.of_kind("raw_body")):
            field = (self.of_kind("body") or self.of_kind("raw_body"))[0]
            raise SpecSemanticError("GET endpoints can't have body fields", field.span)

        check_path_fields(metadata, [f.name for f in self.of_kind("path")], self.spec.span)


class ResponseBinding(_Binding):
    section = "response"
    class_name = "Response"
    summary = "Data in the response from the `{name}` API endpoint."
    client_template = "response_client.py.j2"
    server_template = "response_server.py.j2"


def check_path_fields(metadata: MetadataDescriptor, names: Sequence[str], span: Span) -> None:
    """Every path variant must name exactly the @path fields, in order."""
    for path in metadata.paths:
        variables = path_variables(path)
        if variables != list(names):
            raise SpecSemanticError(
                f"path `{path}` has variables [{', '.join(variables)}] but the @path fields "
                f"are [{', '.join(names)}]",
                span,
            )
