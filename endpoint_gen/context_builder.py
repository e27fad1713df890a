"""Build the Jinja2 template context for one parsed endpoint.

Lowers the metadata section to its descriptor, resolves the error type and
renders the request and response bindings, in that order.
"""

from __future__ import annotations

from typing import Any

from .ast_nodes import EndpointSpec, TypeRef
from .bindings import RequestBinding, ResponseBinding, check_path_fields
from .metadata import build_descriptor

RUNTIME_MODULE = "endpoint_runtime"

# Error type used when the source has no `error` section
DEFAULT_ERROR_TYPE = "MatrixError"


def resolve_error_type(error_type: TypeRef | None) -> dict[str, Any]:
    """Work out how the generated module names and imports the error type.

    `pkg.errors.FooError` is imported with `from pkg.errors import FooError`;
    any other type expression is referenced exactly as written.
    """
    if error_type is None:
        return {"error_type": DEFAULT_ERROR_TYPE, "error_import": None, "default_error": True}

    module = error_type.module
    if module is None:
        return {"error_type": error_type.render(), "error_import": None, "default_error": False}

    return {
        "error_type": error_type.short_name,
        "error_import": f"from {module} import {error_type.short_name}",
        "default_error": False,
    }


def build_context(
    spec: EndpointSpec,
    source_name: str = "<endpoint>",
    runtime: str = RUNTIME_MODULE,
) -> dict[str, Any]:
    """Build the full template context for module.py.j2."""
    descriptor = build_descriptor(spec.metadata)
    error = resolve_error_type(spec.error_type)

    if spec.request is None:
        # without a request there is nothing to fill path variables from
        check_path_fields(descriptor, [], spec.metadata.span)

    request = RequestBinding(spec.request).emit(descriptor, error["error_type"])
    response = ResponseBinding(spec.response).emit(descriptor, error["error_type"])

    return {
        "source_name": source_name,
        "runtime": runtime,
        "descriptor": descriptor,
        "request": request,
        "response": response,
        **error,
    }
