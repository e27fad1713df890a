"""Validate the metadata section and lower it to an emit-ready descriptor.

Every value in the descriptor is Python source text, ready to be embedded in
the generated `METADATA = Metadata(...)` constant. Optional values that were
not given are lowered to `None`, never to an empty string.

Lifecycle ordering (added <= deprecated <= removed) is not checked;
any combination of markers is accepted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .ast_nodes import Metadata, MetadataValue
from .errors import SpecSemanticError
from .naming import enum_member, is_valid_endpoint_path

MANDATORY_FIELDS = ("description", "method", "name", "rate_limited", "authentication")

HTTP_METHODS = frozenset(
    {"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "CONNECT", "TRACE"}
)

AUTH_SCHEMES = ("None", "AccessToken", "ServerSignatures", "QueryOnlyAccessToken")

# one version component: ASCII digits, no leading zero
_VERSION_PART = re.compile(r"^(0|[1-9][0-9]*)\Z")


@dataclass(frozen=True)
class MetadataDescriptor:
    """Source literals for each field of the generated metadata constant."""

    description: str
    method: str
    name: str
    unstable_path: str
    r0_path: str
    stable_path: str
    added: str
    deprecated: str
    removed: str
    rate_limited: str
    authentication: str

    # raw values kept for the request/response bindings
    method_symbol: str = ""
    auth_symbol: str = ""
    endpoint_name: str = ""
    description_text: str = ""
    paths: tuple[str, ...] = ()

    def fields(self) -> list[tuple[str, str]]:
        """(field name, source literal) pairs in declaration order."""
        names = (
            "description", "method", "name",
            "unstable_path", "r0_path", "stable_path",
            "added", "deprecated", "removed",
            "rate_limited", "authentication",
        )
        return [(n, getattr(self, n)) for n in names]


def _optional_literal(value: MetadataValue | None) -> str:
    """Render a present value, or the explicit absent marker."""
    if value is None:
        return "None"
    return value.value.render()


def _version_literal(value: MetadataValue | None) -> str:
    if value is None:
        return "None"
    text = str(value.value.value)
    major, _, minor = text.partition(".")
    if not _VERSION_PART.match(major) or not _VERSION_PART.match(minor):
        raise SpecSemanticError(
            f"invalid version `{text}` for `{value.key}`: expected `major.minor` "
            "with no leading zeros",
            value.value.span,
        )
    return f"Version({int(major)}, {int(minor)})"


def build_descriptor(metadata: Metadata) -> MetadataDescriptor:
    """Check mandatory fields and field values, then build the descriptor."""
    for key in MANDATORY_FIELDS:
        if getattr(metadata, key) is None:
            raise SpecSemanticError(f"missing field `{key}` in metadata", metadata.span)

    paths = metadata.paths()
    if not paths:
        raise SpecSemanticError("need to specify at least one path", metadata.span)
    for _, value in paths:
        path = str(value.value.value)
        if not is_valid_endpoint_path(path):
            raise SpecSemanticError(
                f"invalid path `{path}`: paths must start with `/` and contain only "
                "printable ASCII without spaces, `?` or `#`",
                value.value.span,
            )

    method = str(metadata.method.value.value)
    if method not in HTTP_METHODS:
        raise SpecSemanticError(
            f"unknown HTTP method `{method}`, expected one of {', '.join(sorted(HTTP_METHODS))}",
            metadata.method.value.span,
        )

    auth = str(metadata.authentication.value.value)
    if auth not in AUTH_SCHEMES:
        raise SpecSemanticError(
            f"unknown authentication scheme `{auth}`, expected one of {', '.join(AUTH_SCHEMES)}",
            metadata.authentication.value.span,
        )

    return MetadataDescriptor(
        description=metadata.description.value.render(),
        method=f"HttpMethod.{method}",
        name=metadata.name.value.render(),
        unstable_path=_optional_literal(metadata.unstable_path),
        r0_path=_optional_literal(metadata.r0_path),
        stable_path=_optional_literal(metadata.stable_path),
        added=_version_literal(metadata.added),
        deprecated=_version_literal(metadata.deprecated),
        removed=_version_literal(metadata.removed),
        rate_limited=metadata.rate_limited.value.render(),
        authentication=f"AuthScheme.{enum_member(auth)}",
        method_symbol=method,
        auth_symbol=auth,
        endpoint_name=str(metadata.name.value.value),
        description_text=str(metadata.description.value.value),
        paths=tuple(str(value.value.value) for _, value in paths),
    )
