"""Syntax tree for `.endpoint` sources.

Nodes are frozen so two parses of the same source compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    line: int
    col: int


@dataclass(frozen=True)
class Literal:
    """A scalar value as written in the source.

    kind is one of "string", "number", "bool", "ident".
    """
    kind: str
    value: str | bool
    span: Span

    def render(self) -> str:
        """Python source text for this literal."""
        if self.kind == "string":
            return repr(self.value)
        if self.kind == "bool":
            return "True" if self.value else "False"
        return str(self.value)


@dataclass(frozen=True)
class AttributeArg:
    key: str | None
    value: Literal

    def render(self) -> str:
        if self.key is None:
            return self.value.render()
        return f"{self.key}={self.value.render()}"


@dataclass(frozen=True)
class Attribute:
    """`@name` or `@name(arg, key=value)` attached to a section or field."""
    name: str
    args: tuple[AttributeArg, ...]
    span: Span
    has_parens: bool = False

    def render(self) -> str:
        if not self.has_parens:
            return f"@{self.name}"
        return f"@{self.name}({', '.join(arg.render() for arg in self.args)})"


@dataclass(frozen=True)
class TypeRef:
    """
    A type expression like:
      str
      my_api.types.RoomId
      dict[str, list[int]]
      str | None
    `members` is non-empty only for unions.
    """
    name: str
    span: Span
    args: tuple[TypeRef, ...] = ()
    members: tuple[TypeRef, ...] = ()

    def render(self) -> str:
        if self.members:
            return " | ".join(m.render() for m in self.members)
        if self.args:
            return f"{self.name}[{', '.join(a.render() for a in self.args)}]"
        return self.name

    @property
    def is_optional(self) -> bool:
        if self.members:
            return any(m.name == "None" for m in self.members)
        return self.name in ("Optional", "typing.Optional")

    @property
    def module(self) -> str | None:
        """Module part of a dotted, non-generic name (`a.b.C` -> `a.b`)."""
        if self.members or self.args or "." not in self.name:
            return None
        return self.name.rsplit(".", 1)[0]

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class MetadataValue:
    key: str
    value: Literal
    span: Span


@dataclass(frozen=True)
class Metadata:
    """
    The `metadata` section. Every field is optional here; the descriptor
    builder enforces which ones are mandatory.
    """
    span: Span
    description: MetadataValue | None = None
    method: MetadataValue | None = None
    name: MetadataValue | None = None
    unstable_path: MetadataValue | None = None
    r0_path: MetadataValue | None = None
    stable_path: MetadataValue | None = None
    added: MetadataValue | None = None
    deprecated: MetadataValue | None = None
    removed: MetadataValue | None = None
    rate_limited: MetadataValue | None = None
    authentication: MetadataValue | None = None

    def paths(self) -> tuple[tuple[str, MetadataValue], ...]:
        """Present path variants in unstable, r0, stable order."""
        found = []
        for key in ("unstable_path", "r0_path", "stable_path"):
            value = getattr(self, key)
            if value is not None:
                found.append((key, value))
        return tuple(found)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: TypeRef
    span: Span
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class RequestSpec:
    span: Span
    fields: tuple[FieldSpec, ...] = ()
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class ResponseSpec:
    span: Span
    fields: tuple[FieldSpec, ...] = ()
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class EndpointSpec:
    metadata: Metadata
    request: RequestSpec | None = None
    response: ResponseSpec | None = None
    error_type: TypeRef | None = None
