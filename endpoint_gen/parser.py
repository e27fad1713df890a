"""Recursive-descent parser for `.endpoint` sources.

The surface syntax has four keyed sections that must appear in order:

    metadata: { ... }          # mandatory
    @attr request: { ... }     # optional
    @attr response: { ... }    # optional
    error: some.module.Error   # optional

Attributes written before `request` belong to the request section. If no
`request` follows, they are kept for `response`; if no `response` follows
either there is nothing left to attach them to and parsing fails.
"""

from __future__ import annotations

from typing import Sequence

from .ast_nodes import (
    Attribute,
    AttributeArg,
    EndpointSpec,
    FieldSpec,
    Literal,
    Metadata,
    MetadataValue,
    RequestSpec,
    ResponseSpec,
    TypeRef,
)
from .errors import AttributesWithoutResponseError, SpecSyntaxError
from .tokenizer import Token, TokType, tokenize

SECTION_KEYWORDS = ("metadata", "request", "response", "error")

# metadata key -> expected value kind
METADATA_FIELDS: dict[str, str] = {
    "description": "string",
    "method": "ident",
    "name": "string",
    "unstable_path": "string",
    "r0_path": "string",
    "stable_path": "string",
    "added": "version",
    "deprecated": "version",
    "removed": "version",
    "rate_limited": "bool",
    "authentication": "ident",
}

_BOOLS = {"true": True, "false": False, "True": True, "False": False}


class Parser:
    def __init__(self, tokens: Sequence[Token]):
        self.tokens = list(tokens)
        self.pos = 0

    # basic utilities
    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def peek_keyword(self, keyword: str) -> bool:
        tok = self.peek()
        return tok.type is TokType.IDENT and tok.value == keyword

    def eat(self, ttype: TokType, expected: str) -> Token:
        tok = self.peek()
        if tok.type is not ttype:
            raise SpecSyntaxError(f"expected {expected}, found {tok.describe()}", tok.span)
        self.pos += 1
        return tok

    def maybe_eat(self, ttype: TokType) -> Token | None:
        if self.peek().type is ttype:
            self.pos += 1
            return self.tokens[self.pos - 1]
        return None

    def eat_keyword(self, keyword: str) -> Token:
        if not self.peek_keyword(keyword):
            tok = self.peek()
            raise SpecSyntaxError(f"expected `{keyword}`, found {tok.describe()}", tok.span)
        return self.eat(TokType.IDENT, f"`{keyword}`")

    # top level
    def parse_endpoint(self) -> EndpointSpec:
        metadata = self.parse_metadata()

        req_attrs = self.parse_attributes()
        if self.peek_keyword("request"):
            request: RequestSpec | None = self.parse_request(req_attrs)
            attributes = self.parse_attributes()
        else:
            # There was no `request` section so the attributes are for `response`
            request = None
            attributes = req_attrs

        if self.peek_keyword("response"):
            response: ResponseSpec | None = self.parse_response(attributes)
        elif attributes:
            raise AttributesWithoutResponseError(
                "attributes are not supported on the error type",
                attributes[0].span,
            )
        else:
            response = None

        error_type = None
        if self.peek_keyword("error"):
            self.eat_keyword("error")
            self.eat(TokType.COLON, "`:` after `error`")
            error_type = self.parse_type()

        tok = self.peek()
        if tok.type is not TokType.EOF:
            if tok.type is TokType.IDENT and tok.value in SECTION_KEYWORDS:
                raise SpecSyntaxError(
                    f"unexpected `{tok.value}` section; sections may appear at most once, "
                    "in the order metadata, request, response, error",
                    tok.span,
                )
            raise SpecSyntaxError(f"unexpected {tok.describe()} after the last section", tok.span)

        return EndpointSpec(
            metadata=metadata,
            request=request,
            response=response,
            error_type=error_type,
        )

    # metadata
    def parse_metadata(self) -> Metadata:
        kw = self.eat_keyword("metadata")
        self.eat(TokType.COLON, "`:` after `metadata`")
        self.eat(TokType.LBRACE, "`{` to open the metadata section")

        values: dict[str, MetadataValue] = {}
        while self.peek().type is not TokType.RBRACE:
            key_tok = self.eat(TokType.IDENT, "a metadata field name")
            key = key_tok.value
            if key not in METADATA_FIELDS:
                raise SpecSyntaxError(f"unknown metadata field `{key}`", key_tok.span)
            if key in values:
                raise SpecSyntaxError(f"duplicate metadata field `{key}`", key_tok.span)
            self.eat(TokType.COLON, f"`:` after metadata field `{key}`")
            values[key] = MetadataValue(key, self.parse_metadata_value(key), key_tok.span)

            if not self.maybe_eat(TokType.COMMA):
                break
        self.eat(TokType.RBRACE, "`,` or `}` in the metadata section")

        return Metadata(span=kw.span, **values)

    def parse_metadata_value(self, key: str) -> Literal:
        kind = METADATA_FIELDS[key]
        tok = self.peek()

        if kind == "string":
            self.eat(TokType.STRING, f"a string literal for `{key}`")
            return Literal("string", tok.value, tok.span)

        if kind == "ident":
            self.eat(TokType.IDENT, f"an identifier for `{key}`")
            return Literal("ident", tok.value, tok.span)

        if kind == "bool":
            if tok.type is not TokType.IDENT or tok.value not in _BOOLS:
                raise SpecSyntaxError(
                    f"expected `true` or `false` for `{key}`, found {tok.describe()}", tok.span
                )
            self.pos += 1
            return Literal("bool", _BOOLS[tok.value], tok.span)

        # version
        if tok.type is not TokType.NUMBER or "." not in tok.value:
            raise SpecSyntaxError(
                f"expected a version like `1.1` for `{key}`, found {tok.describe()}", tok.span
            )
        self.pos += 1
        return Literal("number", tok.value, tok.span)

    # attributes
    def parse_attributes(self) -> list[Attribute]:
        attrs: list[Attribute] = []
        while self.peek().type is TokType.AT:
            at = self.eat(TokType.AT, "`@`")
            name = self.parse_dotted_name("an attribute name")
            args: list[AttributeArg] = []
            has_parens = False
            if self.maybe_eat(TokType.LPAREN):
                has_parens = True
                while self.peek().type is not TokType.RPAREN:
                    args.append(self.parse_attribute_arg())
                    if not self.maybe_eat(TokType.COMMA):
                        break
                self.eat(TokType.RPAREN, f"`,` or `)` in attribute `@{name}`")
            attrs.append(Attribute(name, tuple(args), at.span, has_parens))
        return attrs

    def parse_attribute_arg(self) -> AttributeArg:
        key = None
        if self.peek().type is TokType.IDENT and self.peek(1).type is TokType.EQUALS:
            key = self.eat(TokType.IDENT, "an argument name").value
            self.eat(TokType.EQUALS, "`=`")
        return AttributeArg(key, self.parse_literal())

    def parse_literal(self) -> Literal:
        tok = self.peek()
        if tok.type is TokType.STRING:
            self.pos += 1
            return Literal("string", tok.value, tok.span)
        if tok.type is TokType.NUMBER:
            self.pos += 1
            return Literal("number", tok.value, tok.span)
        if tok.type is TokType.IDENT and tok.value in _BOOLS:
            self.pos += 1
            return Literal("bool", _BOOLS[tok.value], tok.span)
        if tok.type is TokType.IDENT:
            return Literal("ident", self.parse_dotted_name("a value"), tok.span)
        raise SpecSyntaxError(f"expected a value, found {tok.describe()}", tok.span)

    def parse_dotted_name(self, expected: str) -> str:
        parts = [self.eat(TokType.IDENT, expected).value]
        while self.maybe_eat(TokType.DOT):
            parts.append(self.eat(TokType.IDENT, f"a name after `{'.'.join(parts)}.`").value)
        return ".".join(parts)

    # request / response
    def parse_request(self, attributes: Sequence[Attribute]) -> RequestSpec:
        kw = self.eat_keyword("request")
        self.eat(TokType.COLON, "`:` after `request`")
        return RequestSpec(span=kw.span, fields=self.parse_fields("request"), attributes=tuple(attributes))

    def parse_response(self, attributes: Sequence[Attribute]) -> ResponseSpec:
        kw = self.eat_keyword("response")
        self.eat(TokType.COLON, "`:` after `response`")
        return ResponseSpec(span=kw.span, fields=self.parse_fields("response"), attributes=tuple(attributes))

    def parse_fields(self, section: str) -> tuple:
        self.eat(TokType.LBRACE, f"`{{` to open the {section} section")
        fields: list[FieldSpec] = []
        seen = set()
        while self.peek().type is not TokType.RBRACE:
            field = self.parse_field(section)
            if field.name in seen:
                raise SpecSyntaxError(f"duplicate field `{field.name}` in {section}", field.span)
            seen.add(field.name)
            fields.append(field)
            if not self.maybe_eat(TokType.COMMA):
                tok = self.peek()
                if tok.type is not TokType.RBRACE:
                    raise SpecSyntaxError(
                        f"expected `,` or `}}` after field `{field.name}`, found {tok.describe()}",
                        tok.span,
                    )
                break
        self.eat(TokType.RBRACE, f"`}}` to close the {section} section")
        return tuple(fields)

    def parse_field(self, section: str) -> FieldSpec:
        attributes = self.parse_attributes()
        tok = self.peek()
        if tok.type is not TokType.IDENT:
            raise SpecSyntaxError(f"expected a field name in {section}, found {tok.describe()}", tok.span)
        self.pos += 1
        if self.peek().type is not TokType.COLON:
            raise SpecSyntaxError(
                f"expected `:` after field name `{tok.value}`, found {self.peek().describe()}",
                self.peek().span,
            )
        self.pos += 1
        try:
            field_type = self.parse_type()
        except SpecSyntaxError as exc:
            raise SpecSyntaxError(f"invalid type for field `{tok.value}`: {exc.message}", exc.span) from exc
        return FieldSpec(name=tok.value, type=field_type, span=tok.span, attributes=tuple(attributes))

    # types
    def parse_type(self) -> TypeRef:
        first = self.parse_simple_type()
        if self.peek().type is not TokType.PIPE:
            return first
        members = [first]
        while self.maybe_eat(TokType.PIPE):
            members.append(self.parse_simple_type())
        return TypeRef(name="|", span=first.span, members=tuple(members))

    def parse_simple_type(self) -> TypeRef:
        start = self.peek()
        name = self.parse_dotted_name("a type")
        args: list[TypeRef] = []
        if self.maybe_eat(TokType.LBRACK):
            while True:
                args.append(self.parse_type())
                if not self.maybe_eat(TokType.COMMA):
                    break
            self.eat(TokType.RBRACK, f"`,` or `]` in the arguments of `{name}`")
        return TypeRef(name=name, span=start.span, args=tuple(args))


def parse_endpoint(source: str | Sequence[Token]) -> EndpointSpec:
    """Parse endpoint source text (or an already tokenized source)."""
    tokens = tokenize(source) if isinstance(source, str) else source
    return Parser(tokens).parse_endpoint()
