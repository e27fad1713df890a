"""Tokenizer for `.endpoint` sources.

Identifiers and numbers are ASCII only, so every name that reaches the
emitted code is a valid Python identifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from .ast_nodes import Span
from .errors import SpecSyntaxError


class TokType(Enum):
    IDENT   = auto()
    STRING  = auto()
    NUMBER  = auto()
    LBRACE  = auto()   # {
    RBRACE  = auto()   # }
    LBRACK  = auto()   # [
    RBRACK  = auto()   # ]
    LPAREN  = auto()   # (
    RPAREN  = auto()   # )
    COLON   = auto()   # :
    COMMA   = auto()   # ,
    AT      = auto()   # @
    DOT     = auto()   # .
    PIPE    = auto()   # |
    EQUALS  = auto()   # =
    EOF     = auto()


_PUNCTUATION = {
    "{": TokType.LBRACE,
    "}": TokType.RBRACE,
    "[": TokType.LBRACK,
    "]": TokType.RBRACK,
    "(": TokType.LPAREN,
    ")": TokType.RPAREN,
    ":": TokType.COLON,
    ",": TokType.COMMA,
    "@": TokType.AT,
    ".": TokType.DOT,
    "|": TokType.PIPE,
    "=": TokType.EQUALS,
}

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}
_DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class Token:
    type: TokType
    value: str
    line: int
    col: int

    @property
    def span(self) -> Span:
        return Span(self.line, self.col)

    def describe(self) -> str:
        if self.type is TokType.EOF:
            return "end of input"
        if self.type is TokType.STRING:
            return f"string {self.value!r}"
        return f"`{self.value}`"


def tokenize(text: str) -> list[Token]:
    """
    Split an endpoint source into tokens.

    Whitespace and `# comments` are dropped, so the parser only ever sees
    meaningful tokens followed by a single EOF.
    """
    tokens: list[Token] = []
    i = 0
    line = 1
    col = 1
    n = len(text)

    while i < n:
        ch = text[i]

        if ch == "\n":
            i += 1
            line += 1
            col = 1
            continue

        if ch in " \t\r":
            i += 1
            col += 1
            continue

        if ch == "#":
            while i < n and text[i] != "\n":
                i += 1
            continue

        if ch in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[ch], ch, line, col))
            i += 1
            col += 1
            continue

        if ch == '"':
            start_line, start_col = line, col
            i += 1
            col += 1
            buf: list[str] = []
            while True:
                if i >= n or text[i] == "\n":
                    raise SpecSyntaxError("unterminated string literal", Span(start_line, start_col))
                c = text[i]
                if c == '"':
                    i += 1
                    col += 1
                    break
                if c == "\\":
                    nxt = text[i + 1] if i + 1 < n else ""
                    if nxt not in _ESCAPES:
                        raise SpecSyntaxError(f"unknown escape sequence `\\{nxt}`", Span(line, col))
                    buf.append(_ESCAPES[nxt])
                    i += 2
                    col += 2
                    continue
                buf.append(c)
                i += 1
                col += 1
            tokens.append(Token(TokType.STRING, "".join(buf), start_line, start_col))
            continue

        if ch.isascii() and (ch.isalpha() or ch == "_"):
            start = i
            while i < n and text[i].isascii() and (text[i].isalnum() or text[i] == "_"):
                i += 1
            tokens.append(Token(TokType.IDENT, text[start:i], line, col))
            col += i - start
            continue

        if ch in _DIGITS:
            start = i
            while i < n and text[i] in _DIGITS:
                i += 1
            # a fractional part only when digits follow the dot
            if i + 1 < n and text[i] == "." and text[i + 1] in _DIGITS:
                i += 1
                while i < n and text[i] in _DIGITS:
                    i += 1
            tokens.append(Token(TokType.NUMBER, text[start:i], line, col))
            col += i - start
            continue

        raise SpecSyntaxError(f"unexpected character {ch!r}", Span(line, col))

    tokens.append(Token(TokType.EOF, "", line, col))
    return tokens
