"""Name conversions used when lowering an endpoint source to Python.

Examples:
  AccessToken                 -> ACCESS_TOKEN   (enum member)
  None                        -> NONE
  CONTENT_TYPE                -> content-type   (header name)
  /v3/rooms/:room_id/state    -> ["room_id"]    (path variables)
  get-room-state.endpoint     -> get_room_state (module name)
"""

from __future__ import annotations

import re

# Printable ASCII minus space and the characters that start a query or fragment
_PATH_CHARS = re.compile(r"^/[!-~]*$")
_PATH_FORBIDDEN = set("?# ")


def _camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()


def _sanitize_segment(segment: str) -> str:
    """Sanitize a name for use in a Python identifier."""
    name = _camel_to_snake(segment)
    name = re.sub(r"[.\-]", "_", name)
    name = re.sub(r"[^a-z0-9_]", "", name)
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


def enum_member(symbol: str) -> str:
    """Convert a source symbol to the runtime enum member name.

    Returns a name like 'ACCESS_TOKEN' for 'AccessToken' and 'GET' for 'GET'.
    """
    return _camel_to_snake(symbol).upper()


def header_name(name: str) -> str:
    """Convert a header constant like CONTENT_TYPE to 'content-type'.

    Anything that already looks like a header (contains '-') is only lowercased.
    """
    if "-" in name:
        return name.lower()
    return name.lower().replace("_", "-")


def is_valid_endpoint_path(path: str) -> bool:
    """Paths start with '/' and contain printable ASCII without spaces, '?' or '#'."""
    if not _PATH_CHARS.match(path):
        return False
    return not any(c in _PATH_FORBIDDEN for c in path)


def path_variables(path: str) -> list[str]:
    """Extract the `:name` segments of an endpoint path, in order."""
    return [p[1:] for p in path.split("/") if p.startswith(":")]


def module_name(stem: str) -> str:
    """Build a Python module name from a source file stem."""
    name = _sanitize_segment(stem)
    if not name:
        return "endpoint"
    if name[0].isdigit():
        name = f"endpoint_{name}"
    return name
