"""Load endpoint sources and the Jinja2 templates used to emit code.

Reads spec/*.endpoint by default; templates live next to this module.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import jinja2

SPEC_DIR = Path(__file__).parent.parent / "spec"
TEMPLATE_DIR = Path(__file__).parent / "templates"
SOURCE_SUFFIX = ".endpoint"


def load_source(path: Path) -> str:
    """Load one endpoint source from disk."""
    with open(path, encoding="utf-8") as f:
        return f.read()


def discover_sources(spec_dir: Path | None = None) -> list[Path]:
    """Find every endpoint source under the spec directory, sorted by path."""
    root = spec_dir or SPEC_DIR
    return sorted(root.rglob(f"*{SOURCE_SUFFIX}"))


def _docstring(text: str) -> str:
    """Escape text for use inside a triple-quoted docstring."""
    return text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


@lru_cache(maxsize=None)
def template_environment() -> jinja2.Environment:
    """Shared environment for all code templates."""
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["pyrepr"] = repr
    env.filters["docstring"] = _docstring
    return env


def render_template(name: str, **context: object) -> str:
    return template_environment().get_template(name).render(**context)
