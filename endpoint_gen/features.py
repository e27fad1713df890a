"""Check that the invoking project declares the `client` and `server` extras.

Generated bindings are gated on these two capabilities, so a project that
compiles endpoints must declare both in `[project.optional-dependencies]`
of its pyproject.toml. The project root comes from ENDPOINT_GEN_PROJECT_DIR.

The result is computed once per process and reused; edits to the manifest
made after the first check are not observed.
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from .errors import EndpointGenError, ManifestFormatError, ManifestIOError, MissingCapabilityError

PROJECT_DIR_ENV = "ENDPOINT_GEN_PROJECT_DIR"
MANIFEST_NAME = "pyproject.toml"

# capability -> bindings it enables
REQUIRED_CAPABILITIES: dict[str, str] = {
    "client": "`Request.try_into_http_request` and `Response.try_from_http_response`",
    "server": "`Request.try_from_http_request` and `Response.try_into_http_response`",
}


def _declared_extras(manifest: dict[str, Any]) -> dict[str, Any]:
    """Return [project.optional-dependencies], which may be absent."""
    project = manifest.get("project", {})
    if not isinstance(project, dict):
        raise ManifestFormatError(f"Failed to parse {MANIFEST_NAME}: `project` is not a table")
    extras = project.get("optional-dependencies", {})
    if not isinstance(extras, dict):
        raise ManifestFormatError(
            f"Failed to parse {MANIFEST_NAME}: `project.optional-dependencies` is not a table"
        )
    return extras


def check_manifest(project_dir: Path | str | None = None) -> None:
    """Raise if the project manifest is missing, malformed or lacks a capability."""
    if project_dir is None:
        project_dir = os.environ.get(PROJECT_DIR_ENV)
        if project_dir is None:
            raise ManifestIOError(f"Failed to read {PROJECT_DIR_ENV}")

    manifest_file = Path(project_dir) / MANIFEST_NAME
    try:
        manifest_bytes = manifest_file.read_bytes()
    except OSError as exc:
        raise ManifestIOError(f"Failed to read {MANIFEST_NAME}") from exc

    try:
        manifest = tomllib.loads(manifest_bytes.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ManifestFormatError(f"Failed to parse {MANIFEST_NAME}") from exc

    extras = _declared_extras(manifest)
    for capability, enables in REQUIRED_CAPABILITIES.items():
        if capability not in extras:
            raise MissingCapabilityError(capability, enables)


class CapabilityCheck:
    """Run `check_manifest` at most once and remember the outcome.

    Concurrent callers block until the first one finishes, then all of them
    see the same cached result.
    """

    def __init__(self, project_dir: Path | str | None = None) -> None:
        self._project_dir = project_dir
        self._lock = threading.Lock()
        self._done = False
        self._error: EndpointGenError | None = None

    def result(self) -> EndpointGenError | None:
        """Return the diagnostic, or None when both capabilities are declared."""
        with self._lock:
            if not self._done:
                try:
                    check_manifest(self._project_dir)
                except EndpointGenError as exc:
                    self._error = exc
                self._done = True
            return self._error


_PROCESS_CHECK = CapabilityCheck()


def ensure_feature_presence() -> EndpointGenError | None:
    """Process-wide memoized capability check."""
    return _PROCESS_CHECK.result()
