"""Shared fixtures for endpoint-gen tests.

Generated modules import their runtime types from `endpoint_runtime`. That
package belongs to the consuming project, so the session writes a small
stand-in into a temporary directory that generated code can be executed
against.
"""

from __future__ import annotations

import importlib
import importlib.util
import itertools
import sys
import textwrap
from pathlib import Path

import pytest

from endpoint_gen.features import CapabilityCheck


# ---------------------------------------------------------------------------
# Endpoint sources
# ---------------------------------------------------------------------------

BASE_METADATA = """\
metadata: {
    description: "Foo",
    method: GET,
    name: "foo",
    stable_path: "/foo",
    rate_limited: false,
    authentication: None,
}
"""

ROOM_STATE_SOURCE = """\
metadata: {
    description: "Send a state event to a room.",
    method: PUT,
    name: "send_state_event",
    r0_path: "/_matrix/client/r0/rooms/:room_id/state/:event_type",
    stable_path: "/_matrix/client/v3/rooms/:room_id/state/:event_type",
    added: 1.0,
    rate_limited: false,
    authentication: AccessToken,
}

request: {
    @path
    room_id: str,
    @path
    event_type: str,
    @query
    timestamp: int | None,
    @header(CONTENT_DISPOSITION)
    disposition: str | None,
    body: dict[str, str],
}

response: {
    event_id: str,
}
"""


@pytest.fixture
def base_metadata() -> str:
    """Metadata section for a GET endpoint with a single stable path."""
    return BASE_METADATA


@pytest.fixture
def room_state_source() -> str:
    """A complete source with path, query, header and body fields."""
    return ROOM_STATE_SOURCE


def manifest_text(*extras: str) -> str:
    lines = ["[project]", 'name = "consumer"', "", "[project.optional-dependencies]"]
    lines.extend(f"{extra} = []" for extra in extras)
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Capability checks
# ---------------------------------------------------------------------------

@pytest.fixture
def make_project(tmp_path):
    """Return a factory that writes a pyproject.toml declaring the given extras."""
    def _make(*extras: str) -> Path:
        project = tmp_path / "project"
        project.mkdir(exist_ok=True)
        (project / "pyproject.toml").write_text(manifest_text(*extras))
        return project
    return _make


@pytest.fixture
def capabilities(make_project) -> CapabilityCheck:
    """A check against a project that declares both capabilities."""
    return CapabilityCheck(make_project("client", "server"))


# ---------------------------------------------------------------------------
# Runtime stand-in for executing generated modules
# ---------------------------------------------------------------------------

RUNTIME_SOURCE = '''
import enum
from dataclasses import dataclass
from typing import NamedTuple, Optional


class HttpMethod(enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    TRACE = "TRACE"


class AuthScheme(enum.Enum):
    NONE = "None"
    ACCESS_TOKEN = "AccessToken"
    SERVER_SIGNATURES = "ServerSignatures"
    QUERY_ONLY_ACCESS_TOKEN = "QueryOnlyAccessToken"


class Version(NamedTuple):
    major: int
    minor: int


class features:
    CLIENT = True
    SERVER = True


class IntoHttpError(Exception):
    pass


class FromHttpRequestError(Exception):
    pass


class FromHttpResponseError(Exception):
    pass


class MatrixError(Exception):
    def __init__(self, status_code, body):
        super().__init__(status_code, body)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_http_response(cls, response):
        return cls(response.status_code, response.json())


@dataclass(frozen=True)
class Metadata:
    description: str
    method: HttpMethod
    name: str
    unstable_path: Optional[str]
    r0_path: Optional[str]
    stable_path: Optional[str]
    added: Optional[Version]
    deprecated: Optional[Version]
    removed: Optional[Version]
    rate_limited: bool
    authentication: AuthScheme

    def make_endpoint_url(self, versions, base_url, path_args, query):
        path = self.stable_path or self.r0_path or self.unstable_path
        args = iter(path_args)
        segments = [next(args) if s.startswith(":") else s for s in path.split("/")]
        url = base_url.rstrip("/") + "/".join(segments)
        if query:
            url += "?" + query
        return url
'''

_module_ids = itertools.count()


@pytest.fixture(scope="session")
def runtime_dir(tmp_path_factory) -> Path:
    root = tmp_path_factory.mktemp("runtime")
    package = root / "endpoint_runtime"
    package.mkdir()
    (package / "__init__.py").write_text(textwrap.dedent(RUNTIME_SOURCE))
    return root


@pytest.fixture
def runtime(runtime_dir, monkeypatch):
    """The stand-in runtime package, importable for the duration of a test."""
    monkeypatch.syspath_prepend(str(runtime_dir))
    module = importlib.import_module("endpoint_runtime")
    monkeypatch.setattr(module.features, "CLIENT", True)
    monkeypatch.setattr(module.features, "SERVER", True)
    return module


@pytest.fixture
def load_generated(runtime, tmp_path, monkeypatch):
    """Return a loader that executes generated code as a fresh module."""
    def _load(code: str):
        name = f"generated_endpoint_{next(_module_ids)}"
        path = tmp_path / f"{name}.py"
        path.write_text(code)
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        # dataclasses resolves string annotations through sys.modules
        monkeypatch.setitem(sys.modules, name, module)
        spec.loader.exec_module(module)
        return module
    return _load
