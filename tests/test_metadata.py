"""Tests for the metadata descriptor builder."""

import pytest

from endpoint_gen.errors import SpecSemanticError
from endpoint_gen.metadata import build_descriptor
from endpoint_gen.parser import parse_endpoint


def _descriptor(body: str):
    return build_descriptor(parse_endpoint("metadata: {" + body + "}").metadata)


_COMPLETE = (
    'description: "Foo", method: GET, name: "foo", stable_path: "/foo",'
    " rate_limited: false, authentication: None"
)


class TestBuildDescriptor:

    def test_literals(self):
        d = _descriptor(_COMPLETE)
        assert d.description == "'Foo'"
        assert d.method == "HttpMethod.GET"
        assert d.name == "'foo'"
        assert d.stable_path == "'/foo'"
        assert d.rate_limited == "False"
        assert d.authentication == "AuthScheme.NONE"

    def test_absent_optionals_are_none(self):
        """Omitted paths and versions become None, never an empty string."""
        d = _descriptor(_COMPLETE)
        for key in ("unstable_path", "r0_path", "added", "deprecated", "removed"):
            assert getattr(d, key) == "None"

    def test_empty_string_is_not_absent(self):
        d = _descriptor(_COMPLETE.replace('"Foo"', '""'))
        assert d.description == "''"

    def test_versions(self):
        d = _descriptor(_COMPLETE + ", added: 1.1, removed: 1.12")
        assert d.added == "Version(1, 1)"
        assert d.deprecated == "None"
        assert d.removed == "Version(1, 12)"

    def test_lifecycle_order_not_checked(self):
        """Markers out of order are accepted as given."""
        d = _descriptor(_COMPLETE + ", added: 1.5, deprecated: 1.2, removed: 1.0")
        assert (d.added, d.deprecated, d.removed) == (
            "Version(1, 5)", "Version(1, 2)", "Version(1, 0)",
        )

    def test_auth_scheme_symbols(self):
        d = _descriptor(_COMPLETE.replace("authentication: None", "authentication: AccessToken"))
        assert d.authentication == "AuthScheme.ACCESS_TOKEN"
        assert d.auth_symbol == "AccessToken"

    def test_fields_in_declaration_order(self):
        names = [name for name, _ in _descriptor(_COMPLETE).fields()]
        assert names == [
            "description", "method", "name",
            "unstable_path", "r0_path", "stable_path",
            "added", "deprecated", "removed",
            "rate_limited", "authentication",
        ]

    def test_paths_collected(self):
        d = _descriptor(_COMPLETE + ', unstable_path: "/unstable/foo"')
        assert d.paths == ("/unstable/foo", "/foo")


class TestValidation:

    @pytest.mark.parametrize(
        "field", ["description", "method", "name", "rate_limited", "authentication"],
    )
    def test_missing_mandatory_field(self, field):
        parts = [p for p in _COMPLETE.split(", ") if not p.strip().startswith(field)]
        with pytest.raises(SpecSemanticError, match=f"missing field `{field}`"):
            _descriptor(", ".join(parts))

    def test_needs_a_path(self):
        with pytest.raises(SpecSemanticError, match="at least one path"):
            _descriptor(_COMPLETE.replace(' stable_path: "/foo",', ""))

    def test_invalid_path(self):
        with pytest.raises(SpecSemanticError, match="invalid path"):
            _descriptor(_COMPLETE.replace('"/foo"', '"foo"'))

    def test_unknown_method(self):
        with pytest.raises(SpecSemanticError, match="unknown HTTP method `FETCH`"):
            _descriptor(_COMPLETE.replace("GET", "FETCH"))

    def test_unknown_auth_scheme(self):
        with pytest.raises(SpecSemanticError, match="unknown authentication scheme"):
            _descriptor(_COMPLETE.replace("authentication: None", "authentication: Cookie"))

    @pytest.mark.parametrize("version", ["1.01", "01.1", "1.00"])
    def test_version_leading_zero(self, version):
        with pytest.raises(SpecSemanticError, match="no leading zeros"):
            _descriptor(_COMPLETE + f", added: {version}")

    def test_version_zero_component(self):
        assert _descriptor(_COMPLETE + ", added: 1.0").added == "Version(1, 0)"
