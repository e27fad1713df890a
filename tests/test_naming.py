"""Tests for the naming module."""

from endpoint_gen.naming import (
    enum_member,
    header_name,
    is_valid_endpoint_path,
    module_name,
    path_variables,
)


class TestEnumMember:
    """Test source symbol -> runtime enum member conversion."""

    def test_method_unchanged(self):
        assert enum_member("GET") == "GET"

    def test_access_token(self):
        assert enum_member("AccessToken") == "ACCESS_TOKEN"

    def test_query_only_access_token(self):
        assert enum_member("QueryOnlyAccessToken") == "QUERY_ONLY_ACCESS_TOKEN"

    def test_none(self):
        """`None` must not stay a Python keyword."""
        assert enum_member("None") == "NONE"


class TestHeaderName:

    def test_constant(self):
        assert header_name("CONTENT_TYPE") == "content-type"

    def test_already_dashed(self):
        assert header_name("X-Request-Id") == "x-request-id"


class TestEndpointPath:
    """Test path validation and variable extraction."""

    def test_valid(self):
        assert is_valid_endpoint_path("/_matrix/client/v3/rooms/:room_id/state")

    def test_needs_leading_slash(self):
        assert not is_valid_endpoint_path("_matrix/client/v3/sync")

    def test_rejects_space(self):
        assert not is_valid_endpoint_path("/foo bar")

    def test_rejects_query(self):
        assert not is_valid_endpoint_path("/foo?bar=1")

    def test_rejects_non_ascii(self):
        assert not is_valid_endpoint_path("/föö")

    def test_variables_in_order(self):
        path = "/rooms/:room_id/state/:event_type/:state_key"
        assert path_variables(path) == ["room_id", "event_type", "state_key"]

    def test_no_variables(self):
        assert path_variables("/foo") == []


class TestModuleName:

    def test_dashes(self):
        assert module_name("get-room-state") == "get_room_state"

    def test_camel_case(self):
        assert module_name("getRoomState") == "get_room_state"

    def test_valid_python_identifier(self):
        """Module names must be valid Python identifiers."""
        name = module_name("3pid.bind")
        assert name.isidentifier()
