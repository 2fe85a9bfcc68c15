"""Key layout and identifier validation."""

import pytest

from access_control.core.exceptions import ValidationException
from access_control.core.keys import KeySpace, escape_glob, validate_identifier, validate_identifiers
from tests.helpers.fake_redis import glob_to_regex


class TestValidateIdentifier:
    def test_accepts_plain_identifier(self):
        assert validate_identifier("accounts", "module") == "accounts"

    @pytest.mark.parametrize("value", ["", "   ", "bank:accounts"])
    def test_rejects_blank_or_separator(self, value):
        with pytest.raises(ValidationException):
            validate_identifier(value, "module")

    def test_rejects_empty_list(self):
        with pytest.raises(ValidationException) as exc:
            validate_identifiers([], "role id")
        assert exc.value.status_code == 400


class TestKeySpace:
    def test_namespaces_do_not_collide(self):
        keys = KeySpace("rbac")
        built = {
            keys.role_modules("1"),
            keys.role_users("1"),
            keys.user("1"),
            keys.user_roles("1"),
            keys.access_cache("1"),
            keys.permissions_cache("1"),
            keys.session("1"),
            keys.template_module("1"),
        }
        assert len(built) == 8

    def test_role_pattern_covers_every_role_key(self):
        keys = KeySpace("rbac")
        pattern = keys.role_pattern("r1")
        prefix = pattern.rstrip("*")
        for key in (
            keys.role_modules("r1"),
            keys.role_submodules("r1", "bank"),
            keys.role_sections("r1", "bank", "accounts"),
            keys.role_actions("r1", "bank", "accounts"),
            keys.role_users("r1"),
        ):
            assert key.startswith(prefix)
        assert not keys.role_modules("r10").startswith(prefix)

    def test_prefix_is_applied(self):
        assert KeySpace("acl").session("abc").startswith("acl:")

    def test_escape_glob(self):
        assert escape_glob("a*b?[c]\\d") == "a\\*b\\?\\[c\\]\\\\d"
        assert escape_glob("plain") == "plain"

    @pytest.mark.parametrize("user_id", ["1*", "*", "?", "[1]", "1\\"])
    def test_scan_patterns_match_ids_literally(self, user_id):
        keys = KeySpace("rbac")
        pattern = glob_to_regex(keys.actions_cache_pattern(user_id))
        assert pattern.fullmatch(keys.actions_cache(user_id, "bank"))
        assert not pattern.fullmatch(keys.actions_cache("10", "bank"))
        assert not pattern.fullmatch(keys.actions_cache("1", "bank"))

    def test_role_facet_pattern_is_literal(self):
        keys = KeySpace("rbac")
        pattern = glob_to_regex(keys.role_facet_pattern("r*", "actions"))
        assert pattern.fullmatch(keys.role_actions("r*", "bank", "accounts"))
        assert not pattern.fullmatch(keys.role_actions("r1", "bank", "accounts"))
        assert keys.role_actions("r*", "bank", "accounts").startswith(
            keys.role_facet_prefix("r*", "actions")
        )
