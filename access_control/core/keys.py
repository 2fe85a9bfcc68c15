# access_control/core/keys.py
"""
Key namespaces for everything the engine keeps in the key-value store.

Layout (``rbac`` is the configurable prefix):

    rbac:template:configured                     -> "true" once seeded
    rbac:template:module:<module>                -> module template JSON
    rbac:roles                                   -> hash role_id -> role name
    rbac:roles:seq                               -> role id counter
    rbac:role:<role>:modules                     -> set of module names
    rbac:role:<role>:submodules:<module>         -> set of submodule names
    rbac:role:<role>:sections:<module>:<sub>     -> set of section names
    rbac:role:<role>:actions:<module>:<sub>      -> set of action names
    rbac:role:<role>:users                       -> set of user ids
    rbac:users                                   -> hash email -> user id
    rbac:user:<user>                             -> hash of user attributes
    rbac:user:<user>:roles                       -> set of role ids
    rbac:cache:access:<user>                     -> resolved access JSON
    rbac:cache:actions:<user>:<module>           -> resolved actions JSON
    rbac:cache:permissions:<user>                -> flattened permission set
    rbac:session:<token uuid>                    -> user id (TTL = token lifetime)

Identifiers used as key components never contain ``:``, so the entity marker
that follows the prefix keeps the namespaces apart.
"""

from typing import Iterable

from .exceptions import ValidationException

SEPARATOR = ":"

# Redis SCAN MATCH metacharacters.
GLOB_SPECIAL = "\\*?[]"


def validate_identifier(value: str, kind: str) -> str:
    """Reject identifiers that would break the key layout."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(f"{kind} must be a non-empty string", details={"field": kind})
    if SEPARATOR in value:
        raise ValidationException(
            f"{kind} must not contain '{SEPARATOR}'",
            details={"field": kind, "value": value},
        )
    return value


def escape_glob(value: str) -> str:
    """Escape glob metacharacters so ``value`` only matches itself in a MATCH pattern."""
    return "".join("\\" + ch if ch in GLOB_SPECIAL else ch for ch in value)


def validate_identifiers(values: Iterable[str], kind: str) -> list[str]:
    items = list(values)
    if not items:
        raise ValidationException(f"At least one {kind} is required", details={"field": kind})
    return [validate_identifier(v, kind) for v in items]


class KeySpace:
    """Builds namespaced keys for a given prefix."""

    def __init__(self, prefix: str = "rbac"):
        self.prefix = prefix

    def _join(self, *parts: str) -> str:
        return SEPARATOR.join((self.prefix, *parts))

    def _pattern(self, *parts: str) -> str:
        """Every key nested under ``parts``; each component matches literally."""
        return escape_glob(self._join(*parts)) + SEPARATOR + "*"

    # Permission template
    def template_configured(self) -> str:
        return self._join("template", "configured")

    def template_module(self, module: str) -> str:
        return self._join("template", "module", module)

    def template_module_pattern(self) -> str:
        return self._pattern("template", "module")

    def template_pattern(self) -> str:
        return self._pattern("template")

    # Roles
    def roles(self) -> str:
        return self._join("roles")

    def role_sequence(self) -> str:
        return self._join("roles", "seq")

    def role_modules(self, role_id: str) -> str:
        return self._join("role", role_id, "modules")

    def role_submodules(self, role_id: str, module: str) -> str:
        return self._join("role", role_id, "submodules", module)

    def role_sections(self, role_id: str, module: str, submodule: str) -> str:
        return self._join("role", role_id, "sections", module, submodule)

    def role_actions(self, role_id: str, module: str, submodule: str) -> str:
        return self._join("role", role_id, "actions", module, submodule)

    def role_users(self, role_id: str) -> str:
        return self._join("role", role_id, "users")

    def role_pattern(self, role_id: str) -> str:
        return self._pattern("role", role_id)

    def role_facet_prefix(self, role_id: str, facet: str) -> str:
        """Literal prefix of the per-submodule ``sections`` or ``actions`` sets of a role."""
        return self._join("role", role_id, facet) + SEPARATOR

    def role_facet_pattern(self, role_id: str, facet: str) -> str:
        return self._pattern("role", role_id, facet)

    # Users
    def users(self) -> str:
        return self._join("users")

    def user(self, user_id: str) -> str:
        return self._join("user", user_id)

    def user_roles(self, user_id: str) -> str:
        return self._join("user", user_id, "roles")

    # Derived caches
    def access_cache(self, user_id: str) -> str:
        return self._join("cache", "access", user_id)

    def actions_cache(self, user_id: str, module: str) -> str:
        return self._join("cache", "actions", user_id, module)

    def actions_cache_pattern(self, user_id: str) -> str:
        return self._pattern("cache", "actions", user_id)

    def permissions_cache(self, user_id: str) -> str:
        return self._join("cache", "permissions", user_id)

    # Sessions
    def session(self, token_uuid: str) -> str:
        return self._join("session", token_uuid)
