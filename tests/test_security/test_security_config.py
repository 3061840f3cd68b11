"""Tests for the route security YAML and rule matching."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from fintrack.rbac import AccessDecision, Principal, Role, authorize
from fintrack.security.config import SecurityConfigError, build_security_config, load_security_config

REPO_CONFIG = Path(__file__).resolve().parents[2] / "config" / "security_config.yaml"


@pytest.fixture
def config():
    return load_security_config(REPO_CONFIG)


def test_bundled_config_loads(config):
    assert config.auth.authorization_header == "Authorization"
    assert config.auth.bearer_prefix == "Bearer"


def test_health_is_public(config):
    assert config.match("/health", "GET").auth_required is False


def test_exact_rule_per_method(config):
    read = config.match("/api/movements", "get")
    write = config.match("/api/movements", "POST")
    assert read.required_roles == {Role.ADMIN, Role.USER}
    assert write.required_roles == {Role.ADMIN}
    assert write.required_capabilities == {"can_create_movements"}


def test_permissions_endpoint_is_any_authenticated(config):
    rule = config.match("/api/me/permissions", "GET")
    assert rule.auth_required is True
    assert rule.any_authenticated is True
    assert rule.required_roles == frozenset()


def test_unmatched_path_falls_back_to_admin_only_default(config):
    rule = config.match("/api/users/abc123", "GET")
    assert rule.path_template is None
    assert rule.auth_required is True
    assert rule.required_roles == {Role.ADMIN}
    assert rule.any_authenticated is False


def test_template_rule_with_self_access():
    config = build_security_config(
        {
            "default": {"required_roles": ["ADMIN"]},
            "routes": [
                {"path": "/api/users/{id}", "methods": ["GET"], "allow_self_access": True, "owner_param": "id"},
            ],
        }
    )
    rule = config.match("/api/users/u1", "GET")
    assert rule.path_template == "/api/users/{id}"
    assert rule.allow_self_access is True
    assert rule.owner_param == "id"
    # Inherits roles from the default.
    assert rule.required_roles == {Role.ADMIN}
    assert config.match("/api/users/u1/extra", "GET").path_template is None


def test_auth_required_rule_without_any_grant_is_rejected():
    with pytest.raises(SecurityConfigError, match="names no roles"):
        build_security_config(
            {
                "default": {"auth_required": False},
                "routes": [{"path": "/api/things", "methods": ["GET"], "auth_required": True}],
            }
        )


def test_default_without_roles_is_rejected():
    with pytest.raises(SecurityConfigError, match="default rule"):
        build_security_config({"default": {"auth_required": True}})


def test_default_any_authenticated_is_accepted():
    config = build_security_config({"default": {"any_authenticated": True}})
    assert config.match("/whatever", "GET").any_authenticated is True


def test_unknown_role_in_config_is_rejected():
    with pytest.raises(ValidationError, match="unknown roles"):
        build_security_config(
            {"default": {"required_roles": ["ADMIN"]}, "routes": [{"path": "/x", "required_roles": ["admin"]}]}
        )


def test_unknown_capability_is_rejected():
    with pytest.raises(ValidationError, match="unknown capabilities"):
        build_security_config(
            {
                "default": {"required_roles": ["ADMIN"]},
                "routes": [{"path": "/x", "required_roles": ["ADMIN"], "required_capabilities": ["can_fly"]}],
            }
        )


def test_self_access_needs_a_path_parameter():
    with pytest.raises(ValidationError, match="owner_param"):
        build_security_config(
            {
                "default": {"required_roles": ["ADMIN"]},
                "routes": [{"path": "/api/users", "allow_self_access": True, "owner_param": "id"}],
            }
        )


def test_missing_security_key(tmp_path):
    path = tmp_path / "security.yaml"
    path.write_text("auth: {}\n", encoding="utf-8")
    with pytest.raises(SecurityConfigError, match="Missing top-level 'security'"):
        load_security_config(path)


def test_rule_naming_roles_does_not_inherit_default_any_authenticated():
    config = build_security_config(
        {
            "default": {"any_authenticated": True},
            "routes": [{"path": "/api/users", "methods": ["GET"], "required_roles": ["ADMIN"]}],
        }
    )
    rule = config.match("/api/users", "GET")
    assert rule.any_authenticated is False
    assert rule.required_roles == {Role.ADMIN}
    decision = authorize(Principal("u1", Role.USER), rule.required_roles, any_authenticated=rule.any_authenticated)
    assert decision is AccessDecision.FORBIDDEN
    assert authorize(Principal("a1", Role.ADMIN), rule.required_roles, any_authenticated=rule.any_authenticated) is (
        AccessDecision.ALLOWED
    )


def test_self_access_rule_does_not_inherit_default_any_authenticated():
    config = build_security_config(
        {
            "default": {"required_roles": ["ADMIN"], "any_authenticated": True},
            "routes": [
                {"path": "/api/users/{id}", "methods": ["GET"], "allow_self_access": True, "owner_param": "id"},
            ],
        }
    )
    rule = config.match("/api/users/u2", "GET")
    assert rule.any_authenticated is False
    decision = authorize(
        Principal("u1", Role.USER),
        rule.required_roles,
        any_authenticated=rule.any_authenticated,
        allow_self_access=rule.allow_self_access,
        resource_owner_id="u2",
    )
    assert decision is AccessDecision.FORBIDDEN


def test_rule_without_grants_still_takes_default_any_authenticated():
    config = build_security_config(
        {
            "default": {"any_authenticated": True},
            "routes": [{"path": "/api/things", "methods": ["GET"], "required_capabilities": ["can_view_movements"]}],
        }
    )
    rule = config.match("/api/things", "GET")
    assert rule.any_authenticated is True
    assert rule.required_capabilities == {"can_view_movements"}


def test_any_authenticated_rule_takes_no_roles_from_default():
    config = build_security_config(
        {
            "default": {"required_roles": ["ADMIN"]},
            "routes": [{"path": "/api/me/permissions", "methods": ["GET"], "any_authenticated": True}],
        }
    )
    rule = config.match("/api/me/permissions", "GET")
    assert rule.any_authenticated is True
    assert rule.required_roles == frozenset()
