from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from fintrack.rbac import CapabilitySet, Role, is_recognized


class SecurityConfigError(ValueError):
    """Raised when the route security YAML is invalid or ambiguous."""


class AuthConfig(BaseModel):
    provider: str = "session"
    authorization_header: str = "Authorization"
    bearer_prefix: str = "Bearer"


def _validate_roles(roles: list[str]) -> list[str]:
    unknown = [r for r in roles if not is_recognized(r)]
    if unknown:
        raise ValueError(f"unknown roles {unknown}; expected any of {[Role.ADMIN.value, Role.USER.value]}")
    return roles


def _validate_capabilities(names: list[str]) -> list[str]:
    unknown = sorted(set(names).difference(CapabilitySet.names()))
    if unknown:
        raise ValueError(f"unknown capabilities {unknown}")
    return names


class DefaultRule(BaseModel):
    auth_required: bool = True
    required_roles: list[str] = Field(default_factory=list)
    any_authenticated: bool = False

    @field_validator("required_roles")
    @classmethod
    def check_roles(cls, v: list[str]) -> list[str]:
        return _validate_roles(v)


class RouteRule(BaseModel):
    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    auth_required: bool | None = None
    required_roles: list[str] = Field(default_factory=list)
    any_authenticated: bool | None = None
    allow_self_access: bool = False
    owner_param: str | None = None
    required_capabilities: list[str] = Field(default_factory=list)

    @field_validator("required_roles")
    @classmethod
    def check_roles(cls, v: list[str]) -> list[str]:
        return _validate_roles(v)

    @field_validator("required_capabilities")
    @classmethod
    def check_capabilities(cls, v: list[str]) -> list[str]:
        return _validate_capabilities(v)

    @model_validator(mode="after")
    def check_self_access(self) -> RouteRule:
        if self.allow_self_access:
            if not self.owner_param:
                raise ValueError(f"route {self.path!r}: allow_self_access needs owner_param")
            if f"{{{self.owner_param}}}" not in self.path:
                raise ValueError(f"route {self.path!r}: owner_param {self.owner_param!r} is not a path parameter")
        return self

    def normalized_methods(self) -> set[str]:
        return {m.upper() for m in self.methods}


class SecurityConfigModel(BaseModel):
    auth: AuthConfig = Field(default_factory=AuthConfig)
    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)


@dataclass(frozen=True)
class EffectiveRule:
    """
    Fully-resolved rule (defaults applied) for a particular request.
    """

    auth_required: bool
    required_roles: frozenset[Role]
    any_authenticated: bool
    allow_self_access: bool
    owner_param: str | None
    required_capabilities: frozenset[str]
    path_template: str | None = None

    def is_satisfiable(self) -> bool:
        """An auth-required rule must name who gets in; empty roles alone mean nobody."""
        if not self.auth_required:
            return True
        return bool(self.required_roles) or self.any_authenticated or self.allow_self_access


def _path_template_to_regex(path_template: str) -> re.Pattern[str]:
    # Convert "/api/users/{id}" -> r"^/api/users/[^/]+$"
    regex = re.sub(r"\{[^/]+\}", r"[^/]+", path_template)
    return re.compile(rf"^{regex}$")


class SecurityConfig:
    """
    Runtime helper around validated config + route matching.
    """

    def __init__(self, model: SecurityConfigModel):
        self.model = model

        compiled: list[tuple[str, re.Pattern[str], RouteRule]] = []
        for rule in self.model.routes:
            compiled.append((rule.path, _path_template_to_regex(rule.path), rule))

        # Prefer exact matches over templates.
        self._exact_rules: dict[str, list[RouteRule]] = {}
        for r in self.model.routes:
            self._exact_rules.setdefault(r.path, []).append(r)
        self._compiled_rules = compiled

    @property
    def auth(self) -> AuthConfig:
        return self.model.auth

    def default_rule(self) -> EffectiveRule:
        default = self.model.default
        return EffectiveRule(
            auth_required=default.auth_required,
            required_roles=frozenset(Role(r) for r in default.required_roles),
            any_authenticated=default.any_authenticated,
            allow_self_access=False,
            owner_param=None,
            required_capabilities=frozenset(),
        )

    def effective_rules(self) -> list[EffectiveRule]:
        return [_effective(rule, self.model.default) for rule in self.model.routes]

    def match(self, path: str, method: str) -> EffectiveRule:
        """
        Find the best matching rule for (path, method), then apply defaults.
        """

        method = method.upper()
        default = self.model.default

        # 1) exact path match
        exact_candidates = self._exact_rules.get(path, [])
        for candidate in exact_candidates:
            if method in candidate.normalized_methods():
                return _effective(candidate, default)

        # 2) template match
        for _template, regex, candidate in self._compiled_rules:
            if method not in candidate.normalized_methods():
                continue
            if regex.match(path):
                return _effective(candidate, default)

        # 3) no match -> defaults
        return self.default_rule()


def _effective(rule: RouteRule, default: DefaultRule) -> EffectiveRule:
    # Any security requirement on the rule implies auth, even if the global
    # default is "public".
    inferred_auth_required = (
        default.auth_required
        or bool(rule.required_roles)
        or bool(rule.any_authenticated)
        or rule.allow_self_access
        or bool(rule.required_capabilities)
    )
    # An explicit any_authenticated rule names no roles and takes none from the default.
    roles = [] if rule.any_authenticated else (rule.required_roles or default.required_roles)

    # The default's any_authenticated only fills in for rules that name nobody.
    if rule.any_authenticated is not None:
        any_authenticated = rule.any_authenticated
    elif rule.required_roles or rule.allow_self_access:
        any_authenticated = False
    else:
        any_authenticated = default.any_authenticated

    return EffectiveRule(
        auth_required=inferred_auth_required if rule.auth_required is None else rule.auth_required,
        required_roles=frozenset(Role(r) for r in roles),
        any_authenticated=any_authenticated,
        allow_self_access=rule.allow_self_access,
        owner_param=rule.owner_param,
        required_capabilities=frozenset(rule.required_capabilities),
        path_template=rule.path,
    )


def load_security_config(path: Path) -> SecurityConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw: dict[str, Any] = yaml.safe_load(raw_text) or {}

    if "security" not in raw:
        raise SecurityConfigError(f"Missing top-level 'security' key in config: {path}")

    return build_security_config(raw["security"])


def build_security_config(data: dict[str, Any]) -> SecurityConfig:
    model = SecurityConfigModel.model_validate(data)
    config = SecurityConfig(model)

    if not config.default_rule().is_satisfiable():
        raise SecurityConfigError(
            "default rule requires auth but names no roles; set required_roles or any_authenticated: true"
        )
    for rule in config.effective_rules():
        if not rule.is_satisfiable():
            raise SecurityConfigError(
                f"route {rule.path_template!r} requires auth but names no roles; "
                "set required_roles, any_authenticated: true or allow_self_access"
            )
    return config
