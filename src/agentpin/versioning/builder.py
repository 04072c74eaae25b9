"""Fluent setup for a registry/router pair.

Nothing here is global: ``create_agent_system()`` returns a fresh builder
and ``build()`` hands back the pair for the caller to hold.

Usage:
    system = (
        create_agent_system()
        .register_agent(v1_config)
        .register_agent(v2_config)
        .with_global_defaults(GlobalConfig(default_version="v2.0"))
        .apply_tenant_overrides("acme", TenantConfig(tenant_id="acme", default_version="v1.0"))
        .pin_user("alice", "v1.0", reason="beta opt-out")
        .build()
    )
    system.router.resolve_version(context)

Order matters: versions must be registered before anything refers to them.
"""

from collections.abc import Mapping
from typing import Any, NamedTuple, Self

from agentpin.versioning.models import (
    AgentConfig,
    GlobalConfig,
    RoutingStrategy,
    TenantConfig,
)
from agentpin.versioning.registry import VersionRegistry
from agentpin.versioning.router import VersionRouter


class AgentSystem(NamedTuple):
    """A configured registry and the router that reads it."""

    registry: VersionRegistry
    router: VersionRouter


class ConfigBuilder:
    """Chains registration and routing setup calls."""

    def __init__(self, registry: VersionRegistry, router: VersionRouter) -> None:
        self.registry = registry
        self.router = router

    def register_agent(self, config: AgentConfig | Mapping[str, Any]) -> Self:
        self.registry.register(config)
        return self

    def with_global_defaults(self, config: GlobalConfig) -> Self:
        self.router.set_global_config(config)
        return self

    def apply_tenant_overrides(self, tenant_id: str, config: TenantConfig) -> Self:
        self.router.set_tenant_config(tenant_id, config)
        return self

    def pin_user(self, user_id: str, version: str, reason: str | None = None) -> Self:
        self.router.pin_user(user_id, version, reason)
        return self

    def build(self) -> AgentSystem:
        return AgentSystem(registry=self.registry, router=self.router)


def create_agent_system(
    default_strategy: RoutingStrategy | str = RoutingStrategy.PIN,
) -> ConfigBuilder:
    """Create an empty registry and router wrapped in a builder."""
    registry = VersionRegistry()
    router = VersionRouter(registry, default_strategy=default_strategy)
    return ConfigBuilder(registry, router)
