"""Version resolution core.

This subpackage holds everything that decides which agent version serves
a request. It performs no I/O and every operation is synchronous.

Modules:
- models: AgentConfig, pins, tenant/global configs, ExecutionContext
- errors: Typed exceptions and the config schema validator
- registry: VersionRegistry (configs + default pointer + latest lookup)
- router: VersionRouter (pins, tenant defaults, resolution, migration)
- builder: ConfigBuilder / create_agent_system for fluent setup
"""

from agentpin.versioning.builder import AgentSystem, ConfigBuilder, create_agent_system
from agentpin.versioning.errors import (
    AgentPinError,
    ConfigValidationError,
    InvalidOperationError,
    InvalidStrategyError,
    VersionNotFoundError,
    validate_config,
)
from agentpin.versioning.models import (
    SUPPORTED_PROVIDERS,
    AgentConfig,
    AgentMetadata,
    AgentVersion,
    CostLimits,
    ExecutionContext,
    GlobalConfig,
    ModelProvider,
    PromptOverrides,
    RoutingStrategy,
    TenantConfig,
    TenantId,
    UserId,
    UserVersionPin,
)
from agentpin.versioning.registry import VersionRegistry, parse_version
from agentpin.versioning.router import VersionRouter, coerce_strategy

__all__ = [
    # Builder
    "AgentSystem",
    "ConfigBuilder",
    "create_agent_system",
    # Errors
    "AgentPinError",
    "ConfigValidationError",
    "InvalidOperationError",
    "InvalidStrategyError",
    "VersionNotFoundError",
    "validate_config",
    # Models
    "SUPPORTED_PROVIDERS",
    "AgentConfig",
    "AgentMetadata",
    "AgentVersion",
    "CostLimits",
    "ExecutionContext",
    "GlobalConfig",
    "ModelProvider",
    "PromptOverrides",
    "RoutingStrategy",
    "TenantConfig",
    "TenantId",
    "UserId",
    "UserVersionPin",
    # Registry
    "VersionRegistry",
    "parse_version",
    # Router
    "VersionRouter",
    "coerce_strategy",
]
