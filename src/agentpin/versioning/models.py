"""Records for versioned agent configuration and routing.

AgentConfig is immutable once built: registering a changed config means
registering a new version (or overwriting the same identifier).

Override hierarchy, highest first:
    explicit request version -> user pin -> tenant default
    -> global default -> latest registered version
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Identifier aliases (plain strings, named for readability)
type AgentVersion = str
type UserId = str
type TenantId = str

ModelProvider = Literal["openai", "anthropic"]

SUPPORTED_PROVIDERS: frozenset[str] = frozenset({"openai", "anthropic"})

NonEmptyStr = Annotated[str, Field(min_length=1)]
Temperature = Annotated[float, Field(ge=0.0, le=2.0)]


class RoutingStrategy(StrEnum):
    """Named floor in the resolution fallthrough chain.

    PIN checks pin -> tenant -> global -> latest, TENANT_DEFAULT skips the
    pin, GLOBAL_DEFAULT skips pin and tenant, LATEST skips everything.
    """

    PIN = "pin"
    TENANT_DEFAULT = "tenant-default"
    GLOBAL_DEFAULT = "global-default"
    LATEST = "latest"


# =============================================================================
# AGENT VERSIONS
# =============================================================================


class AgentMetadata(BaseModel):
    """Descriptive information about a version."""

    model_config = ConfigDict(frozen=True)

    description: str | None = None
    created_at: datetime | None = None
    created_by: str | None = None
    tags: tuple[str, ...] = ()


class AgentConfig(BaseModel):
    """Configuration bundle for one agent version."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: NonEmptyStr = Field(description="Version identifier, e.g. 'v2.1'")
    prompt: NonEmptyStr = Field(description="System prompt")
    provider: ModelProvider
    model: NonEmptyStr = Field(description="Model identifier, e.g. 'gpt-4'")
    temperature: Temperature
    max_tokens: int | None = Field(default=None, gt=0)
    parameters: dict[str, Any] | None = Field(
        default=None, description="Extra provider parameters passed through as-is"
    )
    metadata: AgentMetadata | None = None


# =============================================================================
# ROUTING STATE
# =============================================================================


class UserVersionPin(BaseModel):
    """A user forced onto one version until unpinned or migrated."""

    model_config = ConfigDict(frozen=True)

    user_id: NonEmptyStr
    version: NonEmptyStr
    pinned_at: datetime = Field(default_factory=datetime.now)
    reason: str | None = None


class PromptOverrides(BaseModel):
    """Fields a tenant may override at execution time."""

    model_config = ConfigDict(frozen=True)

    temperature: Temperature | None = None
    max_tokens: int | None = Field(default=None, gt=0)
    model: NonEmptyStr | None = None


class CostLimits(BaseModel):
    """Advisory spend thresholds in USD. Not enforced by the router."""

    model_config = ConfigDict(frozen=True)

    daily: float | None = Field(default=None, ge=0)
    monthly: float | None = Field(default=None, ge=0)


class TenantConfig(BaseModel):
    """Per-tenant routing default and execution overrides."""

    model_config = ConfigDict(frozen=True)

    tenant_id: NonEmptyStr
    default_version: NonEmptyStr | None = None
    prompt_overrides: PromptOverrides | None = None
    cost_limits: CostLimits | None = None
    features: dict[str, bool] | None = None


class GlobalConfig(BaseModel):
    """Process-wide routing defaults."""

    model_config = ConfigDict(frozen=True)

    default_version: NonEmptyStr
    available_versions: tuple[str, ...] = ()
    global_cost_limits: CostLimits | None = None


class ExecutionContext(BaseModel):
    """One incoming request. Built per call, never stored by the router."""

    user_id: NonEmptyStr
    tenant_id: NonEmptyStr | None = None
    version: NonEmptyStr | None = Field(
        default=None, description="Explicit override; wins over every strategy"
    )
    input: NonEmptyStr
    context: dict[str, Any] | None = None
