"""Records produced by executing an agent request."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from agentpin.versioning.models import (
    AgentVersion,
    ExecutionContext,
    ModelProvider,
    RoutingStrategy,
)


def new_execution_id() -> str:
    """Unique, roughly time-ordered execution identifier."""
    return f"exec_{int(datetime.now().timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


class ExecutionCost(BaseModel):
    """Tokens used and their approximate price in USD.

    Failed executions carry a zero cost with provider None when the
    failure happened before a config was loaded.
    """

    amount: float = Field(default=0.0, ge=0)
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = "unknown"
    provider: ModelProvider | None = None


class CompletionResult(BaseModel):
    """What a completion provider returns for one call."""

    text: str
    cost: ExecutionCost
    raw_response: Any = None


class ExecutionMetadata(BaseModel):
    timestamp: datetime = Field(default_factory=datetime.now)
    duration_ms: float = 0.0
    warnings: list[str] = Field(default_factory=list)


class ExecutionResult(BaseModel):
    """Outcome of one execution; failed runs have empty output and zero cost."""

    output: str
    version: AgentVersion
    cost: ExecutionCost
    metadata: ExecutionMetadata = Field(default_factory=ExecutionMetadata)
    raw_response: Any = Field(default=None, exclude=True)


class ExecuteRequest(BaseModel):
    """A request plus routing options.

    ``force_version`` bypasses routing entirely (it still has to be
    registered); ``routing_strategy`` only applies when it is unset.
    """

    context: ExecutionContext
    routing_strategy: RoutingStrategy | None = None
    force_version: AgentVersion | None = None


class AgentLogEntry(BaseModel):
    """Structured record handed to a log sink after every execution."""

    id: str = Field(default_factory=new_execution_id)
    timestamp: datetime
    user_id: str
    tenant_id: str | None = None
    version: AgentVersion
    input: str
    output: str
    cost: ExecutionCost
    duration_ms: float
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
