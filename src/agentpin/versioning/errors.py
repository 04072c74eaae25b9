"""Exceptions raised by the registry and router.

Every error is raised at the point of detection, before any state
changes, and carries the offending value so callers can log and act on
it without inspecting registry internals.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from agentpin.versioning.models import AgentConfig


class AgentPinError(Exception):
    """Base class for all agentpin errors."""


class ConfigValidationError(AgentPinError, ValueError):
    """Raised when an AgentConfig violates the schema."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        details = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(f"Invalid agent config ({details})")

    @property
    def fields(self) -> list[str]:
        """Names of the fields that failed validation."""
        return [e["field"] for e in self.errors]


class VersionNotFoundError(AgentPinError, LookupError):
    """Raised when a referenced version is not in the registry."""

    def __init__(self, version: str | None, message: str | None = None) -> None:
        self.version = version
        super().__init__(message or f"Version {version} not found in registry")


class InvalidOperationError(AgentPinError, RuntimeError):
    """Raised when an operation would break a registry invariant."""

    def __init__(self, version: str, message: str) -> None:
        self.version = version
        super().__init__(message)


class InvalidStrategyError(AgentPinError, ValueError):
    """Raised for a routing strategy token outside the known set."""

    def __init__(self, strategy: object) -> None:
        self.strategy = strategy
        super().__init__(f"Unknown routing strategy: {strategy!r}")


def validate_config(candidate: AgentConfig | Mapping[str, Any]) -> AgentConfig:
    """Check a candidate config against the AgentConfig schema.

    Already-built configs are re-validated from their field values, so
    instances created with ``model_construct`` cannot slip past.

    Args:
        candidate: An AgentConfig or a plain mapping of its fields.

    Returns:
        The validated AgentConfig.

    Raises:
        ConfigValidationError: Naming each violated field constraint.
    """
    data = (
        candidate.model_dump(exclude_unset=True)
        if isinstance(candidate, AgentConfig)
        else dict(candidate)
    )
    try:
        return AgentConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(
            [
                {
                    "field": ".".join(str(part) for part in err["loc"]) or "config",
                    "message": err["msg"],
                }
                for err in e.errors()
            ]
        ) from e
