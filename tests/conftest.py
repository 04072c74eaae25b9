"""Shared test fixtures.

Add fixtures here that are used across multiple test files.
"""

from collections.abc import Callable
from typing import Any

import pytest

from agentpin.versioning.models import AgentConfig
from agentpin.versioning.registry import VersionRegistry
from agentpin.versioning.router import VersionRouter

type ConfigFactory = Callable[..., AgentConfig]


@pytest.fixture
def make_config() -> ConfigFactory:
    """Build a valid AgentConfig, overriding any field by keyword."""

    def factory(version: str = "v1.0", **overrides: Any) -> AgentConfig:
        fields: dict[str, Any] = {
            "version": version,
            "prompt": f"You are assistant {version}.",
            "provider": "openai",
            "model": "gpt-3.5-turbo",
            "temperature": 0.7,
        }
        fields.update(overrides)
        return AgentConfig(**fields)

    return factory


@pytest.fixture
def registry() -> VersionRegistry:
    """Empty registry."""
    return VersionRegistry()


@pytest.fixture
def populated_registry(
    registry: VersionRegistry, make_config: ConfigFactory
) -> VersionRegistry:
    """Registry holding v1.0 (default), v2.0 and v2.1."""
    for version in ("v1.0", "v2.0", "v2.1"):
        registry.register(make_config(version))
    return registry


@pytest.fixture
def router(populated_registry: VersionRegistry) -> VersionRouter:
    """Router over the populated registry, with no routing state."""
    return VersionRouter(populated_registry)
