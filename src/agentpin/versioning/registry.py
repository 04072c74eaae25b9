"""Registry of immutable agent configurations keyed by version.

The registry owns the configs and a single default-version pointer.
Once set, the default always names a registered version: it can only be
moved to another registered version, and the default itself cannot be
removed.

Example:
    registry = VersionRegistry()
    registry.register(AgentConfig(version="v1.0", prompt="...", ...))
    registry.register(AgentConfig(version="v2.0", prompt="...", ...))

    registry.get_default_version()  # "v1.0" (first registered)
    registry.get_latest_version()   # "v2.0"
"""

import logging
import re
import threading
from collections.abc import Mapping
from typing import Any

from agentpin.versioning.errors import (
    InvalidOperationError,
    VersionNotFoundError,
    validate_config,
)
from agentpin.versioning.models import AgentConfig, AgentVersion

logger = logging.getLogger(__name__)

# Matches the start of the identifier only, so "v2.1-beta" ranks as 2.1.0
_SEMVER_PATTERN = re.compile(r"^v?(\d+)\.(\d+)(?:\.(\d+))?")


def parse_version(identifier: str) -> tuple[int, int, int] | None:
    """Parse ``[v]major.minor[.patch]`` into a sortable tuple.

    Patch defaults to 0. Returns None when the identifier does not match.

    Examples:
        >>> parse_version("v2.1")
        (2, 1, 0)
        >>> parse_version("10.0.3")
        (10, 0, 3)
        >>> parse_version("canary") is None
        True
    """
    match = _SEMVER_PATTERN.match(identifier)
    if match is None:
        return None
    major, minor, patch = match.groups()
    return int(major), int(minor), int(patch or 0)


class VersionRegistry:
    """Thread-safe map of version identifier to AgentConfig.

    Readers get snapshots; mutations are serialized by one reentrant lock.
    """

    def __init__(self) -> None:
        self._configs: dict[AgentVersion, AgentConfig] = {}
        self._default_version: AgentVersion | None = None
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._configs)

    def __contains__(self, version: object) -> bool:
        return isinstance(version, str) and self.has(version)

    def register(self, config: AgentConfig | Mapping[str, Any]) -> AgentConfig:
        """Validate and store a config under its version identifier.

        Overwrites any config already registered under the same identifier.
        The first version ever registered becomes the default.

        Args:
            config: The config, or a mapping of its fields.

        Returns:
            The validated config as stored.

        Raises:
            ConfigValidationError: If the config violates the schema.
        """
        validated = validate_config(config)

        with self._lock:
            if validated.version in self._configs:
                logger.debug("Overwriting config for version %s", validated.version)
            self._configs[validated.version] = validated
            if self._default_version is None:
                self._default_version = validated.version
                logger.info("Default version set to %s", validated.version)

        logger.info(
            "Registered version %s (%s/%s)",
            validated.version,
            validated.provider,
            validated.model,
        )
        return validated

    def get(self, version: AgentVersion) -> AgentConfig | None:
        """Look up a config. Returns None on miss."""
        with self._lock:
            return self._configs.get(version)

    def has(self, version: AgentVersion) -> bool:
        with self._lock:
            return version in self._configs

    def get_versions(self) -> set[AgentVersion]:
        """Snapshot of all registered version identifiers."""
        with self._lock:
            return set(self._configs)

    def set_default_version(self, version: AgentVersion) -> None:
        """Point the default at a registered version.

        Raises:
            VersionNotFoundError: If the version is not registered.
        """
        with self._lock:
            if version not in self._configs:
                raise VersionNotFoundError(version)
            self._default_version = version
        logger.info("Default version set to %s", version)

    def get_default_version(self) -> AgentVersion | None:
        with self._lock:
            return self._default_version

    def get_latest_version(self) -> AgentVersion | None:
        """Highest ``[v]major.minor[.patch]`` identifier, compared numerically.

        When no identifier parses, falls back to the default version and
        then to the earliest registered one. Returns None only when the
        registry is empty.
        """
        with self._lock:
            if not self._configs:
                return None

            ranked = [
                (parsed, version)
                for version in self._configs
                if (parsed := parse_version(version)) is not None
            ]
            if ranked:
                return max(ranked, key=lambda item: item[0])[1]

            return self._default_version or next(iter(self._configs))

    def remove(self, version: AgentVersion) -> bool:
        """Delete a version.

        Returns:
            True if the version was registered and is now gone.

        Raises:
            InvalidOperationError: If the version is the current default.
        """
        with self._lock:
            if version == self._default_version:
                raise InvalidOperationError(
                    version,
                    f"Cannot remove default version {version}. Set a new default first.",
                )
            removed = self._configs.pop(version, None) is not None

        if removed:
            logger.info("Removed version %s", version)
        return removed

    def list_configs(self) -> list[AgentConfig]:
        """Snapshot of all registered configs."""
        with self._lock:
            return list(self._configs.values())

    def clear(self) -> None:
        """Drop every version and the default pointer. Full reset only."""
        with self._lock:
            count = len(self._configs)
            self._configs.clear()
            self._default_version = None
        logger.info("Cleared registry (%d versions)", count)
