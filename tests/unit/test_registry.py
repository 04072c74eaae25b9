"""Tests for VersionRegistry."""

import threading

import pytest

from agentpin.versioning.errors import (
    ConfigValidationError,
    InvalidOperationError,
    VersionNotFoundError,
    validate_config,
)
from agentpin.versioning.models import AgentConfig
from agentpin.versioning.registry import VersionRegistry, parse_version


class TestRegister:
    """Tests for register/get/has."""

    def test_register_then_get(self, registry: VersionRegistry, make_config) -> None:
        """A registered config should come back equal."""
        config = make_config("v1.0")
        registry.register(config)

        assert registry.get("v1.0") == config
        assert registry.has("v1.0")
        assert "v1.0" in registry

    def test_unregistered_lookup(self, populated_registry: VersionRegistry) -> None:
        """Misses return None, not an error."""
        assert populated_registry.get("v9.9") is None
        assert not populated_registry.has("v9.9")
        assert "v9.9" not in populated_registry

    def test_first_registration_sets_default(
        self, registry: VersionRegistry, make_config
    ) -> None:
        registry.register(make_config("v2.0"))
        registry.register(make_config("v1.0"))

        assert registry.get_default_version() == "v2.0"

    def test_overwrite_same_version(
        self, registry: VersionRegistry, make_config
    ) -> None:
        """Re-registering an identifier replaces the config."""
        registry.register(make_config("v1.0", prompt="first"))
        registry.register(make_config("v1.0", prompt="second"))

        stored = registry.get("v1.0")
        assert stored is not None
        assert stored.prompt == "second"
        assert len(registry) == 1

    def test_register_accepts_mapping(self, registry: VersionRegistry) -> None:
        stored = registry.register(
            {
                "version": "v1.0",
                "prompt": "Be brief.",
                "provider": "anthropic",
                "model": "claude-3-haiku",
                "temperature": 1.0,
            }
        )

        assert isinstance(stored, AgentConfig)
        assert registry.get("v1.0") == stored


class TestValidation:
    """Tests for schema validation at the registry boundary."""

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("prompt", ""),
            ("provider", "cohere"),
            ("temperature", 2.5),
            ("temperature", -0.1),
        ],
    )
    def test_invalid_config_rejected(
        self, registry: VersionRegistry, make_config, field: str, value: object
    ) -> None:
        """Each violated constraint should name its field."""
        candidate = {**make_config().model_dump(), field: value}

        with pytest.raises(ConfigValidationError) as exc_info:
            registry.register(candidate)

        assert field in exc_info.value.fields
        assert len(registry) == 0
        assert registry.get_default_version() is None

    def test_unvalidated_instance_rejected(
        self, registry: VersionRegistry, make_config
    ) -> None:
        """Instances built without validation are checked again."""
        candidate = AgentConfig.model_construct(
            **{**make_config().model_dump(), "prompt": ""}
        )

        with pytest.raises(ConfigValidationError) as exc_info:
            registry.register(candidate)

        assert exc_info.value.fields == ["prompt"]

    def test_invalid_mapping_rejected(self, registry: VersionRegistry) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            registry.register({"version": "v1.0", "prompt": "", "provider": "openai"})

        assert "prompt" in exc_info.value.fields
        assert "model" in exc_info.value.fields

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_config({"version": ""})

    def test_boundary_temperatures_accepted(self, make_config) -> None:
        assert validate_config(make_config(temperature=0)).temperature == 0
        assert validate_config(make_config(temperature=2)).temperature == 2


class TestDefaultVersion:
    """Tests for the default-version pointer."""

    def test_set_default(self, populated_registry: VersionRegistry) -> None:
        populated_registry.set_default_version("v2.0")

        assert populated_registry.get_default_version() == "v2.0"

    def test_set_unknown_default(self, populated_registry: VersionRegistry) -> None:
        """Unknown versions fail and leave the default unchanged."""
        with pytest.raises(VersionNotFoundError) as exc_info:
            populated_registry.set_default_version("nope")

        assert exc_info.value.version == "nope"
        assert populated_registry.get_default_version() == "v1.0"

    def test_empty_registry_has_no_default(self, registry: VersionRegistry) -> None:
        assert registry.get_default_version() is None


class TestLatestVersion:
    """Tests for get_latest_version."""

    @pytest.mark.parametrize(
        ("versions", "expected"),
        [
            (["v1.0", "v2.0", "v2.1"], "v2.1"),
            (["v1.0", "v10.0", "v2.0"], "v10.0"),
            (["v1.2", "v1.2.3", "v1.2.1"], "v1.2.3"),
            (["1.0", "v0.9"], "1.0"),
            (["canary", "v0.1"], "v0.1"),
        ],
    )
    def test_numeric_ordering(
        self,
        registry: VersionRegistry,
        make_config,
        versions: list[str],
        expected: str,
    ) -> None:
        for version in versions:
            registry.register(make_config(version))

        assert registry.get_latest_version() == expected

    def test_falls_back_to_default(
        self, registry: VersionRegistry, make_config
    ) -> None:
        """With no semver identifiers, the default wins."""
        for version in ("stable", "canary", "beta"):
            registry.register(make_config(version))
        registry.set_default_version("beta")

        assert registry.get_latest_version() == "beta"

    def test_empty_registry(self, registry: VersionRegistry) -> None:
        assert registry.get_latest_version() is None


class TestParseVersion:
    """Tests for parse_version."""

    def test_patch_defaults_to_zero(self) -> None:
        assert parse_version("v3.4") == (3, 4, 0)

    def test_prefix_match(self) -> None:
        """Suffixes after the numeric part are ignored."""
        assert parse_version("v2.1-beta") == (2, 1, 0)

    def test_no_match(self) -> None:
        assert parse_version("latest") is None
        assert parse_version("v2") is None


class TestRemoveAndClear:
    """Tests for remove/list/clear."""

    def test_remove_default_fails(self, populated_registry: VersionRegistry) -> None:
        with pytest.raises(InvalidOperationError):
            populated_registry.remove("v1.0")

        assert populated_registry.has("v1.0")

    def test_remove_non_default(self, populated_registry: VersionRegistry) -> None:
        assert populated_registry.remove("v2.0") is True
        assert not populated_registry.has("v2.0")

    def test_remove_missing(self, populated_registry: VersionRegistry) -> None:
        assert populated_registry.remove("v7.0") is False

    def test_remove_after_reassigning_default(
        self, populated_registry: VersionRegistry
    ) -> None:
        populated_registry.set_default_version("v2.1")

        assert populated_registry.remove("v1.0") is True

    def test_snapshots(self, populated_registry: VersionRegistry) -> None:
        """Returned collections should not alias internal state."""
        versions = populated_registry.get_versions()
        versions.add("v99.0")
        configs = populated_registry.list_configs()
        configs.clear()

        assert populated_registry.get_versions() == {"v1.0", "v2.0", "v2.1"}
        assert len(populated_registry.list_configs()) == 3

    def test_clear(self, populated_registry: VersionRegistry) -> None:
        populated_registry.clear()

        assert len(populated_registry) == 0
        assert populated_registry.get_default_version() is None
        assert populated_registry.get_latest_version() is None


class TestConcurrency:
    """Tests for concurrent registration."""

    def test_parallel_registration(
        self, registry: VersionRegistry, make_config
    ) -> None:
        """No registration should be lost under concurrent writers."""
        configs = [make_config(f"v1.{i}") for i in range(200)]
        threads = [
            threading.Thread(target=registry.register, args=(config,))
            for config in configs
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 200
        assert registry.get_latest_version() == "v1.199"
        assert registry.get_default_version() is not None
