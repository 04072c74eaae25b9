"""Version routing: pins, tenant defaults, global default, and rollback.

The router decides which registered version serves a request. It owns
user pins and tenant configs; it only reads the registry, except for
``set_global_config``, which moves the registry default along with the
global default.

Resolution order for the default ``pin`` strategy:
    1. ``context.version`` (explicit override, always wins)
    2. the user's pin
    3. the tenant's default version
    4. the global default version
    5. the registry's latest version

Other strategies start lower in the same chain:
    tenant-default -> 3, global-default -> 4, latest -> 5

Example:
    router = VersionRouter(registry)
    router.pin_user("alice", "v1.0", reason="prefers old tone")
    router.resolve_version(ExecutionContext(user_id="alice", input="hi"))  # "v1.0"

    # v2.1 misbehaves: move everyone pinned to it back to v2.0
    router.rollback("v2.1", "v2.0")
"""

import logging
import threading

from agentpin.versioning.errors import InvalidStrategyError, VersionNotFoundError
from agentpin.versioning.models import (
    AgentVersion,
    ExecutionContext,
    GlobalConfig,
    RoutingStrategy,
    TenantConfig,
    TenantId,
    UserId,
    UserVersionPin,
)
from agentpin.versioning.registry import VersionRegistry

logger = logging.getLogger(__name__)

# Strategies that still consult each layer of the chain
_PIN_LAYER = frozenset({RoutingStrategy.PIN})
_TENANT_LAYER = _PIN_LAYER | {RoutingStrategy.TENANT_DEFAULT}
_GLOBAL_LAYER = _TENANT_LAYER | {RoutingStrategy.GLOBAL_DEFAULT}


def coerce_strategy(strategy: RoutingStrategy | str) -> RoutingStrategy:
    """Convert a strategy token to RoutingStrategy.

    Raises:
        InvalidStrategyError: If the token is not a known strategy.
    """
    try:
        return RoutingStrategy(strategy)
    except ValueError:
        raise InvalidStrategyError(strategy) from None


class VersionRouter:
    """Resolves the effective version for each request.

    Args:
        registry: Registry used for existence checks and the latest fallback.
        default_strategy: Strategy applied when ``resolve_version`` gets None.
    """

    def __init__(
        self,
        registry: VersionRegistry,
        default_strategy: RoutingStrategy | str = RoutingStrategy.PIN,
    ) -> None:
        self.registry = registry
        self.default_strategy = coerce_strategy(default_strategy)
        self._user_pins: dict[UserId, UserVersionPin] = {}
        self._tenant_configs: dict[TenantId, TenantConfig] = {}
        self._global_config: GlobalConfig | None = None
        self._lock = threading.RLock()

    # =========================================================================
    # GLOBAL DEFAULTS
    # =========================================================================

    def set_global_config(self, config: GlobalConfig) -> None:
        """Store the global config and move the registry default to match.

        The two defaults stay in lockstep only through this call; a later
        ``registry.set_default_version`` leaves the global default behind.

        Raises:
            VersionNotFoundError: If ``config.default_version`` is not registered.
        """
        with self._lock:
            if not self.registry.has(config.default_version):
                raise VersionNotFoundError(
                    config.default_version,
                    f"Default version {config.default_version} not found in registry",
                )
            self._global_config = config
            self.registry.set_default_version(config.default_version)
        logger.info("Global default version set to %s", config.default_version)

    def get_global_config(self) -> GlobalConfig | None:
        with self._lock:
            return self._global_config

    # =========================================================================
    # USER PINS
    # =========================================================================

    def pin_user(
        self, user_id: UserId, version: AgentVersion, reason: str | None = None
    ) -> UserVersionPin:
        """Pin a user to a version, replacing any existing pin.

        Raises:
            VersionNotFoundError: If the version is not registered.
        """
        with self._lock:
            if not self.registry.has(version):
                raise VersionNotFoundError(version)
            pin = UserVersionPin(user_id=user_id, version=version, reason=reason)
            self._user_pins[user_id] = pin
        logger.info("Pinned user %s to %s", user_id, version)
        return pin

    def unpin_user(self, user_id: UserId) -> bool:
        """Remove a user's pin. Returns whether one existed."""
        with self._lock:
            removed = self._user_pins.pop(user_id, None) is not None
        if removed:
            logger.info("Unpinned user %s", user_id)
        return removed

    def get_user_pin(self, user_id: UserId) -> UserVersionPin | None:
        with self._lock:
            return self._user_pins.get(user_id)

    def list_pins(self) -> list[UserVersionPin]:
        """Snapshot of all pins, ordered by user id."""
        with self._lock:
            return [self._user_pins[uid] for uid in sorted(self._user_pins)]

    # =========================================================================
    # TENANTS
    # =========================================================================

    def set_tenant_config(self, tenant_id: TenantId, config: TenantConfig) -> None:
        """Replace a tenant's config wholesale (no field-level merge).

        Raises:
            VersionNotFoundError: If ``config.default_version`` is set but
                not registered.
        """
        with self._lock:
            if config.default_version and not self.registry.has(
                config.default_version
            ):
                raise VersionNotFoundError(
                    config.default_version,
                    f"Tenant default version {config.default_version} "
                    "not found in registry",
                )
            self._tenant_configs[tenant_id] = config
        logger.info(
            "Tenant %s configured (default version: %s)",
            tenant_id,
            config.default_version or "none",
        )

    def get_tenant_config(self, tenant_id: TenantId) -> TenantConfig | None:
        with self._lock:
            return self._tenant_configs.get(tenant_id)

    def remove_tenant_config(self, tenant_id: TenantId) -> bool:
        """Drop a tenant's config. Returns whether one existed."""
        with self._lock:
            return self._tenant_configs.pop(tenant_id, None) is not None

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    def resolve_version(
        self,
        context: ExecutionContext,
        strategy: RoutingStrategy | str | None = None,
    ) -> AgentVersion:
        """Resolve which version handles a request.

        Args:
            context: The request context.
            strategy: Where to enter the fallthrough chain. None uses the
                router's default strategy.

        Returns:
            A registered version identifier.

        Raises:
            VersionNotFoundError: If the explicit version is unregistered, or
                the registry is empty when the chain reaches "latest".
            InvalidStrategyError: If the strategy token is unknown.
        """
        if context.version:
            if not self.registry.has(context.version):
                raise VersionNotFoundError(
                    context.version,
                    f"Requested version {context.version} not found in registry",
                )
            return context.version

        routing = self.default_strategy if strategy is None else coerce_strategy(strategy)

        with self._lock:
            if routing in _PIN_LAYER:
                pin = self._user_pins.get(context.user_id)
                if pin is not None:
                    return pin.version

            if routing in _TENANT_LAYER and context.tenant_id:
                tenant = self._tenant_configs.get(context.tenant_id)
                if tenant is not None and tenant.default_version:
                    return tenant.default_version

            if routing in _GLOBAL_LAYER and self._global_config is not None:
                return self._global_config.default_version

        latest = self.registry.get_latest_version()
        if latest is None:
            raise VersionNotFoundError(None, "No agent versions available in registry")
        return latest

    # =========================================================================
    # MIGRATION / ROLLBACK
    # =========================================================================

    def get_users_pinned_to_version(self, version: AgentVersion) -> list[UserId]:
        """Users currently pinned to exactly this version, sorted."""
        with self._lock:
            return sorted(
                user_id
                for user_id, pin in self._user_pins.items()
                if pin.version == version
            )

    def migrate_users(
        self, from_version: AgentVersion, to_version: AgentVersion
    ) -> int:
        """Re-pin every user on ``from_version`` to ``to_version``.

        Users are moved one at a time from a snapshot. Re-running after a
        completed (or interrupted) migration only moves the users still on
        ``from_version``, so a short count means "safe to run again".
        Migrating a version onto itself moves nobody and returns 0.

        Returns:
            Number of users moved.

        Raises:
            VersionNotFoundError: If ``to_version`` is not registered. No pin
                is touched in that case.
        """
        with self._lock:
            if not self.registry.has(to_version):
                raise VersionNotFoundError(
                    to_version, f"Target version {to_version} not found in registry"
                )
            if from_version == to_version:
                return 0

            migrated = 0
            for user_id in self.get_users_pinned_to_version(from_version):
                self.pin_user(user_id, to_version, f"Migrated from {from_version}")
                migrated += 1

        logger.info(
            "Migrated %d users from %s to %s", migrated, from_version, to_version
        )
        return migrated

    def rollback(self, from_version: AgentVersion, to_version: AgentVersion) -> int:
        """Move users pinned to a bad version back to a safer one.

        Same contract as ``migrate_users``.
        """
        logger.warning("Rolling back pins from %s to %s", from_version, to_version)
        return self.migrate_users(from_version, to_version)
