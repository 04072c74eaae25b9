"""Agent execution: resolve a version, run it, record what happened.

The executor is thin orchestration over the versioning core:

1. Ask the router which version serves the request
2. Load that version's config and apply tenant prompt overrides
3. Run the completion through the provider for ``config.provider``
4. Record metrics and hand a log entry to the sink

Provider errors are re-raised unchanged after being logged; the executor
never retries.

Usage:
    system = create_agent_system().register_agent(config).build()
    executor = AgentExecutor(system.registry, system.router, sink=InMemoryLogSink())

    result = await executor.execute(
        ExecuteRequest(context=ExecutionContext(user_id="alice", input="Hello"))
    )
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

from agentpin.agent.config import settings
from agentpin.agent.models import (
    ExecuteRequest,
    ExecutionCost,
    ExecutionMetadata,
    ExecutionResult,
)
from agentpin.agent.providers import CompletionProvider, create_provider
from agentpin.agent.sinks import LoggingLogSink, LogSink, create_log_entry
from agentpin.lib import MetricsCollector, Throttle
from agentpin.versioning.errors import VersionNotFoundError
from agentpin.versioning.models import (
    AgentConfig,
    AgentVersion,
    ExecutionContext,
    RoutingStrategy,
)
from agentpin.versioning.registry import VersionRegistry
from agentpin.versioning.router import VersionRouter

logger = logging.getLogger(__name__)

type ProviderFactory = Callable[[str], CompletionProvider]

UNKNOWN_VERSION = "unknown"


class AgentExecutor:
    """Runs requests against whichever version the router picks.

    Args:
        registry: Source of version configs.
        router: Resolves the version for each request.
        sink: Receives one log entry per execution. Defaults to LoggingLogSink.
        provider_factory: Builds a provider from a config's provider tag.
            Providers are built once per tag and reused.
        throttle: Limits concurrent provider calls. Defaults to one built
            from settings.
        default_strategy: Strategy used when a request names none. When
            neither this nor ``settings.default_strategy`` is set, the
            router applies its own default.
    """

    def __init__(
        self,
        registry: VersionRegistry,
        router: VersionRouter,
        *,
        sink: LogSink | None = None,
        provider_factory: ProviderFactory = create_provider,
        throttle: Throttle | None = None,
        default_strategy: RoutingStrategy | None = None,
    ) -> None:
        self.registry = registry
        self.router = router
        self.sink: LogSink = sink if sink is not None else LoggingLogSink()
        self.metrics = MetricsCollector()
        self._provider_factory = provider_factory
        self._providers: dict[str, CompletionProvider] = {}
        self._throttle = throttle or Throttle(
            max_concurrent=settings.max_concurrent_requests,
            min_interval=settings.min_request_interval,
        )
        self._default_strategy: RoutingStrategy | None = (
            default_strategy or settings.default_strategy
        )

    async def execute(self, request: ExecuteRequest) -> ExecutionResult:
        """Execute one request.

        Raises:
            VersionNotFoundError: If routing fails or ``force_version`` is
                not registered.
            InvalidStrategyError: If the routing strategy is unknown.
            Exception: Whatever the provider raised, unchanged.
        """
        context = request.context
        strategy = request.routing_strategy or self._default_strategy
        start = time.perf_counter()
        version: AgentVersion | None = None
        config: AgentConfig | None = None

        try:
            target = request.force_version or self.router.resolve_version(
                context, strategy
            )
            logger.info(
                "Executing request for user %s (tenant: %s) on %s via %s",
                context.user_id,
                context.tenant_id or "-",
                target,
                "force"
                if request.force_version
                else strategy or self.router.default_strategy,
            )

            config = self.registry.get(target)
            if config is None:
                raise VersionNotFoundError(target, f"Agent version {target} not found")
            version = target

            final_config = self.apply_tenant_overrides(config, context)
            provider = self._get_provider(final_config.provider)

            async with self._throttle:
                completion = await provider.complete(final_config, context.input)

            duration_ms = (time.perf_counter() - start) * 1000
            result = ExecutionResult(
                output=completion.text,
                version=version,
                cost=completion.cost,
                metadata=ExecutionMetadata(duration_ms=duration_ms),
                raw_response=completion.raw_response,
            )
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                "Execution failed for user %s on %s after %.0fms: %s",
                context.user_id,
                version or UNKNOWN_VERSION,
                duration_ms,
                e,
            )
            self.metrics.record(version or UNKNOWN_VERSION, duration_ms, is_error=True)
            failed = ExecutionResult(
                output="",
                version=version or UNKNOWN_VERSION,
                cost=ExecutionCost(
                    model=config.model if config else "unknown",
                    provider=config.provider if config else None,
                ),
                metadata=ExecutionMetadata(
                    timestamp=datetime.now(), duration_ms=duration_ms
                ),
            )
            self._emit(context, failed, e)
            raise

        logger.info(
            "Execution completed on %s: $%.6f, %.0fms, %d/%d tokens",
            version,
            result.cost.amount,
            duration_ms,
            result.cost.input_tokens,
            result.cost.output_tokens,
        )
        self.metrics.record(version, duration_ms, cost_usd=result.cost.amount)
        self._emit(context, result)
        return result

    def apply_tenant_overrides(
        self, config: AgentConfig, context: ExecutionContext
    ) -> AgentConfig:
        """Overlay the tenant's prompt overrides field by field.

        Only fields the tenant actually set are replaced; the registered
        config is left untouched.
        """
        if not context.tenant_id:
            return config

        tenant = self.router.get_tenant_config(context.tenant_id)
        if tenant is None or tenant.prompt_overrides is None:
            return config

        overrides = tenant.prompt_overrides.model_dump(exclude_none=True)
        if not overrides:
            return config
        logger.debug(
            "Applying tenant %s overrides to %s: %s",
            context.tenant_id,
            config.version,
            sorted(overrides),
        )
        return config.model_copy(update=overrides)

    def get_stats(self) -> dict[str, Any]:
        """Execution totals overall and per version."""
        summary = self.metrics.get_summary()
        return {
            "total_executions": summary["total_calls"],
            "total_errors": summary["total_errors"],
            "total_cost": summary["total_cost_usd"],
            "average_duration_ms": summary["avg_duration_ms"],
            "by_version": summary["by_key"],
        }

    def _get_provider(self, provider: str) -> CompletionProvider:
        if provider not in self._providers:
            self._providers[provider] = self._provider_factory(provider)
        return self._providers[provider]

    def _emit(
        self,
        context: ExecutionContext,
        result: ExecutionResult,
        error: BaseException | None = None,
    ) -> None:
        """Forward a log entry; a failing sink never affects the caller."""
        try:
            self.sink.log_execution(create_log_entry(context, result, error))
        except Exception:
            logger.exception("Log sink %s failed", type(self.sink).__name__)
