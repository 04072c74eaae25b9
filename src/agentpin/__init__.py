"""Versioned agent configuration with per-user, per-tenant and global routing.

Each request is served by one immutable agent version (prompt, model,
parameters) chosen by a priority chain: explicit override -> user pin ->
tenant default -> global default -> latest registered version. Pins can be
migrated or rolled back in bulk.

Structure:
- agentpin/versioning/: Resolution core (no I/O)
  - models.py: AgentConfig, pins, tenant/global configs, ExecutionContext
  - errors.py: Typed errors and the config schema validator
  - registry.py: VersionRegistry
  - router.py: VersionRouter
  - builder.py: Fluent setup (create_agent_system)

- agentpin/agent/: Execution on top of the core
  - config.py: Settings via pydantic-settings
  - providers.py: OpenAI / Anthropic completion providers
  - sinks.py: Execution log sinks
  - executor.py: AgentExecutor

- agentpin/lib/: Parametric utilities (throttle, metrics)
"""
