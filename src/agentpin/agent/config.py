"""Execution settings using pydantic-settings.

Settings are read from the environment and from ``.env`` / ``.env.local``
(local overrides shared). Every variable is prefixed ``AGENTPIN_`` and
named explicitly through ``validation_alias``.

API keys are deliberately absent: provider SDK clients resolve their own
credentials.

Usage:
    from agentpin.agent.config import settings
    print(settings.default_strategy)
"""

import logging
from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agentpin.versioning.models import RoutingStrategy

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Execution-layer settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        extra="ignore",
    )

    @model_validator(mode="after")
    def warn_unthrottled_spacing(self) -> Self:
        """Spacing without a concurrency cap of 1 still allows bursts."""
        if self.min_request_interval > 0 and self.max_concurrent_requests > 1:
            logger.warning(
                "AGENTPIN_MIN_REQUEST_INTERVAL=%.2f with %d concurrent requests "
                "spaces starts but not completions",
                self.min_request_interval,
                self.max_concurrent_requests,
            )
        return self

    # ==========================================================================
    # ROUTING
    # ==========================================================================

    default_strategy: RoutingStrategy | None = Field(
        default=None,
        validation_alias="AGENTPIN_DEFAULT_STRATEGY",
        description="Executor strategy when a request names none (None = router default)",
    )

    # ==========================================================================
    # PROVIDERS
    # ==========================================================================

    anthropic_max_tokens: int = Field(
        default=1024,
        gt=0,
        validation_alias="AGENTPIN_ANTHROPIC_MAX_TOKENS",
        description="max_tokens sent to Anthropic when a config leaves it unset",
    )

    # ==========================================================================
    # RATE LIMITS / CONCURRENCY
    # ==========================================================================

    max_concurrent_requests: int = Field(
        default=5,
        ge=1,
        validation_alias="AGENTPIN_MAX_CONCURRENT_REQUESTS",
        description="Max concurrent provider calls per executor",
    )

    min_request_interval: float = Field(
        default=0.0,
        ge=0.0,
        validation_alias="AGENTPIN_MIN_REQUEST_INTERVAL",
        description="Minimum seconds between provider call starts",
    )


# Singleton instance
settings = Settings.model_validate({})
