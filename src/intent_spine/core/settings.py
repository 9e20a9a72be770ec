"""Environment-driven settings for intent-spine.

``IntentSettings`` reads ``INTENT_*`` variables (and a ``.env`` file) for the
deployed package ids, shared object ids, indexer endpoint and logging.

Examples:
    >>> import os
    >>> os.environ["INTENT_INDEXER_URL"] = "https://indexer.example"
    >>> IntentSettings().indexer_url
    'https://indexer.example'

Tags:
    settings, configuration, pydantic, environment, intent-spine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from intent_spine.core.errors import ConfigError
from intent_spine.ledger.packages import DEFAULT_CLOCK_ID, PackageConfig, PackageKey


class IntentSettings(BaseSettings):
    """Settings shared by the workflows, the auto-executor and the CLI-less SDK.

    Fields
    ──────
    <package>                 : Deployed package ids (one per PackageKey)
    package_registry_id       : Shared PackageRegistry object
    factory_id / fee_manager_id : Shared launchpad factory objects
    clock_id                  : Clock object (``0x6``)
    indexer_url               : Backend serving launchpad/proposal records
    indexer_timeout_s         : Per-request timeout for the indexer
    log_level / log_json      : Structlog configuration
    """

    model_config = SettingsConfigDict(
        env_prefix="INTENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Packages ─────────────────────────────────────────────────
    account_protocol: str | None = None
    account_actions: str | None = None
    futarchy_core: str | None = None
    futarchy_actions: str | None = None
    futarchy_governance: str | None = None
    futarchy_governance_actions: str | None = None
    futarchy_oracle_actions: str | None = None
    futarchy_factory: str | None = None
    futarchy_markets_core: str | None = None

    # ── Shared objects ───────────────────────────────────────────
    package_registry_id: str | None = None
    factory_id: str | None = None
    fee_manager_id: str | None = None
    clock_id: str = DEFAULT_CLOCK_ID

    # ── Indexer ──────────────────────────────────────────────────
    indexer_url: str = "http://localhost:9100"
    indexer_timeout_s: float = Field(default=15.0, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "intent-spine"

    def packages(self) -> PackageConfig:
        """Build a validated ``PackageConfig``.

        Raises:
            ConfigError: If any package or shared object id is missing or malformed
        """
        fields = [key.value for key in PackageKey] + [
            "package_registry_id", "factory_id", "fee_manager_id",
        ]
        missing = [name for name in fields if not getattr(self, name)]
        if missing:
            raise ConfigError(
                f"Missing package configuration: {', '.join(missing)}"
            ).with_context(missing=missing)
        try:
            return PackageConfig(clock_id=self.clock_id, **{name: getattr(self, name) for name in fields})
        except PydanticValidationError as e:
            raise ConfigError("Invalid package configuration", cause=e) from e


@lru_cache(maxsize=1)
def get_settings() -> IntentSettings:
    """Process-wide settings, read once."""
    return IntentSettings()
