# src/pipecompat/core/config.py
"""
Configuration schema and loading for pipecompat.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from pipecompat.compat.catalogs import DEFAULT_CATALOGS, RuleCatalogs
from pipecompat.compat.rules import RuleRegistry, build_rules
from pipecompat.contracts import Severity


def _validate_names(v: list[str], what: str) -> list[str]:
    for name in v:
        if not name.strip():
            raise ValueError(f"{what} must not contain empty names")
    return [name.strip() for name in v]


class CatalogSettings(BaseModel):
    """Extra component types added to the built-in rule catalogs.

    Members are unioned into the defaults; a catalog can never be shrunk
    from configuration.

    Example YAML:
        catalogs:
          batching_outputs: [my_warehouse]
          cdc_inputs: [oracle_cdc]
          sensitive_keywords: [iban]
    """

    model_config = {"frozen": True, "extra": "forbid"}

    batching_outputs: list[str] = Field(default_factory=list, description="Outputs that accept batched messages")
    json_outputs: list[str] = Field(default_factory=list, description="Outputs that require JSON documents")
    database_components: list[str] = Field(
        default_factory=list,
        description="Components that hold their own database connection",
    )
    cdc_inputs: list[str] = Field(default_factory=list, description="Change-data-capture inputs")
    idempotent_outputs: list[str] = Field(
        default_factory=list,
        description="Outputs where replayed events overwrite rather than duplicate",
    )
    blocking_processors: list[str] = Field(
        default_factory=list,
        description="Processors that block their worker on I/O",
    )
    sensitive_keywords: list[str] = Field(
        default_factory=list,
        description="Identifier fragments treated as sensitive in log messages",
    )

    @field_validator(
        "batching_outputs",
        "json_outputs",
        "database_components",
        "cdc_inputs",
        "idempotent_outputs",
        "blocking_processors",
        "sensitive_keywords",
    )
    @classmethod
    def validate_members(cls, v: list[str]) -> list[str]:
        """Catalog members must be non-empty names."""
        return _validate_names(v, "catalog")

    def apply(self, base: RuleCatalogs = DEFAULT_CATALOGS) -> RuleCatalogs:
        """Return ``base`` extended with the configured members."""
        extra = {name: members for name, members in self.model_dump().items() if members}
        # Keywords match lowercased identifiers
        if "sensitive_keywords" in extra:
            extra["sensitive_keywords"] = [k.lower() for k in extra["sensitive_keywords"]]
        return base.extended(**extra) if extra else base


class CompatibilitySettings(BaseModel):
    """Top-level pipecompat configuration.

    Example YAML:
        disabled_rules:
          - http-server-without-sync-response
        min_severity: warning
        catalogs:
          idempotent_outputs: [redis_hash]
    """

    model_config = {"frozen": True}

    disabled_rules: list[str] = Field(
        default_factory=list,
        description="Rule ids removed from the registry",
    )
    min_severity: Severity = Field(
        default=Severity.INFO,
        description="Least severe warning that is reported",
    )
    catalogs: CatalogSettings = Field(
        default_factory=CatalogSettings,
        description="Extra members for the built-in rule catalogs",
    )

    @field_validator("disabled_rules")
    @classmethod
    def validate_disabled_rules(cls, v: list[str]) -> list[str]:
        """Rule ids must be non-empty."""
        return _validate_names(v, "disabled_rules")


def build_registry(settings: CompatibilitySettings) -> RuleRegistry:
    """Build the rule registry described by ``settings``.

    Raises:
        UnknownRuleError: ``disabled_rules`` names a rule that does not exist.
    """
    registry = RuleRegistry(build_rules(settings.catalogs.apply()))
    if settings.disabled_rules:
        registry = registry.without(settings.disabled_rules)
    return registry


def load_settings(config_path: Path) -> CompatibilitySettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (PIPECOMPAT_*) - highest priority
    2. Config file (pipecompat.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: PIPECOMPAT_CATALOGS__CDC_INPUTS for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated CompatibilitySettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="PIPECOMPAT",
        settings_files=[str(config_path)],
        environments=False,  # No [default]/[production] sections
        load_dotenv=False,  # Don't auto-load .env
        merge_enabled=True,  # Deep merge nested dicts
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    # Also filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES", "MERGE_ENABLED"}
    raw_config: dict[str, Any] = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    if isinstance(raw_config.get("catalogs"), dict):
        raw_config["catalogs"] = {str(k).lower(): v for k, v in raw_config["catalogs"].items()}

    return CompatibilitySettings(**raw_config)
