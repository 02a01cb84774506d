"""
Configuration loader for the construction schedule engine.

Loads the phase catalog, trade table, lead times and mandatory delays from
schedule_config.yaml and provides typed access to all configuration
sections. phase_catalog() turns the raw sections into the immutable
PhaseCatalog the schedulers consume.
"""
from pathlib import Path
from typing import Any, Optional
from functools import lru_cache

import yaml

from app.domain.entities.phase import (
    CatalogDefaults,
    MandatoryDelay,
    Measurement,
    Phase,
    PhaseCatalog,
    PhaseGroup,
)
from app.domain.entities.trade import TradeCatalog, TradeType
from app.domain.exceptions import DomainError


# Default config path relative to project root
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "schedule_config.yaml"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


class ScheduleConfig:
    """
    Configuration manager for the schedule engine.

    Loads YAML configuration and provides typed access to all sections.
    Use get_config() to obtain the singleton instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path or DEFAULT_CONFIG_PATH
        self._config: dict = {}
        self._catalog: Optional[PhaseCatalog] = None
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            raise ConfigurationError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(self._config, dict):
            raise ConfigurationError("Config file must contain a YAML mapping")

        self._catalog = None

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load()
        # Clear the cached singleton to force reload on next get_config()
        get_config.cache_clear()

    @property
    def version(self) -> str:
        """Configuration file version."""
        return self._config.get("version", "unknown")

    # =========================================================================
    # Defaults
    # =========================================================================

    @property
    def defaults(self) -> dict:
        """Fallbacks for ids missing from the catalog tables."""
        return self._config.get("defaults", {})

    @property
    def default_duration_days(self) -> int:
        return self.defaults.get("duration_days", 5)

    @property
    def default_trade(self) -> str:
        return self.defaults.get("trade", "autre")

    # =========================================================================
    # Phases
    # =========================================================================

    @property
    def phases(self) -> list:
        """Raw phase definitions, in execution order."""
        return self._config.get("phases", [])

    @property
    def stage_mapping(self) -> dict:
        """Project stage -> first phase to schedule."""
        return self._config.get("stage_mapping", {})

    @property
    def mandatory_delays(self) -> list:
        """Mandatory delay definitions (e.g. concrete curing)."""
        return self._config.get("mandatory_delays", [])

    # =========================================================================
    # Trades
    # =========================================================================

    @property
    def trades(self) -> list:
        """Trade definitions with display name and color."""
        return self._config.get("trades", [])

    @property
    def step_colors(self) -> dict:
        """Per-step color overrides."""
        return self._config.get("step_colors", {})

    def get_trade_color(self, trade_id: str) -> str:
        return self.phase_catalog().trades.color(trade_id)

    # =========================================================================
    # Catalog
    # =========================================================================

    def phase_catalog(self) -> PhaseCatalog:
        """
        Build (once) the immutable PhaseCatalog for this configuration.

        Raises:
            ConfigurationError: If a section is malformed
        """
        if self._catalog is None:
            try:
                self._catalog = self._build_catalog()
            except (KeyError, TypeError, ValueError, DomainError) as e:
                raise ConfigurationError(f"Invalid schedule catalog: {e}")
        return self._catalog

    def _build_catalog(self) -> PhaseCatalog:
        phases = []
        for position, raw in enumerate(self.phases):
            measurement = raw.get("measurement")
            phases.append(Phase(
                id=raw["id"],
                title=raw.get("title", raw["id"]),
                phase_group=PhaseGroup(raw.get("phase_group", PhaseGroup.GROS_OEUVRE.value)),
                position=position,
                default_trade=raw.get("default_trade", self.default_trade),
                default_duration_days=int(raw.get("default_duration_days", self.default_duration_days)),
                supplier_lead_days=int(raw.get("supplier_lead_days", 0)),
                fabrication_lead_days=int(raw.get("fabrication_lead_days", 0)),
                measurement=Measurement(
                    after_phase_id=measurement["after_phase_id"],
                    notes=measurement.get("notes", ""),
                ) if measurement else None,
            ))

        trades = TradeCatalog(
            trades=[TradeType(id=t["id"], name=t["name"], color=t["color"]) for t in self.trades],
            step_colors=self.step_colors,
            default_color=self.defaults.get("trade_color", "#DC2626"),
            default_name=self.defaults.get("trade_name", "Autre"),
        )

        delays = [
            MandatoryDelay(
                phase_id=d["phase_id"],
                after_phase_id=d["after_phase_id"],
                minimum_days=int(d.get("minimum_days", 0)),
                reason=d.get("reason", ""),
            )
            for d in self.mandatory_delays
        ]

        return PhaseCatalog(
            phases=phases,
            trades=trades,
            stage_mapping=self.stage_mapping,
            mandatory_delays=delays,
            defaults=CatalogDefaults(
                duration_days=self.default_duration_days,
                trade=self.default_trade,
                supplier_lead_days=self.defaults.get("supplier_lead_days", 0),
                fabrication_lead_days=self.defaults.get("fabrication_lead_days", 0),
            ),
        )

    # =========================================================================
    # Raw Access
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level config value by key."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to config."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config."""
        return key in self._config


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> ScheduleConfig:
    """
    Get the singleton configuration instance.

    Args:
        config_path: Optional path to config file. Only used on first call.

    Returns:
        ScheduleConfig singleton instance
    """
    path = Path(config_path) if config_path else None
    return ScheduleConfig(path)


def reload_config() -> ScheduleConfig:
    """Reload configuration from disk and return new instance."""
    get_config.cache_clear()
    return get_config()


def get_phase_catalog() -> PhaseCatalog:
    """Phase catalog of the default configuration (FastAPI dependency)."""
    return get_config().phase_catalog()
