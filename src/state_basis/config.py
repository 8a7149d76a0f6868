"""Configuration loading and management for state-basis.

Configuration sources are merged in priority order:
    1. Defaults (defined in EngineConfig)
    2. Project config (./state-basis.toml)
    3. Explicit config file
    4. Environment variables (STATE_BASIS_* prefix)
    5. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(window_size=100)
    >>> config.window_size
    100
    >>> config.similarity_threshold
    0.88
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

ENV_PREFIX = "STATE_BASIS_"
PROJECT_CONFIG_NAME = "state-basis.toml"


@dataclass(frozen=True)
class EngineConfig:
    """Tunable parameters of the correlation and causality engine.

    None of these are hard invariants. The defaults come from observing
    interactive UIs at roughly 50 frames of history; lower thresholds find
    more relationships (higher recall), higher thresholds fewer.

    Attributes:
        History:
            window_size: Ring buffer length W, in ticks
            min_density: Pulses required in the window before a signal is compared

        Correlation:
            similarity_threshold: Cosine similarity above which a pair is related
            causal_margin: How far lead/lag must beat sync to call a causal leak
            volatility_threshold: Density above which a signal counts as volatile

        Circuit breaker:
            breaker_threshold: Updates per window before a signal is paused
            breaker_window_seconds: Length of the rolling counter window
            breaker_auto_resume: Resume paused signals when the window rolls over

        Causal graph:
            graph_ttl_seconds: Lifetime of synthetic event nodes
            prune_interval_seconds: Minimum spacing between graph prunes

        Influence ranking:
            ranker_max_iterations: Power-iteration cap
            ranker_tolerance: RMS delta at which iteration stops
            ranker_base_weight: Constant added per round so sinks never reach zero

        Reporting:
            report_size: Maximum ranked issues per report
            density_floor: Density a signal needs for the high-frequency fallback
            alert_cooldown_seconds: Minimum spacing between identical alerts

        Scheduling:
            frame_interval_seconds: Tick spacing used by AsyncioScheduler
    """

    # === History ===
    window_size: int = 50
    min_density: int = 2

    # === Correlation ===
    similarity_threshold: float = 0.88
    causal_margin: float = 0.05
    volatility_threshold: int = 25

    # === Circuit Breaker ===
    breaker_threshold: int = 150
    breaker_window_seconds: float = 1.0
    breaker_auto_resume: bool = False

    # === Causal Graph ===
    graph_ttl_seconds: float = 10.0
    prune_interval_seconds: float = 1.0

    # === Influence Ranking ===
    ranker_max_iterations: int = 20
    ranker_tolerance: float = 0.001
    ranker_base_weight: float = 0.01

    # === Reporting ===
    report_size: int = 3
    density_floor: int = 25
    alert_cooldown_seconds: float = 5.0

    # === Scheduling ===
    frame_interval_seconds: float = 0.02

    def __post_init__(self) -> None:
        """Validate engine configuration."""
        if self.window_size < 2:
            raise ValueError("window_size must be at least 2")
        if not 1 <= self.min_density <= self.window_size:
            raise ValueError("min_density must be between 1 and window_size")

        # Similarities are cosines of non-negative vectors, so they live in [0, 1]
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be between 0.0 and 1.0")
        if not 0.0 <= self.causal_margin <= 1.0:
            raise ValueError("causal_margin must be between 0.0 and 1.0")
        if self.volatility_threshold < 0:
            raise ValueError("volatility_threshold must be non-negative")

        if self.breaker_threshold < 1:
            raise ValueError("breaker_threshold must be at least 1")

        positive_fields = [
            "breaker_window_seconds",
            "graph_ttl_seconds",
            "prune_interval_seconds",
            "ranker_tolerance",
            "frame_interval_seconds",
        ]
        for field_name in positive_fields:
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{field_name} must be positive")

        if self.ranker_max_iterations < 1:
            raise ValueError("ranker_max_iterations must be at least 1")
        if self.ranker_base_weight < 0:
            raise ValueError("ranker_base_weight must be non-negative")

        if self.report_size < 1:
            raise ValueError("report_size must be at least 1")
        if self.density_floor < 0:
            raise ValueError("density_floor must be non-negative")
        if self.alert_cooldown_seconds < 0:
            raise ValueError("alert_cooldown_seconds must be non-negative")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# Default engine configuration (singleton)
DEFAULT_CONFIG = EngineConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> EngineConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated EngineConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
        InvalidConfigError: If an environment variable cannot be parsed
    """
    merged: dict = {}

    # 1. Project config
    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        try:
            merged.update(_read_config_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    # 2. Explicit config file (highest priority from files)
    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_read_config_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    # 3. Environment variables
    merged.update(_load_env_vars())

    # 4. Overrides (highest priority), None means "not given"
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return EngineConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _read_config_file(path: Path) -> dict:
    """Load one TOML file with its [engine] table flattened into top-level keys.

    Keys inside [engine] win over top-level keys of the same file.
    """
    data = _load_toml_file(path)
    engine_table = data.pop("engine", None)
    if isinstance(engine_table, dict):
        data.update(engine_table)
    return data


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from STATE_BASIS_* environment variables.

    Every EngineConfig field can be set this way, e.g.
    STATE_BASIS_WINDOW_SIZE=100 or STATE_BASIS_BREAKER_AUTO_RESUME=true.

    Returns:
        Dict of field_name -> parsed_value for any STATE_BASIS_* vars found.
    """
    type_hints = get_type_hints(EngineConfig)

    result: dict[str, Any] = {}

    for field_name in EngineConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            result[field_name] = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    # Bool: accept true/false/1/0/yes/no
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    return value


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If no TOML parser is available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.9-3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
