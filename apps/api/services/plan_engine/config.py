"""
Configuration Service

Loads plan rules and the workout catalog from YAML files.
Allows changing business rules without code changes.

Usage:
    # Get a single rule
    floor = ConfigService.get("plan_rules.race_params.Marathon.long_session_floor")

    # Typed helpers
    bands = ConfigService.get_session_bands(RaceDistance.MARATHON)

    # Reload config without restart
    ConfigService.reload()
"""

import logging
import yaml
from copy import deepcopy
from functools import reduce
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .constants import (
    EXPERIENCE_MULTIPLIERS,
    ExperienceLevel,
    MIN_SUPPORT_SESSION_DISTANCE,
    RACE_PARAMS,
    RECOVERY_RULES,
    RaceDistance,
    SESSION_BANDS,
    TAPER_FACTORS,
    TAPER_LONG_SESSION_FACTORS,
    WORKOUT_OVERHEAD,
)

logger = logging.getLogger(__name__)


class ConfigService:
    """
    Load and cache configuration from YAML files.
    """

    CONFIG_FILES = [
        "plan_rules.yaml",
        "workout_catalog.yaml",
    ]

    _config: Optional[Dict[str, Any]] = None
    _config_dir: Path = Path(__file__).parent.parent.parent / "config"

    @classmethod
    def configure(cls, config_dir: Union[str, Path, None]):
        """Point the service at another config directory and drop the cache."""
        if config_dir:
            cls._config_dir = Path(config_dir)
            cls._config = None
            logger.info(f"Plan config directory set to {cls._config_dir}")

    @classmethod
    def get(cls, key: str = None, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Dot-separated key (e.g., "plan_rules.recovery.frequency")
            default: Default value if key not found

        Returns:
            Configuration value or entire config if no key provided
        """
        if cls._config is None:
            cls._load()

        if key is None:
            return cls._config

        try:
            keys = key.split(".")
            return reduce(lambda d, k: d[k], keys, cls._config)
        except (KeyError, TypeError):
            return default

    @classmethod
    def reload(cls):
        """Reload configuration from files."""
        cls._config = None
        cls._load()
        logger.info("Configuration reloaded")

    @classmethod
    def _load(cls):
        """Load all configuration files, filling gaps from constants."""
        cls._config = cls._defaults()

        for filename in cls.CONFIG_FILES:
            filepath = cls._config_dir / filename
            if not filepath.exists():
                logger.debug(f"Config file not found: {filepath}")
                continue
            with open(filepath, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if data:
                # Namespace is the filename without extension
                namespace = filename.rsplit(".", 1)[0]
                cls._config[namespace] = _merge(cls._config.get(namespace, {}), data)
                logger.debug(f"Loaded config: {filename}")

    @classmethod
    def _defaults(cls) -> Dict[str, Any]:
        """Default configuration from constants (used when YAML is absent)."""
        return {
            "plan_rules": {
                "race_params": {k.value: deepcopy(v) for k, v in RACE_PARAMS.items()},
                "session_bands": {
                    k.value: {n: list(band) for n, band in v.items()}
                    for k, v in SESSION_BANDS.items()
                },
                "experience_multipliers": {k.value: dict(v) for k, v in EXPERIENCE_MULTIPLIERS.items()},
                "recovery": dict(RECOVERY_RULES),
                "taper": {
                    "volume_factors": list(TAPER_FACTORS),
                    "long_session_factors": list(TAPER_LONG_SESSION_FACTORS),
                },
                "workout_overhead": {k.value: v for k, v in WORKOUT_OVERHEAD.items()},
                "min_support_session": MIN_SUPPORT_SESSION_DISTANCE,
            },
            "workout_catalog": {},
        }

    @classmethod
    def set(cls, key: str, value: Any):
        """
        Set a configuration value (in memory only).
        Useful for testing.
        """
        if cls._config is None:
            cls._load()

        keys = key.split(".")
        d = cls._config
        for k in keys[:-1]:
            if k not in d:
                d[k] = {}
            d = d[k]
        d[keys[-1]] = value

    @classmethod
    def get_race_params(cls, distance: RaceDistance) -> Dict[str, Any]:
        """Race-specific caps, floors and quality-session shares."""
        return cls.get(f"plan_rules.race_params.{distance.value}", RACE_PARAMS[distance])

    @classmethod
    def get_session_bands(cls, distance: RaceDistance) -> Dict[int, Tuple[float, float]]:
        """Peak (weekly volume, long session) bands keyed by sessions per week."""
        raw = cls.get(f"plan_rules.session_bands.{distance.value}")
        if not raw:
            return dict(SESSION_BANDS[distance])
        return {int(k): (float(v[0]), float(v[1])) for k, v in raw.items()}

    @classmethod
    def get_experience_multipliers(cls, level: ExperienceLevel) -> Dict[str, float]:
        return cls.get(
            f"plan_rules.experience_multipliers.{level.value}",
            EXPERIENCE_MULTIPLIERS[level],
        )

    @classmethod
    def get_recovery_rules(cls) -> Dict[str, Any]:
        return cls.get("plan_rules.recovery", RECOVERY_RULES)

    @classmethod
    def get_taper_factors(cls) -> Tuple[List[float], List[float]]:
        """(volume factors, long-session factors), race week last."""
        taper = cls.get("plan_rules.taper", {})
        return (
            list(taper.get("volume_factors", TAPER_FACTORS)),
            list(taper.get("long_session_factors", TAPER_LONG_SESSION_FACTORS)),
        )

    @classmethod
    def get_min_support_session(cls) -> float:
        return float(cls.get("plan_rules.min_support_session", MIN_SUPPORT_SESSION_DISTANCE))

    @classmethod
    def get_workout_overhead(cls, workout_type: str, default: float = 1.0) -> float:
        return float(cls.get(f"plan_rules.workout_overhead.{workout_type}", default))

    @classmethod
    def get_catalog(cls) -> Dict[str, Any]:
        """Raw workout catalog (category tree of workout descriptors)."""
        return cls.get("workout_catalog", {}) or {}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay `override` onto a copy of `base`."""
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged
