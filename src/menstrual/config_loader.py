"""Load, validate, and hot-reload the cycle prediction tunables.

The config lives in ``cycle_config.yaml`` alongside this module.  It is
loaded once on first use and cached.  Call ``reload_cycle_config()`` to
re-read it after an edit; no restart required.

Usage::

    from src.menstrual.config_loader import get_cycle_config

    config = get_cycle_config()
    config.max_cycle_sample_days   # 45
    config.luteal_days             # 14
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger("luna.menstrual.config")

_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"


@dataclass(frozen=True)
class CycleConfig:
    """Validated prediction tunables.

    Defaults match the bundled ``cycle_config.yaml`` so the predictor can
    run without touching disk.

    Attributes:
        version:                     Config schema version string.
        max_cycle_sample_days:       Upper bound for a cycle-length sample.
        max_period_sample_days:      Upper bound for a period-length sample.
        open_period_ceiling_days:    Open periods older than this are not "ongoing".
        luteal_days:                 Fixed luteal tail used to place ovulation.
        ovulation_half_window_days:  Days either side of ovulation in the ovulation phase.
        clamp_short_cycles:          Clamp the ovulation day for very short cycles.
        min_follicular_days:         Days after the period kept before ovulation when clamping.
        fertile_days_before:         Fertile days before ovulation.
        fertile_days_after:          Fertile days after ovulation.
        medium_confidence_cycles:    Logged periods needed for medium confidence.
        high_confidence_cycles:      Logged periods needed for high confidence.
        period_approaching_days:     Threshold for the "period coming soon" insight.
    """

    version: str = "1.0"
    max_cycle_sample_days: int = 45
    max_period_sample_days: int = 10
    open_period_ceiling_days: int = 10
    luteal_days: int = 14
    ovulation_half_window_days: int = 2
    clamp_short_cycles: bool = False
    min_follicular_days: int = 4
    fertile_days_before: int = 5
    fertile_days_after: int = 1
    medium_confidence_cycles: int = 2
    high_confidence_cycles: int = 3
    period_approaching_days: int = 3
    _raw: dict = field(default_factory=dict, repr=False, compare=False)


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Missing keys fall back to the dataclass defaults.  Every problem is
    collected before raising so one edit can fix them all.

    Args:
        raw: Parsed YAML dict.

    Returns:
        Validated CycleConfig instance.

    Raises:
        ConfigValidationError: If any value is invalid.
    """
    errors: list[str] = []
    defaults = CycleConfig()

    def _int(section: dict, key: str, path: str, default: int, minimum: int) -> int:
        value = section.get(key, default)
        if isinstance(value, bool):
            errors.append(f"{path} must be an integer, got {value!r}")
            return default
        try:
            number = int(value)
        except (TypeError, ValueError):
            errors.append(f"{path} must be an integer, got {value!r}")
            return default
        if number < minimum:
            errors.append(f"{path} = {number} must be >= {minimum}")
        return number

    def _section(parent: dict, key: str, path: str) -> dict:
        value = parent.get(key) or {}
        if not isinstance(value, dict):
            errors.append(f"'{path}' must be a mapping")
            return {}
        return value

    version = str(raw.get("version", defaults.version))

    cl_raw = _section(raw, "cycle_length", "cycle_length")
    pl_raw = _section(raw, "period_length", "period_length")
    ph_raw = _section(raw, "phases", "phases")
    fw_raw = _section(raw, "fertile_window", "fertile_window")
    conf_raw = _section(fw_raw, "confidence", "fertile_window.confidence")
    in_raw = _section(raw, "insights", "insights")

    clamp = ph_raw.get("clamp_short_cycles", defaults.clamp_short_cycles)
    if not isinstance(clamp, bool):
        errors.append(f"phases.clamp_short_cycles must be true/false, got {clamp!r}")
        clamp = defaults.clamp_short_cycles

    config = CycleConfig(
        version=version,
        max_cycle_sample_days=_int(
            cl_raw, "max_sample_days", "cycle_length.max_sample_days",
            defaults.max_cycle_sample_days, 1,
        ),
        max_period_sample_days=_int(
            pl_raw, "max_sample_days", "period_length.max_sample_days",
            defaults.max_period_sample_days, 1,
        ),
        open_period_ceiling_days=_int(
            pl_raw, "open_period_ceiling_days", "period_length.open_period_ceiling_days",
            defaults.open_period_ceiling_days, 1,
        ),
        luteal_days=_int(
            ph_raw, "luteal_days", "phases.luteal_days", defaults.luteal_days, 1,
        ),
        ovulation_half_window_days=_int(
            ph_raw, "ovulation_half_window_days", "phases.ovulation_half_window_days",
            defaults.ovulation_half_window_days, 0,
        ),
        clamp_short_cycles=clamp,
        min_follicular_days=_int(
            ph_raw, "min_follicular_days", "phases.min_follicular_days",
            defaults.min_follicular_days, 0,
        ),
        fertile_days_before=_int(
            fw_raw, "days_before_ovulation", "fertile_window.days_before_ovulation",
            defaults.fertile_days_before, 0,
        ),
        fertile_days_after=_int(
            fw_raw, "days_after_ovulation", "fertile_window.days_after_ovulation",
            defaults.fertile_days_after, 0,
        ),
        medium_confidence_cycles=_int(
            conf_raw, "medium_min_cycles", "fertile_window.confidence.medium_min_cycles",
            defaults.medium_confidence_cycles, 1,
        ),
        high_confidence_cycles=_int(
            conf_raw, "high_min_cycles", "fertile_window.confidence.high_min_cycles",
            defaults.high_confidence_cycles, 1,
        ),
        period_approaching_days=_int(
            in_raw, "period_approaching_days", "insights.period_approaching_days",
            defaults.period_approaching_days, 0,
        ),
        _raw=raw,
    )

    if config.high_confidence_cycles < config.medium_confidence_cycles:
        errors.append(
            "fertile_window.confidence.high_min_cycles must be >= medium_min_cycles"
        )

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return config


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the cycle config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.

    Returns:
        Validated CycleConfig instance.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the global CycleConfig, loading it on first call.

    Thread-safe.  Use ``reload_cycle_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the cycle config and replace the global singleton.

    If validation fails, the old config is retained and the error is
    re-raised.

    Args:
        path: Override path to YAML. Defaults to bundled cycle_config.yaml.

    Returns:
        The newly loaded CycleConfig.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_cycle_config(path)
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded cycle config: %s → %s", old_version, new_config.version)
    return new_config
