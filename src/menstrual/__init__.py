"""Menstrual cycle tracking for Luna.

Pure prediction logic over logged period history.  Nothing in this package
performs I/O apart from reading its own YAML tunables.

Modules:
    records          — Period/settings records and derived cycle views
    cycle_predictor  — Averages, phase, next period, fertility window, history
    insights         — Daily insight table and phase display metadata
    symptoms         — Symptom catalogue and validation
    calendar         — Month grid with logged/predicted/fertile flags
    config_loader    — Load/validate/hot-reload cycle_config.yaml
"""

from src.menstrual.config_loader import CycleConfig, get_cycle_config
from src.menstrual.cycle_predictor import (
    calculate_fertility_window,
    compute_cycle_data,
    compute_cycle_history,
    determine_cycle_phase,
)
from src.menstrual.insights import compute_daily_insights, cycle_phase_info
from src.menstrual.records import (
    CycleData,
    CycleHistoryEntry,
    CyclePhase,
    DailyInsight,
    FertilityWindow,
    FlowIntensity,
    PeriodRecord,
    SettingsRecord,
)

__all__ = [
    "CycleConfig",
    "get_cycle_config",
    "compute_cycle_data",
    "compute_cycle_history",
    "compute_daily_insights",
    "determine_cycle_phase",
    "calculate_fertility_window",
    "cycle_phase_info",
    "CycleData",
    "CycleHistoryEntry",
    "CyclePhase",
    "DailyInsight",
    "FertilityWindow",
    "FlowIntensity",
    "PeriodRecord",
    "SettingsRecord",
]
