"""Daily insight selection and phase display metadata.

Insights are picked from a fixed table keyed by cycle phase.  A separate
"period coming soon" insight is appended when the predicted period is close.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.menstrual.config_loader import CycleConfig
from src.menstrual.records import CycleData, CyclePhase, DailyInsight, InsightType

WELCOME_INSIGHT = DailyInsight(
    title="Welcome! Let's get started",
    message="Log your period to start tracking your cycle and get personalized insights.",
    type=InsightType.info,
    icon="👋",
)

# The menstrual title is completed with the cycle day at selection time.
PHASE_INSIGHTS: dict[CyclePhase, DailyInsight] = {
    CyclePhase.menstrual: DailyInsight(
        title="Period Day",
        message="Take it easy. Warm drinks and gentle stretching can help with cramps.",
        type=InsightType.tip,
        icon="🌸",
    ),
    CyclePhase.follicular: DailyInsight(
        title="Rising Energy",
        message="Your energy is increasing! Great time to start new projects or try new workouts.",
        type=InsightType.info,
        icon="🌱",
    ),
    CyclePhase.ovulation: DailyInsight(
        title="Peak Fertility",
        message="You may feel more social and energetic. Your fertile window is now.",
        type=InsightType.info,
        icon="✨",
    ),
    CyclePhase.luteal: DailyInsight(
        title="Winding Down",
        message="Focus on self-care. Some PMS symptoms may appear in the coming days.",
        type=InsightType.tip,
        icon="🍂",
    ),
}


@dataclass(frozen=True)
class PhaseInfo:
    label: str
    color: str
    description: str


PHASE_INFO: dict[CyclePhase, PhaseInfo] = {
    CyclePhase.menstrual: PhaseInfo(
        label="Menstrual",
        color="#FF6B6B",
        description="Your period days. Rest and self-care recommended.",
    ),
    CyclePhase.follicular: PhaseInfo(
        label="Follicular",
        color="#4ECDC4",
        description="Energy increasing. Great time for new projects.",
    ),
    CyclePhase.ovulation: PhaseInfo(
        label="Ovulation",
        color="#FFE66D",
        description="Peak fertility and energy. Social activities are ideal.",
    ),
    CyclePhase.luteal: PhaseInfo(
        label="Luteal",
        color="#9B59B6",
        description="Winding down. Focus on completing tasks.",
    ),
}


def cycle_phase_info(phase: CyclePhase | str) -> PhaseInfo:
    """Return display label, colour and description for a phase.

    Raises:
        ValueError: If ``phase`` is not a known phase name.
    """
    return PHASE_INFO[CyclePhase(phase)]


def _phase_insight(cycle_data: CycleData) -> DailyInsight:
    insight = PHASE_INSIGHTS[cycle_data.cycle_phase]
    if cycle_data.cycle_phase is CyclePhase.menstrual:
        return DailyInsight(
            title=f"{insight.title} {cycle_data.current_cycle_day}",
            message=insight.message,
            type=insight.type,
            icon=insight.icon,
        )
    return insight


def _approaching_insight(days: int) -> DailyInsight:
    plural = "" if days == 1 else "s"
    return DailyInsight(
        title="Period Coming Soon",
        message=f"Your period is predicted to start in {days} day{plural}.",
        type=InsightType.prediction,
        icon="📅",
    )


def compute_daily_insights(
    cycle_data: CycleData, config: CycleConfig | None = None
) -> list[DailyInsight]:
    """Select the insights to show for a cycle view.

    Args:
        cycle_data: Output of ``compute_cycle_data``.
        config:     Tunables; supplies the "coming soon" threshold.

    Returns:
        The welcome insight when nothing is logged; otherwise exactly one
        phase insight, followed by the "coming soon" insight when the next
        period is at most ``period_approaching_days`` away.
    """
    cfg = config or CycleConfig()
    if cycle_data.cycle_count == 0:
        return [WELCOME_INSIGHT]

    insights = [_phase_insight(cycle_data)]

    days = cycle_data.days_until_next_period
    if days is not None and days <= cfg.period_approaching_days:
        insights.append(_approaching_insight(days))

    return insights
