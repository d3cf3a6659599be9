"""Symptom catalogue for daily symptom logging.

Each category carries a display label, an icon and the symptom names that
may be logged under it.  Some names (``acne``, ``nausea``) appear in more
than one category.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class SymptomCategory:
    label: str
    icon: str
    symptoms: tuple[str, ...]


SYMPTOM_CATEGORIES: dict[str, SymptomCategory] = {
    "mood": SymptomCategory(
        label="Mood",
        icon="😊",
        symptoms=(
            "happy", "calm", "energetic", "sensitive", "sad", "anxious",
            "irritable", "mood_swings", "depressed", "emotional", "confident",
            "apathetic", "confused", "frisky", "grateful", "self_critical",
        ),
    ),
    "physical": SymptomCategory(
        label="Physical",
        icon="💪",
        symptoms=(
            "cramps", "headache", "migraine", "backache", "bloating",
            "breast_tenderness", "fatigue", "acne", "hot_flashes",
            "joint_pain", "muscle_pain", "nausea", "dizziness", "chills",
        ),
    ),
    "discharge": SymptomCategory(
        label="Discharge",
        icon="💧",
        symptoms=(
            "no_discharge", "sticky", "creamy", "egg_white", "watery",
            "unusual_smell", "unusual_color",
        ),
    ),
    "energy": SymptomCategory(
        label="Energy",
        icon="⚡",
        symptoms=("high_energy", "normal_energy", "low_energy", "exhausted"),
    ),
    "sleep": SymptomCategory(
        label="Sleep",
        icon="😴",
        symptoms=(
            "good_sleep", "poor_sleep", "insomnia", "vivid_dreams",
            "night_sweats", "trouble_falling_asleep", "waking_up_early",
        ),
    ),
    "cravings": SymptomCategory(
        label="Cravings",
        icon="🍫",
        symptoms=("sweet", "salty", "chocolate", "carbs", "spicy", "no_cravings"),
    ),
    "sexual": SymptomCategory(
        label="Sexual Activity",
        icon="❤️",
        symptoms=(
            "high_libido", "normal_libido", "low_libido",
            "protected_sex", "unprotected_sex", "masturbation",
        ),
    ),
    "digestive": SymptomCategory(
        label="Digestive",
        icon="🍽️",
        symptoms=(
            "normal_digestion", "constipation", "diarrhea", "gas",
            "nausea", "vomiting", "appetite_increased", "appetite_decreased",
        ),
    ),
    "skin": SymptomCategory(
        label="Skin & Hair",
        icon="✨",
        symptoms=(
            "clear_skin", "acne", "oily_skin", "dry_skin",
            "good_hair_day", "bad_hair_day", "oily_hair",
        ),
    ),
    "exercise": SymptomCategory(
        label="Exercise",
        icon="🏃",
        symptoms=("worked_out", "light_activity", "rest_day", "yoga", "walking"),
    ),
}


class UnknownSymptomError(ValueError):
    """Raised when a category or symptom is not in the catalogue."""


def symptom_display_name(symptom: str) -> str:
    """Turn a snake_case symptom key into a title: ``egg_white`` → ``Egg White``."""
    return " ".join(word[:1].upper() + word[1:] for word in symptom.split("_"))


def validate_symptom(category: str, symptom: str) -> None:
    """Check that ``symptom`` may be logged under ``category``.

    Raises:
        UnknownSymptomError: If either name is not in the catalogue.
    """
    entry = SYMPTOM_CATEGORIES.get(category)
    if entry is None:
        raise UnknownSymptomError(f"Unknown symptom category: {category!r}")
    if symptom not in entry.symptoms:
        raise UnknownSymptomError(
            f"Unknown symptom {symptom!r} for category {category!r}"
        )


@dataclass(frozen=True)
class LoggedSymptom:
    category: str
    symptom: str
    intensity: int | None = None  # 1-3 where the symptom has a scale


@dataclass
class SymptomEntry:
    """All symptoms logged for one calendar day."""

    day: date
    symptoms: list[LoggedSymptom] = field(default_factory=list)
    notes: str | None = None
