"""Tests for the symptom catalogue."""

from __future__ import annotations

import pytest

from src.menstrual.symptoms import (
    SYMPTOM_CATEGORIES,
    UnknownSymptomError,
    symptom_display_name,
    validate_symptom,
)


class TestSymptomDisplayName:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("cramps", "Cramps"),
            ("breast_tenderness", "Breast Tenderness"),
            ("trouble_falling_asleep", "Trouble Falling Asleep"),
        ],
    )
    def test_snake_case_to_title(self, key: str, expected: str) -> None:
        assert symptom_display_name(key) == expected


class TestValidateSymptom:
    def test_known_symptom_passes(self) -> None:
        validate_symptom("physical", "cramps")

    def test_shared_symptom_valid_in_both_categories(self) -> None:
        validate_symptom("physical", "acne")
        validate_symptom("skin", "acne")

    def test_unknown_category(self) -> None:
        with pytest.raises(UnknownSymptomError, match="category"):
            validate_symptom("hormones", "cramps")

    def test_symptom_in_wrong_category(self) -> None:
        with pytest.raises(UnknownSymptomError):
            validate_symptom("mood", "cramps")

    def test_error_is_a_value_error(self) -> None:
        assert issubclass(UnknownSymptomError, ValueError)


class TestCatalogue:
    def test_ten_categories(self) -> None:
        assert len(SYMPTOM_CATEGORIES) == 10

    def test_symptom_names_are_snake_case(self) -> None:
        for category in SYMPTOM_CATEGORIES.values():
            for name in category.symptoms:
                assert name == name.lower()
                assert " " not in name
