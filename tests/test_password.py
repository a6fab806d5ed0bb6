"""Tests for password requirements and strength scoring."""

import pytest

from agape.auth.password import (
    check_password_requirements,
    get_password_strength_percentage,
    validate_password,
)


def test_requirements_all_met():
    requirements = check_password_requirements("Sunny!Day42")

    assert requirements.all_met() is True


def test_requirements_individual_flags():
    requirements = check_password_requirements("abc")

    assert requirements.min_length is False
    assert requirements.has_uppercase is False
    assert requirements.has_lowercase is True
    assert requirements.has_number is False
    assert requirements.has_special_char is False
    assert requirements.not_common is True


def test_common_password_case_insensitive():
    assert check_password_requirements("PassWord123").not_common is False


def test_empty_password():
    strength = validate_password("")

    assert strength.score == 0
    assert strength.label == "Very Weak"
    assert strength.is_valid is False
    assert "Use at least 8 characters" in strength.feedback


def test_strong_password():
    """Test that meeting every requirement scores 4 and is valid."""
    strength = validate_password("Sunny!Day42")

    assert strength.score == 4
    assert strength.label == "Very Strong"
    assert strength.color == "#007AFF"
    assert strength.is_valid is True
    assert strength.feedback == ["Great password!"]


def test_long_password_bonus_capped():
    strength = validate_password("Sunny!Day42-and-more-words")

    assert strength.score == 4


def test_common_password_zeroed_before_length_bonus():
    strength = validate_password("password123")

    assert strength.score == 0
    assert strength.is_valid is False
    assert "This password is too common" in strength.feedback


@pytest.mark.parametrize(
    "password,score,label",
    [
        ("abcdefgh", 1.5, "Weak"),
        ("abcdefg1", 2.5, "Fair"),
        ("Abcdefg1", 3.0, "Strong"),
        ("abcdefghijkl", 2.0, "Fair"),
    ],
)
def test_score_levels(password, score, label):
    strength = validate_password(password)

    assert strength.score == score
    assert strength.label == label


def test_strength_percentage():
    assert get_password_strength_percentage(0) == 0
    assert get_password_strength_percentage(3) == 75
    assert get_password_strength_percentage(4) == 100
