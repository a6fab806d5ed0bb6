"""Password requirements and strength scoring."""

import re
from dataclasses import dataclass, fields

COMMON_PASSWORDS = frozenset(
    [
        "password", "password123", "123456", "12345678", "qwerty", "abc123",
        "monkey", "1234567", "letmein", "trustno1", "dragon", "baseball",
        "iloveyou", "master", "sunshine", "ashley", "bailey", "passw0rd",
        "shadow", "123123", "654321", "superman", "qazwsx", "michael",
        "football", "welcome", "jesus", "ninja", "mustang", "password1",
        "admin", "welcome123", "login", "starwars", "123456789", "admin123",
    ]
)

MIN_LENGTH = 8

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

# (upper bound exclusive, label, colour); the last entry catches score 4
STRENGTH_LEVELS = [
    (1, "Very Weak", "#FF3B30"),
    (2, "Weak", "#FF9500"),
    (3, "Fair", "#FFCC00"),
    (4, "Strong", "#34C759"),
    (None, "Very Strong", "#007AFF"),
]


@dataclass
class PasswordRequirements:
    min_length: bool
    has_uppercase: bool
    has_lowercase: bool
    has_number: bool
    has_special_char: bool
    not_common: bool

    def all_met(self) -> bool:
        return all(getattr(self, f.name) for f in fields(self))


@dataclass
class PasswordStrength:
    score: float  # 0-4
    label: str
    color: str
    feedback: list[str]
    is_valid: bool


def check_password_requirements(password: str) -> PasswordRequirements:
    return PasswordRequirements(
        min_length=len(password) >= MIN_LENGTH,
        has_uppercase=bool(_UPPER.search(password)),
        has_lowercase=bool(_LOWER.search(password)),
        has_number=bool(_DIGIT.search(password)),
        has_special_char=bool(_SPECIAL.search(password)),
        not_common=password.lower() not in COMMON_PASSWORDS,
    )


def validate_password(password: str) -> PasswordStrength:
    """Score a password from 0 (very weak) to 4 (very strong).

    Each met requirement adds to the score (length 1, upper 0.5, lower 0.5,
    digit 1, special 1). A common password drops the score to 0 before the
    length bonuses (+0.5 at 12 and at 16 characters) are applied. The
    password is valid only if every requirement is met.
    """
    requirements = check_password_requirements(password)
    feedback: list[str] = []
    score = 0.0

    checks = [
        (requirements.min_length, 1.0, f"Use at least {MIN_LENGTH} characters"),
        (requirements.has_uppercase, 0.5, "Add uppercase letters (A-Z)"),
        (requirements.has_lowercase, 0.5, "Add lowercase letters (a-z)"),
        (requirements.has_number, 1.0, "Add numbers (0-9)"),
        (requirements.has_special_char, 1.0, "Add special characters (!@#$...)"),
    ]
    for met, points, hint in checks:
        if met:
            score += points
        else:
            feedback.append(hint)

    if not requirements.not_common:
        feedback.append("This password is too common")
        score = 0.0

    if len(password) >= 12:
        score += 0.5
    if len(password) >= 16:
        score += 0.5

    score = min(4.0, score)

    label, color = STRENGTH_LEVELS[-1][1:]
    for bound, level_label, level_color in STRENGTH_LEVELS[:-1]:
        if score < bound:
            label, color = level_label, level_color
            break

    is_valid = requirements.all_met()
    if not feedback and is_valid:
        feedback.append("Great password!")

    return PasswordStrength(
        score=score,
        label=label,
        color=color,
        feedback=feedback,
        is_valid=is_valid,
    )


def get_password_strength_percentage(score: float) -> float:
    return score / 4 * 100
