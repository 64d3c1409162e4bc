"""Stand-alone validation helpers for single values."""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Tuple

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PASSWORD_RULES: List[Tuple[Callable[[str], bool], str]] = [
    (lambda p: len(p) >= 8, "At least 8 characters"),
    (lambda p: re.search(r"[A-Z]", p) is not None, "Contains uppercase letter"),
    (lambda p: re.search(r"[a-z]", p) is not None, "Contains lowercase letter"),
    (lambda p: re.search(r"\d", p) is not None, "Contains number"),
    (lambda p: re.search(r"[!@#$%^&*(),.?\":{}|<>]", p) is not None, "Contains special character"),
]


@dataclass(frozen=True)
class PasswordStrength:
    """Password rule check.

    Attributes:
        score: Percentage of rules met (0-100)
        feedback: Description of every unmet rule
        is_valid: True when all rules are met
    """
    score: float
    feedback: List[str] = field(default_factory=list)
    is_valid: bool = False


def is_valid_email(email: str) -> bool:
    return 0 < len(email) <= 254 and EMAIL_RE.match(email) is not None


def password_strength(password: str) -> PasswordStrength:
    """Score ``password`` against PASSWORD_RULES.

    Examples:
        >>> password_strength("abc").feedback
        ['At least 8 characters', 'Contains uppercase letter', 'Contains number', 'Contains special character']
    """
    failed = [message for check, message in PASSWORD_RULES if not check(password)]
    passed = len(PASSWORD_RULES) - len(failed)
    return PasswordStrength(
        score=passed / len(PASSWORD_RULES) * 100,
        feedback=failed,
        is_valid=not failed,
    )


def is_strong_password(password: str) -> bool:
    return password_strength(password).is_valid


def sanitize_input(text: str) -> str:
    """Trim whitespace and drop angle brackets."""
    return re.sub(r"[<>]", "", text.strip())


def format_phone_number(phone: str) -> str:
    """Format a 10-digit number as (XXX) XXX-XXXX; anything else is returned unchanged."""
    digits = re.sub(r"\D", "", phone)
    match = re.fullmatch(r"(\d{3})(\d{3})(\d{4})", digits)
    if match:
        return f"({match.group(1)}) {match.group(2)}-{match.group(3)}"
    return phone


__all__ = [
    "PasswordStrength",
    "is_valid_email",
    "is_strong_password",
    "password_strength",
    "sanitize_input",
    "format_phone_number",
]
