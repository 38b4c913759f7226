"""
intranet_portal.auth.passwords

Credential helpers.

Responsibilities:
- Hash and verify passwords with bcrypt.
- Enforce the password complexity policy on human-supplied credentials.
- Generate random credentials that satisfy the policy.
"""

from __future__ import annotations

import secrets

import bcrypt

from intranet_portal.errors import ValidationError

MIN_PASSWORD_LENGTH = 6
# bcrypt only accepts the first 72 bytes of a secret.
MAX_PASSWORD_BYTES = 72

_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = "abcdefghijklmnopqrstuvwxyz"
_DIGITS = "0123456789"
_SYMBOLS = "!@#$%&*"


def hash_password(plain_password: str) -> str:
    return bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if len(plain_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def password_policy_violations(password: str) -> list[str]:
    problems: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        problems.append(f"at most {MAX_PASSWORD_BYTES} bytes")
    if not any(c.isupper() for c in password):
        problems.append("one uppercase letter")
    if not any(c.islower() for c in password):
        problems.append("one lowercase letter")
    if not any(c.isdigit() for c in password):
        problems.append("one digit")
    if all(c.isalnum() for c in password):
        problems.append("one symbol")
    return problems


def validate_password(password: str) -> None:
    problems = password_policy_violations(password)
    if problems:
        raise ValidationError("Password must contain " + ", ".join(problems))


def generate_password(length: int = 8) -> str:
    """
    One character from each required class, the rest drawn from all classes,
    shuffled with a CSPRNG.
    """

    alphabet = _UPPER + _LOWER + _DIGITS + _SYMBOLS
    chars = [
        secrets.choice(_UPPER),
        secrets.choice(_LOWER),
        secrets.choice(_DIGITS),
        secrets.choice(_SYMBOLS),
    ]
    chars += [secrets.choice(alphabet) for _ in range(max(length, 4) - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
