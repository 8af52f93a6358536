"""Password complexity rule shared by registration, admin creation and password change."""

from __future__ import annotations

import re

PASSWORD_SYMBOLS = "!@#$%^&*"
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 16
PASSWORD_RULE_MESSAGE = "Password: 8-16 chars, 1 uppercase, 1 special character"

# At least one uppercase letter and one symbol; only letters, digits and the symbol set.
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[A-Z])(?=.*[!@#$%^&*])[A-Za-z\d!@#$%^&*]"
    rf"{{{PASSWORD_MIN_LEN},{PASSWORD_MAX_LEN}}}$"
)


def is_valid_password(raw: str | None) -> bool:
    return isinstance(raw, str) and PASSWORD_PATTERN.fullmatch(raw) is not None
