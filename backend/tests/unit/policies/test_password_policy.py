"""Password complexity rule: 8-16 chars, one uppercase, one symbol."""

from __future__ import annotations

import pytest

from storerate.services._shared.policies.passwords import PASSWORD_RULE_MESSAGE, is_valid_password


@pytest.mark.parametrize(
    "candidate",
    ["Abcdefg!", "Secret@123", "Admin@123", "A" + "b" * 14 + "#"],
)
def test_accepts_compliant_passwords(candidate):
    assert is_valid_password(candidate) is True


@pytest.mark.parametrize(
    "candidate",
    [
        "abcdefgh",  # no uppercase, no symbol
        "Abcdefgh",  # no symbol
        "abcdefg!",  # no uppercase
        "Ab!",  # too short
        "Abcdefghijklmno!x",  # 17 characters
        "",
    ],
)
def test_rejects_non_compliant_passwords(candidate):
    assert is_valid_password(candidate) is False


def test_rejects_non_strings():
    assert is_valid_password(None) is False  # type: ignore[arg-type]


def test_rule_message_describes_the_rule():
    assert "8-16" in PASSWORD_RULE_MESSAGE
