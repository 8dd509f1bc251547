"""Steam identifier validation.

A SteamID64 is a 17-digit decimal number. Validation is purely syntactic: it
does not check that the account exists.
"""

from __future__ import annotations

import re

STEAM_ID_PATTERN = re.compile(r"[0-9]{17}")


def is_valid_steam_id(value: str | None) -> bool:
    """Return True if ``value`` is exactly 17 ASCII decimal digits.

    Examples:
        >>> is_valid_steam_id("76561198003344359")
        True
        >>> is_valid_steam_id("7656119800334435")
        False
        >>> is_valid_steam_id(" 76561198003344359")
        False
    """
    if not value:
        return False
    return STEAM_ID_PATTERN.fullmatch(value) is not None
