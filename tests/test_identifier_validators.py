"""Tests for SteamID64 format validation."""

import pytest

from app.utils.identifier_validators import is_valid_steam_id


def test_accepts_seventeen_digits() -> None:
    assert is_valid_steam_id("76561198003344359") is True


@pytest.mark.parametrize(
    "value",
    [
        None,
        "",
        "7656119800334435",  # 16 digits
        "765611980033443590",  # 18 digits
        "7656119800334435a",
        " 76561198003344359",
        "76561198003344359\n",
        "-7656119800334435",
        "７６５６１１９８００３３４４３５９",  # full-width digits
        "abc",
    ],
)
def test_rejects_malformed(value) -> None:
    assert is_valid_steam_id(value) is False
