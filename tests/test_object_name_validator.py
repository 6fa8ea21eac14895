"""Tests for object name validation.

- Length bounds are 1..256 UTF-8 bytes inclusive
- "/", "\\" and NUL are refused anywhere in the name
- Length is checked before characters
"""

from __future__ import annotations

import pytest

from catly.validators.object_name import (
    MAX_OBJECT_NAME_LENGTH,
    NAME_CHARACTERS_MESSAGE,
    NAME_LENGTH_MESSAGE,
    validate_object_name,
)
from catly.validators.types import RejectionKind


class TestLengthBounds:
    """Tests for name length limits."""

    def test_empty_name_rejected(self) -> None:
        """An empty name is too short."""
        rejection = validate_object_name("")

        assert rejection is not None
        assert rejection.kind == RejectionKind.NAME_LENGTH
        assert rejection.message == "image name should be between 1 and 256 characters"
        assert rejection.details == {"length_bytes": 0}

    def test_single_character_accepted(self) -> None:
        """A one-character name is the shortest valid name."""
        assert validate_object_name("a") is None

    def test_max_length_accepted(self) -> None:
        """A 256-character name is accepted."""
        assert validate_object_name("a" * MAX_OBJECT_NAME_LENGTH) is None

    def test_over_max_length_rejected(self) -> None:
        """A 257-character name is rejected."""
        rejection = validate_object_name("a" * (MAX_OBJECT_NAME_LENGTH + 1))

        assert rejection is not None
        assert rejection.kind == RejectionKind.NAME_LENGTH
        assert rejection.message == NAME_LENGTH_MESSAGE
        assert rejection.details["length_bytes"] == 257

    def test_length_counts_utf8_bytes(self) -> None:
        """A name of 200 two-byte characters is 400 bytes and too long."""
        name = "é" * 200

        rejection = validate_object_name(name)

        assert rejection is not None
        assert rejection.kind == RejectionKind.NAME_LENGTH
        assert rejection.details == {"length_bytes": 400}

    def test_multibyte_name_at_byte_limit_accepted(self) -> None:
        """Multi-byte names are accepted while their encoding fits."""
        name = "猫" * 85 + "a"

        assert len(name.encode("utf-8")) == MAX_OBJECT_NAME_LENGTH
        assert validate_object_name(name) is None


class TestCharacters:
    """Tests for unsafe characters."""

    @pytest.mark.parametrize(
        "name",
        ["a/b.jpg", "/cat.jpg", "cat.jpg/", "..\\x.jpg", "a\\b", "cat\x00.jpg", "../etc/passwd"],
    )
    def test_unsafe_characters_rejected(self, name: str) -> None:
        """Separators and NUL are refused."""
        rejection = validate_object_name(name)

        assert rejection is not None
        assert rejection.kind == RejectionKind.NAME_CHARACTERS
        assert rejection.message == NAME_CHARACTERS_MESSAGE
        assert rejection.message == "image name contains invalid characters"

    @pytest.mark.parametrize("name", ["cat.jpg", "my cat (1).png", "..jpg", "a.b.c.gif", "猫.jpg"])
    def test_ordinary_names_accepted(self, name: str) -> None:
        """Spaces, dots and non-ASCII letters are allowed."""
        assert validate_object_name(name) is None

    def test_length_checked_before_characters(self) -> None:
        """An overlong name with a separator reports the length problem."""
        rejection = validate_object_name("/" * 300)

        assert rejection is not None
        assert rejection.kind == RejectionKind.NAME_LENGTH
