"""Tests for rotor wirings and the rotor table."""

import pytest

from bombe.core.exceptions import (
    InvalidCharacterError,
    InvalidWiringError,
    UnknownReflectorNameError,
    UnknownRotorNameError,
)
from bombe.core.rotor import ALPHABET, Rotor, RotorTable, letter_index, validate_text


class TestRotor:
    @pytest.mark.parametrize("name", ["1", "2", "3", "4", "5", "6"])
    def test_inverse_undoes_forward(self, table, name):
        rotor = table.rotor(name)
        for letter in ALPHABET:
            assert rotor.inverse(rotor.forward(letter)) == letter
            assert rotor.forward(rotor.inverse(letter)) == letter

    def test_forward_uses_wiring(self, table):
        rotor_i = table.rotor("1")
        assert rotor_i.forward("A") == "E"
        assert rotor_i.forward("Z") == "J"
        assert rotor_i.inverse("E") == "A"

    def test_index_tables_match_letters(self, table):
        rotor = table.rotor("3")
        for i, letter in enumerate(ALPHABET):
            assert ALPHABET[rotor.forward_index(i)] == rotor.forward(letter)
            assert ALPHABET[rotor.inverse_index(i)] == rotor.inverse(letter)

    def test_turnover_is_one_past_notch(self, table):
        assert table.rotor("1").turnover_position == letter_index("R")
        assert table.rotor("3").turnover_position == letter_index("W")
        # Notch at Z wraps around to A
        assert table.rotor("5").turnover_position == 0
        assert table.rotor("2").turnover(letter_index("F"))
        assert not table.rotor("2").turnover(letter_index("E"))

    def test_rejects_short_mapping(self):
        with pytest.raises(InvalidWiringError):
            Rotor("broken", "ABC", "A")

    def test_rejects_repeated_letters(self):
        with pytest.raises(InvalidWiringError):
            Rotor("broken", "A" * 26, "A")

    def test_rejects_bad_turnover_letter(self):
        with pytest.raises(InvalidCharacterError):
            Rotor("broken", ALPHABET, "1")

    def test_str_is_description(self, table):
        assert str(table.rotor("1")) == "Rotor I (1930)"
        assert table.rotor("1").name == "1"


class TestReflectors:
    @pytest.mark.parametrize("name", ["A", "B", "C"])
    def test_involution_without_fixed_point(self, table, name):
        reflector = table.reflector(name)
        assert reflector.is_involution
        assert not reflector.has_fixed_point
        for letter in ALPHABET:
            assert reflector.forward(reflector.forward(letter)) == letter
            assert reflector.forward(letter) != letter

    def test_add_reflector_rejects_non_involution(self, table):
        with pytest.raises(InvalidWiringError):
            RotorTable().add_reflector(table.rotor("1"))

    def test_add_reflector_rejects_identity(self):
        with pytest.raises(InvalidWiringError):
            RotorTable().add_reflector(Rotor("identity", ALPHABET, "A"))


class TestRotorTable:
    def test_default_names(self, table):
        assert table.rotor_names == ["1", "2", "3", "4", "5", "6"]
        assert table.reflector_names == ["A", "B", "C"]
        assert len(list(table)) == 9

    def test_lookup_strips_whitespace(self, table):
        assert table.rotor(" 2 ") is table.rotor("2")
        assert table.reflector("B ") is table.reflector("B")

    def test_unknown_rotor(self, table):
        with pytest.raises(UnknownRotorNameError, match="Rotor '7' does not exist") as exc:
            table.rotor("7")
        assert exc.value.name == "7"

    def test_unknown_reflector(self, table):
        with pytest.raises(UnknownReflectorNameError, match="does not exist"):
            table.reflector("D")

    def test_namespaces_are_separate(self, table):
        with pytest.raises(UnknownRotorNameError):
            table.rotor("B")
        with pytest.raises(UnknownReflectorNameError):
            table.reflector("1")

    def test_contains(self, table):
        assert "1" in table
        assert "C" in table
        assert "IX" not in table


class TestValidation:
    def test_letter_index(self):
        assert letter_index("A") == 0
        assert letter_index("Z") == 25

    @pytest.mark.parametrize("bad", ["a", "1", " ", "", "AB", "Ä"])
    def test_letter_index_rejects(self, bad):
        with pytest.raises(InvalidCharacterError):
            letter_index(bad)

    def test_validate_text(self):
        assert validate_text("HELLO") == "HELLO"
        with pytest.raises(InvalidCharacterError, match="message"):
            validate_text("HELLO WORLD")
