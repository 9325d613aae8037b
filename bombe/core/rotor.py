"""
Rotors and the Rotor Table
===========================

:class:`Rotor` models one Enigma wheel (or reflector) as a fixed letter
permutation. Wirings are held as two 26-entry index tables, forward and
inverse, so that a rotor pass is a single list lookup plus modular
arithmetic.

:class:`RotorTable` is the named registry of the historical Enigma I
wheels I-VI and reflectors UKW-A/B/C. Rotor and reflector names live in
separate namespaces.

Wiring data:
    - Rotors I-III (1930), IV-V (1938), VI (1939, Kriegsmarine).
    - UKW-A, UKW-B, UKW-C reflectors.

Rotor VI historically carries two notches (Z and M); this table keeps a
single notch at Z.

References:
    - Hamer, D. H., Sullivan, G., & Weierud, F. (1998). Enigma Variations:
      An Extended Family of Machines. Cryptologia, 22(3), 211-229.
    - Rijmenants, D. Technical details of the Enigma machine.
      https://www.ciphermachinesandcryptology.com/en/enigmatech.htm
"""

from __future__ import annotations

import string
from typing import Iterable, Iterator, Optional

from bombe.core.exceptions import (
    InvalidCharacterError,
    InvalidWiringError,
    UnknownReflectorNameError,
    UnknownRotorNameError,
)

ALPHABET: str = string.ascii_uppercase
ALPHABET_SIZE: int = 26


def letter_index(letter: str, context: str = "input") -> int:
    """Return the 0-25 index of an upper-case letter.

    Raises:
        InvalidCharacterError: If *letter* is not a single A-Z character.
    """
    if len(letter) != 1 or not "A" <= letter <= "Z":
        raise InvalidCharacterError(letter, context)
    return ord(letter) - 65


def validate_text(text: str, context: str = "message") -> str:
    """Return *text* unchanged if it consists only of A-Z letters."""
    for char in text:
        if not "A" <= char <= "Z":
            raise InvalidCharacterError(char, context)
    return text


class Rotor:
    """An immutable Enigma wheel wiring with a single turnover notch.

    Position ``i`` of *mapping* gives the output letter for input letter
    ``'A' + i``. The rotor notches when its position equals
    :attr:`turnover_position`, i.e. one past the notch letter.

    Reflectors are represented by the same type; only :meth:`forward` is
    used for them, and their wiring must be an involution without fixed
    points (checked by :class:`RotorTable`).

    Args:
        description:      Human-readable name, e.g. ``"Rotor I (1930)"``.
        mapping:          26-letter permutation of A-Z.
        turnover_letter:  Notch letter (A-Z).
        name:             Short registry name, e.g. ``"1"``.

    Raises:
        InvalidWiringError: If *mapping* is not a permutation of A-Z.
        InvalidCharacterError: If *turnover_letter* is not A-Z.
    """

    __slots__ = (
        "description",
        "name",
        "mapping",
        "turnover_letter",
        "turnover_position",
        "forward_table",
        "inverse_table",
    )

    def __init__(
        self,
        description: str,
        mapping: str,
        turnover_letter: str,
        name: Optional[str] = None,
    ) -> None:
        if len(mapping) != ALPHABET_SIZE:
            raise InvalidWiringError(
                f"{description}: mapping must have 26 letters, got {len(mapping)}"
            )
        if sorted(mapping) != list(ALPHABET):
            raise InvalidWiringError(
                f"{description}: mapping is not a permutation of A-Z"
            )

        self.description = description
        self.name = name if name is not None else description
        self.mapping = mapping
        self.turnover_letter = turnover_letter
        self.turnover_position = (
            letter_index(turnover_letter, "turnover letter") + 1
        ) % ALPHABET_SIZE

        self.forward_table: tuple[int, ...] = tuple(ord(c) - 65 for c in mapping)
        inverse = [0] * ALPHABET_SIZE
        for i, j in enumerate(self.forward_table):
            inverse[j] = i
        self.inverse_table: tuple[int, ...] = tuple(inverse)

    # ------------------------------------------------------------------ #
    #  Letter permutation
    # ------------------------------------------------------------------ #

    def forward(self, letter: str) -> str:
        """Map *letter* through the wiring (entry plate towards reflector)."""
        return self.mapping[letter_index(letter)]

    def inverse(self, letter: str) -> str:
        """Map *letter* back through the wiring (reflector towards entry plate)."""
        return ALPHABET[self.inverse_table[letter_index(letter)]]

    def forward_index(self, index: int) -> int:
        return self.forward_table[index]

    def inverse_index(self, index: int) -> int:
        return self.inverse_table[index]

    def turnover(self, position: int) -> bool:
        """Whether the rotor engages the next rotor at *position*."""
        return position == self.turnover_position

    # ------------------------------------------------------------------ #
    #  Reflector properties
    # ------------------------------------------------------------------ #

    @property
    def is_involution(self) -> bool:
        """True when applying the wiring twice yields the identity."""
        return all(
            self.forward_table[j] == i for i, j in enumerate(self.forward_table)
        )

    @property
    def has_fixed_point(self) -> bool:
        """True when some letter is wired to itself."""
        return any(i == j for i, j in enumerate(self.forward_table))

    def __repr__(self) -> str:
        return f"Rotor(name={self.name!r}, description={self.description!r})"

    def __str__(self) -> str:
        return self.description


# ===================================================================== #
#  Registry
# ===================================================================== #


class RotorTable:
    """Named registry of rotors and reflectors.

    Usage::

        table = RotorTable.default()
        rotors = table.rotors(["1", "2", "3"])
        reflector = table.reflector("B")
    """

    def __init__(self) -> None:
        self._rotors: dict[str, Rotor] = {}
        self._reflectors: dict[str, Rotor] = {}

    def add_rotor(self, rotor: Rotor) -> Rotor:
        self._rotors[rotor.name] = rotor
        return rotor

    def add_reflector(self, reflector: Rotor) -> Rotor:
        """Register a reflector after checking it is a proper Umkehrwalze.

        Raises:
            InvalidWiringError: If the wiring is not an involution or
                wires a letter to itself.
        """
        if not reflector.is_involution or reflector.has_fixed_point:
            raise InvalidWiringError(
                f"{reflector.description}: a reflector must be an involution "
                f"with no fixed point"
            )
        self._reflectors[reflector.name] = reflector
        return reflector

    # ------------------------------------------------------------------ #
    #  Lookup
    # ------------------------------------------------------------------ #

    def rotor(self, name: str) -> Rotor:
        try:
            return self._rotors[name.strip()]
        except KeyError:
            raise UnknownRotorNameError(name) from None

    def reflector(self, name: str) -> Rotor:
        try:
            return self._reflectors[name.strip()]
        except KeyError:
            raise UnknownReflectorNameError(name) from None

    def rotors(self, names: Iterable[str]) -> list[Rotor]:
        """Resolve several rotor names, preserving order."""
        return [self.rotor(name) for name in names]

    def reflectors(self, names: Iterable[str]) -> list[Rotor]:
        """Resolve several reflector names, preserving order."""
        return [self.reflector(name) for name in names]

    @property
    def rotor_names(self) -> list[str]:
        return list(self._rotors)

    @property
    def reflector_names(self) -> list[str]:
        return list(self._reflectors)

    def __iter__(self) -> Iterator[Rotor]:
        yield from self._rotors.values()
        yield from self._reflectors.values()

    def __contains__(self, name: object) -> bool:
        return name in self._rotors or name in self._reflectors

    # ------------------------------------------------------------------ #
    #  Historical table
    # ------------------------------------------------------------------ #

    @classmethod
    def default(cls) -> RotorTable:
        """Build the table of Enigma I rotors I-VI and reflectors A-C."""
        table = cls()
        table.add_rotor(Rotor("Rotor I (1930)", "EKMFLGDQVZNTOWYHXUSPAIBRCJ", "Q", "1"))
        table.add_rotor(Rotor("Rotor II (1930)", "AJDKSIRUXBLHWTMCQGZNPYFVOE", "E", "2"))
        table.add_rotor(Rotor("Rotor III (1930)", "BDFHJLCPRTXVZNYEIWGAKMUSQO", "V", "3"))
        table.add_rotor(Rotor("Rotor IV (1938)", "ESOVPZJAYQUIRHXLNFTGKDCMWB", "J", "4"))
        table.add_rotor(Rotor("Rotor V (1938)", "VZBRGITYUPSDNHLXAWMJQOFECK", "Z", "5"))
        # Single notch; the second notch at M is not modelled.
        table.add_rotor(Rotor("Rotor VI (1939)", "JPGVOUMFYQBENHZRDKASXLICTW", "Z", "6"))

        # Reflectors never turn over; the notch letter is unused.
        table.add_reflector(Rotor("Reflector A", "EJMZALYXVBWFCRQUONTSPIKHGD", "Z", "A"))
        table.add_reflector(Rotor("Reflector B", "YRUHQSLDPXNGOKMIEBFZCWVJAT", "Z", "B"))
        table.add_reflector(Rotor("Reflector C", "FVPJIAOYEDRZXWGCTKUQSBNMHL", "Z", "C"))
        return table


DEFAULT_TABLE: RotorTable = RotorTable.default()
