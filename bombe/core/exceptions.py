"""
Bombe Exceptions
=================

Error hierarchy for the Bombe key-search engine. Input-validation errors
are raised before a search starts; :class:`InvalidCharacterError` and
:class:`InvalidWiringError` signal violated core invariants.
"""

from __future__ import annotations


class BombeError(Exception):
    """Base class for every error raised by the Bombe packages."""


class MissingMessageError(BombeError):
    """No ciphertext was supplied."""


class InsufficientRotorsError(BombeError):
    """The rotor pool holds fewer than three distinct rotors."""


class InsufficientReflectorsError(BombeError):
    """The reflector pool is empty."""


class UnknownRotorNameError(BombeError, LookupError):
    """A rotor name is not present in the rotor table."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Rotor {name!r} does not exist")
        self.name = name


class UnknownReflectorNameError(BombeError, LookupError):
    """A reflector name is not present in the rotor table."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Reflector {name!r} does not exist")
        self.name = name


class InvalidCharacterError(BombeError, ValueError):
    """A character outside A-Z reached the machine or the analyzer."""

    def __init__(self, char: str, context: str = "input") -> None:
        super().__init__(f"Invalid character {char!r} in {context}: only A-Z is supported")
        self.char = char


class InvalidWiringError(BombeError, ValueError):
    """A rotor mapping is not a 26-letter permutation of A-Z."""
