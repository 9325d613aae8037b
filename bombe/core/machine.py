"""
Enigma I Machine Simulator
===========================

Three-rotor Enigma I without plugboard or ring settings. Rotor C is the
fast (rightmost) rotor and advances on every keystroke; rotor A is the
slow (leftmost) one. Rotors move before each letter is substituted.

Stepping per keystroke:

1. ``pC += 1``; if C is at its turnover position B advances, and if B is
   then at its turnover position A advances.
2. Double step: if C was at its turnover position on the previous
   keystroke and B is one short of its own turnover position, B advances
   again (and carries into A the same way).

Substitution path: C, B, A, reflector, A, B, C (inverse on the way back).
A rotor at position ``p`` maps index ``i`` to ``table[(i + p) % 26] - p``.

References:
    - Rijmenants, D. Enigma stepping and the double-step anomaly.
      https://www.ciphermachinesandcryptology.com/en/enigmatech.htm
"""

from __future__ import annotations

from collections import deque
from contextlib import contextmanager
from typing import Generator, Optional

from bombe.core.models import MachineConfig
from bombe.core.rotor import ALPHABET, Rotor, letter_index


def describe_settings(config: MachineConfig) -> str:
    """Human-readable description of a key, shown with every candidate."""
    return (
        f"KEY: {config.key}\n"
        f"ROTORS: {config.rotor_a}, {config.rotor_b}, {config.rotor_c}\n"
        f"REFLECTOR: {config.reflector}"
    )


class EnigmaMachine:
    """Stateful three-rotor simulator.

    Usage::

        machine = EnigmaMachine(MachineConfig.from_key("AAA", rotors, ukw_b))
        machine.step("A")          # 'B'
        machine.encipher("PPLE")   # 'HSDR'

    Args:
        config: Key to initialise the machine with.
    """

    __slots__ = (
        "_config",
        "_rotor_a",
        "_rotor_b",
        "_rotor_c",
        "_reflector",
        "_pos_a",
        "_pos_b",
        "_pos_c",
    )

    def __init__(self, config: MachineConfig) -> None:
        self.reset(config)

    def reset(self, config: MachineConfig) -> None:
        """Re-initialise rotors, reflector and positions from *config*."""
        self._config = config
        self._rotor_a: Rotor = config.rotor_a
        self._rotor_b: Rotor = config.rotor_b
        self._rotor_c: Rotor = config.rotor_c
        self._reflector: Rotor = config.reflector
        self._pos_a = ord(config.start_a) - 65
        self._pos_b = ord(config.start_b) - 65
        self._pos_c = ord(config.start_c) - 65

    # ------------------------------------------------------------------ #
    #  Stepping
    # ------------------------------------------------------------------ #

    def advance(self) -> tuple[int, int, int]:
        """Move the rotors for one keystroke and return ``(pA, pB, pC)``."""
        rotor_b, rotor_c = self._rotor_b, self._rotor_c

        self._pos_c = (self._pos_c + 1) % 26
        if rotor_c.turnover(self._pos_c):
            self._pos_b = (self._pos_b + 1) % 26
            if rotor_b.turnover(self._pos_b):
                self._pos_a = (self._pos_a + 1) % 26

        # Double step
        if rotor_c.turnover((self._pos_c - 1) % 26) and rotor_b.turnover(
            (self._pos_b + 1) % 26
        ):
            self._pos_b = (self._pos_b + 1) % 26
            if rotor_b.turnover(self._pos_b):
                self._pos_a = (self._pos_a + 1) % 26

        return (self._pos_a, self._pos_b, self._pos_c)

    def step(self, letter: str) -> str:
        """Press one key: advance the rotors, then substitute *letter*.

        Raises:
            InvalidCharacterError: If *letter* is not A-Z.
        """
        index = letter_index(letter)
        self.advance()
        return ALPHABET[self._substitute(index)]

    def _substitute(self, index: int) -> int:
        pa, pb, pc = self._pos_a, self._pos_b, self._pos_c
        a = self._rotor_a.forward_table
        b = self._rotor_b.forward_table
        c = self._rotor_c.forward_table

        index = (c[(index + pc) % 26] - pc) % 26
        index = (b[(index + pb) % 26] - pb) % 26
        index = (a[(index + pa) % 26] - pa) % 26
        index = self._reflector.forward_table[index]

        a = self._rotor_a.inverse_table
        b = self._rotor_b.inverse_table
        c = self._rotor_c.inverse_table
        index = (a[(index + pa) % 26] - pa) % 26
        index = (b[(index + pb) % 26] - pb) % 26
        return (c[(index + pc) % 26] - pc) % 26

    def encipher(self, text: str) -> str:
        """Step every letter of *text* and return the output letters."""
        return "".join(self.step(letter) for letter in text)

    # ------------------------------------------------------------------ #
    #  Inspection
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> MachineConfig:
        return self._config

    @property
    def positions(self) -> tuple[int, int, int]:
        return (self._pos_a, self._pos_b, self._pos_c)

    @property
    def start_key(self) -> str:
        return self._config.key

    def describe(self) -> str:
        return describe_settings(self._config)

    def __repr__(self) -> str:
        return (
            f"EnigmaMachine(key={self.start_key!r}, "
            f"rotors={self._config.rotor_names}, "
            f"reflector={self._reflector.name!r}, positions={self.positions})"
        )


class MachinePool:
    """Free list of :class:`EnigmaMachine` instances.

    Machines taken from the pool are always fully re-initialised from the
    requested config. ``deque.append``/``deque.pop`` are atomic, so one
    pool may be shared by worker threads.

    Usage::

        pool = MachinePool(prefill=8)
        with pool.lease(config) as machine:
            machine.encipher(ciphertext)
    """

    def __init__(self, prefill: int = 0, template: Optional[MachineConfig] = None) -> None:
        self._free: deque[EnigmaMachine] = deque()
        self.created = 0
        if prefill and template is not None:
            for _ in range(prefill):
                self._free.append(self._build(template))

    def _build(self, config: MachineConfig) -> EnigmaMachine:
        self.created += 1
        return EnigmaMachine(config)

    def acquire(self, config: MachineConfig) -> EnigmaMachine:
        try:
            machine = self._free.pop()
        except IndexError:
            return self._build(config)
        machine.reset(config)
        return machine

    def release(self, machine: EnigmaMachine) -> None:
        self._free.append(machine)

    @contextmanager
    def lease(self, config: MachineConfig) -> Generator[EnigmaMachine, None, None]:
        """Acquire a machine for the duration of a ``with`` block."""
        machine = self.acquire(config)
        try:
            yield machine
        finally:
            self.release(machine)

    def __len__(self) -> int:
        return len(self._free)
