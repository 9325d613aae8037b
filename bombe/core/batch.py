"""
Lockstep Batch Evaluator
=========================

:class:`BatchMachine` runs many start positions of one rotor order and
reflector at the same time. Positions are NumPy vectors and every step of
:class:`~bombe.core.machine.EnigmaMachine` is applied element-wise, so a
whole (rotor order, reflector) work unit of 17,576 keys costs a few dozen
array operations per ciphertext letter instead of 17,576 Python loops.

Row ``r`` of every array corresponds to the start index
``starts[r] = a*676 + b*26 + c``; with the default ``starts`` the rows
follow ``itertools.product(ALPHABET, repeat=3)`` order.
"""

from __future__ import annotations

import threading
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from bombe.core.models import MachineConfig
from bombe.core.rotor import ALPHABET_SIZE, Rotor, letter_index

KEY_SPACE_SIZE: int = ALPHABET_SIZE ** 3

IndexArray = NDArray[np.intp]


class BatchMachine:
    """Element-wise Enigma over a vector of start positions.

    Usage::

        batch = BatchMachine(rotor_i, rotor_ii, rotor_iii, ukw_b)
        plain = batch.decipher(ciphertext)     # (17576, len(ciphertext)) uint8
        config = batch.config_at(row)

    Args:
        rotor_a: Left (slow) rotor.
        rotor_b: Middle rotor.
        rotor_c: Right (fast) rotor.
        reflector: Reflector.
        starts: Start indexes to evaluate; defaults to all 17,576.
    """

    def __init__(
        self,
        rotor_a: Rotor,
        rotor_b: Rotor,
        rotor_c: Rotor,
        reflector: Rotor,
        starts: Optional[Sequence[int] | IndexArray] = None,
    ) -> None:
        self.rotors = (rotor_a, rotor_b, rotor_c)
        self.reflector = reflector

        if starts is None:
            self.starts: IndexArray = np.arange(KEY_SPACE_SIZE, dtype=np.intp)
        else:
            self.starts = np.asarray(starts, dtype=np.intp)

        self._fwd = [np.asarray(r.forward_table, dtype=np.intp) for r in self.rotors]
        self._inv = [np.asarray(r.inverse_table, dtype=np.intp) for r in self.rotors]
        self._refl = np.asarray(reflector.forward_table, dtype=np.intp)
        self._turn_b = rotor_b.turnover_position
        self._turn_c = rotor_c.turnover_position
        self.reset()

    def reset(self) -> None:
        """Return every row to its start position."""
        self.pos_a: IndexArray = self.starts // 676
        self.pos_b: IndexArray = (self.starts // 26) % 26
        self.pos_c: IndexArray = self.starts % 26

    def __len__(self) -> int:
        return int(self.starts.shape[0])

    # ------------------------------------------------------------------ #
    #  Stepping
    # ------------------------------------------------------------------ #

    def advance(self) -> tuple[IndexArray, IndexArray, IndexArray]:
        """Move every row's rotors for one keystroke."""
        turn_b, turn_c = self._turn_b, self._turn_c

        self.pos_c = (self.pos_c + 1) % 26
        carry = self.pos_c == turn_c
        self.pos_b = np.where(carry, (self.pos_b + 1) % 26, self.pos_b)
        self.pos_a = np.where(carry & (self.pos_b == turn_b), (self.pos_a + 1) % 26, self.pos_a)

        double = (((self.pos_c - 1) % 26) == turn_c) & (((self.pos_b + 1) % 26) == turn_b)
        self.pos_b = np.where(double, (self.pos_b + 1) % 26, self.pos_b)
        self.pos_a = np.where(double & (self.pos_b == turn_b), (self.pos_a + 1) % 26, self.pos_a)

        return self.pos_a, self.pos_b, self.pos_c

    def step(self, index: int) -> IndexArray:
        """Press the key with letter index *index* on every row."""
        self.advance()
        pa, pb, pc = self.pos_a, self.pos_b, self.pos_c
        fa, fb, fc = self._fwd
        ia, ib, ic = self._inv

        v = (fc[(index + pc) % 26] - pc) % 26
        v = (fb[(v + pb) % 26] - pb) % 26
        v = (fa[(v + pa) % 26] - pa) % 26
        v = self._refl[v]
        v = (ia[(v + pa) % 26] - pa) % 26
        v = (ib[(v + pb) % 26] - pb) % 26
        return (ic[(v + pc) % 26] - pc) % 26

    def decipher(
        self, text: str, stop: Optional[threading.Event] = None
    ) -> Optional[NDArray[np.uint8]]:
        """Run *text* through every row from its start position.

        *stop* is checked before each letter; once it is set the run is
        abandoned and ``None`` is returned.

        Returns:
            ``(rows, len(text))`` matrix of output letter indexes, or ``None``
            when stopped.

        Raises:
            InvalidCharacterError: If *text* holds a non A-Z character.
        """
        indexes = [letter_index(letter, "message") for letter in text]
        self.reset()
        out = np.empty((len(self), len(indexes)), dtype=np.uint8)
        for col, index in enumerate(indexes):
            if stop is not None and stop.is_set():
                return None
            out[:, col] = self.step(index)
        return out

    # ------------------------------------------------------------------ #
    #  Row helpers
    # ------------------------------------------------------------------ #

    def config_at(self, row: int) -> MachineConfig:
        """The :class:`MachineConfig` evaluated by *row*."""
        return MachineConfig.from_index(int(self.starts[row]), self.rotors, self.reflector)


def matrix_row_text(matrix: NDArray[np.uint8], row: int) -> str:
    """Decode one row of a letter-index matrix to an A-Z string."""
    return (matrix[row] + 65).astype(np.uint8).tobytes().decode("ascii")
