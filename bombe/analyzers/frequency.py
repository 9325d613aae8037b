"""
English Frequency Scorer
=========================

Scores a candidate plaintext by how far its letter statistics are from
English. The score is a sum of absolute percentage deviations, so it is
zero for a perfect match and grows with the distance from English;
smaller is better.

Two modes:

BASIC (canonical)
    For every letter that occurs, ``|count / total * 100 - expected|``.
    Letters that never occur contribute nothing.

EXTENDED
    BASIC plus the 25 most frequent English digrams. A tracked digram
    that occurs contributes ``|count / (total - 1) * 100 - expected|``;
    one that never occurs contributes ``expected * 100``.

:class:`FrequencyAnalysis` accumulates one plaintext a letter at a time;
:func:`score_batch` computes the same score for every row of a
letter-index matrix produced by :class:`~bombe.core.batch.BatchMachine`.

References:
    - Lewand, R. E. (2000). Cryptological Mathematics. Mathematical
      Association of America. (English unigram frequencies.)
    - Sinkov, A. (1966). Elementary Cryptanalysis: A Mathematical
      Approach. Mathematical Association of America.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from shared.math_utils import FloatArray, absolute_deviation, row_histograms
from bombe.core.models import ScoringMode
from bombe.core.rotor import ALPHABET, letter_index

# Percent of letters in English text
ENGLISH_UNIGRAM_FREQUENCY: dict[str, float] = {
    "A": 8.167, "B": 1.492, "C": 2.782, "D": 4.253, "E": 12.702,
    "F": 2.228, "G": 2.015, "H": 6.094, "I": 6.966, "J": 0.153,
    "K": 0.772, "L": 4.025, "M": 2.406, "N": 6.749, "O": 7.507,
    "P": 1.929, "Q": 0.095, "R": 5.987, "S": 6.327, "T": 9.056,
    "U": 2.758, "V": 0.978, "W": 2.360, "X": 0.150, "Y": 1.974,
    "Z": 0.074,
}

# Percent of adjacent letter pairs in English text
ENGLISH_DIGRAM_FREQUENCY: dict[str, float] = {
    "TH": 1.52, "HE": 1.28, "IN": 0.94, "ER": 0.94, "AN": 0.82,
    "RE": 0.68, "ND": 0.63, "AT": 0.59, "ON": 0.57, "NT": 0.56,
    "HA": 0.56, "ES": 0.56, "ST": 0.55, "EN": 0.55, "TO": 0.52,
    "IT": 0.50, "OU": 0.50, "EA": 0.47, "HI": 0.46, "IS": 0.46,
    "OR": 0.43, "TI": 0.34, "AS": 0.33, "TE": 0.27, "ET": 0.19,
}

_UNIGRAM_EXPECTED: tuple[float, ...] = tuple(ENGLISH_UNIGRAM_FREQUENCY[c] for c in ALPHABET)
_DIGRAMS: tuple[str, ...] = tuple(ENGLISH_DIGRAM_FREQUENCY)
_DIGRAM_EXPECTED: tuple[float, ...] = tuple(ENGLISH_DIGRAM_FREQUENCY[d] for d in _DIGRAMS)

# (first * 26 + second) -> slot in _DIGRAMS, or -1 when untracked
_DIGRAM_SLOT: list[int] = [-1] * (26 * 26)
for _slot, _digram in enumerate(_DIGRAMS):
    _DIGRAM_SLOT[(ord(_digram[0]) - 65) * 26 + ord(_digram[1]) - 65] = _slot

_NO_PREVIOUS = -1


class FrequencyAnalysis:
    """Streaming letter (and digram) counter for one candidate plaintext.

    Usage::

        analysis = FrequencyAnalysis()
        for letter in plaintext:
            analysis.add(letter)
        score = analysis.calculate_difference()

    Args:
        mode: BASIC (unigram) or EXTENDED (unigram + digram).
    """

    __slots__ = ("mode", "_counts", "_digram_counts", "_previous", "_total")

    def __init__(self, mode: ScoringMode = ScoringMode.BASIC) -> None:
        self.mode = ScoringMode(mode)
        self._counts = [0] * 26
        self._digram_counts = [0] * len(_DIGRAMS)
        self._previous = _NO_PREVIOUS
        self._total = 0

    def add(self, letter: str) -> None:
        """Count one plaintext letter.

        Raises:
            InvalidCharacterError: If *letter* is not A-Z.
        """
        index = letter_index(letter, "plaintext")
        self._counts[index] += 1
        self._total += 1

        if self.mode is ScoringMode.EXTENDED:
            if self._previous != _NO_PREVIOUS:
                slot = _DIGRAM_SLOT[self._previous * 26 + index]
                if slot >= 0:
                    self._digram_counts[slot] += 1
            self._previous = index

    def extend(self, text: str) -> None:
        for letter in text:
            self.add(letter)

    def calculate_difference(self) -> float:
        """Divergence of the counted text from English; lower is better."""
        total = self._total
        difference = 0.0
        for count, expected in zip(self._counts, _UNIGRAM_EXPECTED):
            if count == 0:
                continue
            difference += abs(count / total * 100 - expected)

        if self.mode is ScoringMode.EXTENDED:
            for count, expected in zip(self._digram_counts, _DIGRAM_EXPECTED):
                if count == 0:
                    difference += expected * 100
                    continue
                difference += abs(count / (total - 1) * 100 - expected)

        return difference

    # ------------------------------------------------------------------ #
    #  Inspection
    # ------------------------------------------------------------------ #

    @property
    def total(self) -> int:
        return self._total

    @property
    def counts(self) -> dict[str, int]:
        """Letter counts keyed by letter."""
        return dict(zip(ALPHABET, self._counts))

    @property
    def digram_counts(self) -> dict[str, int]:
        """Tracked digram counts (all zero in BASIC mode)."""
        return dict(zip(_DIGRAMS, self._digram_counts))

    def __repr__(self) -> str:
        return f"FrequencyAnalysis(mode={self.mode.value}, total={self._total})"


def score_text(text: str, mode: ScoringMode = ScoringMode.BASIC) -> float:
    """Score a complete plaintext string."""
    analysis = FrequencyAnalysis(mode)
    analysis.extend(text)
    return analysis.calculate_difference()


# ===================================================================== #
#  Batch scoring
# ===================================================================== #

_UNIGRAM_EXPECTED_ARRAY: FloatArray = np.asarray(_UNIGRAM_EXPECTED, dtype=np.float64)
_DIGRAM_EXPECTED_ARRAY: FloatArray = np.asarray(_DIGRAM_EXPECTED, dtype=np.float64)
_DIGRAM_SLOT_ARRAY: NDArray[np.int64] = np.asarray(_DIGRAM_SLOT, dtype=np.int64)


def score_batch(
    matrix: NDArray[np.integer],
    mode: ScoringMode = ScoringMode.BASIC,
) -> FloatArray:
    """Score every row of a ``(rows, length)`` letter-index matrix.

    Returns the same value :meth:`FrequencyAnalysis.calculate_difference`
    gives for each row, up to floating-point summation order.
    """
    rows, length = matrix.shape
    counts = row_histograms(matrix, 26)
    scores = absolute_deviation(counts, length, _UNIGRAM_EXPECTED_ARRAY)

    if ScoringMode(mode) is ScoringMode.EXTENDED:
        if length > 1:
            pairs = matrix[:, :-1].astype(np.int64) * 26 + matrix[:, 1:]
            slots = _DIGRAM_SLOT_ARRAY[pairs]
            tracked = slots >= 0
            digram_counts = row_histograms(np.where(tracked, slots, 0), len(_DIGRAMS), tracked)
        else:
            digram_counts = np.zeros((rows, len(_DIGRAMS)), dtype=np.int64)
        scores = scores + absolute_deviation(
            digram_counts,
            length - 1,
            _DIGRAM_EXPECTED_ARRAY,
            absent_penalty=_DIGRAM_EXPECTED_ARRAY * 100,
        )

    return scores
