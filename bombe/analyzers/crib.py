"""
Crib Matching
==============

A crib is a plaintext fragment believed to occur in the message. A
candidate whose plaintext contains the crib (exact, case-sensitive
substring) receives a bonus of ``len(crib) * bonus_per_letter`` off its
score, large enough to dominate ordinary frequency scores. Candidates
without the crib are never penalised.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from numpy.typing import NDArray

from bombe.core.rotor import letter_index

DEFAULT_BONUS_PER_LETTER: float = 100.0


def contains_crib(plaintext: str, crib: Optional[str]) -> bool:
    """Whether *crib* occurs in *plaintext*. An empty crib never matches."""
    return bool(crib) and crib in plaintext


def crib_bonus(crib: Optional[str], bonus_per_letter: float = DEFAULT_BONUS_PER_LETTER) -> float:
    """Score reduction granted when *crib* is found."""
    return len(crib) * bonus_per_letter if crib else 0.0


def crib_mask(matrix: NDArray[np.integer], crib: Optional[str]) -> NDArray[np.bool_]:
    """For each row of a letter-index matrix, whether it contains *crib*.

    Raises:
        InvalidCharacterError: If *crib* holds a non A-Z character.
    """
    rows, length = matrix.shape
    if not crib or len(crib) > length:
        return np.zeros(rows, dtype=np.bool_)

    target = np.asarray([letter_index(c, "crib") for c in crib], dtype=matrix.dtype)
    windows = sliding_window_view(matrix, len(crib), axis=1)
    return (windows == target).all(axis=2).any(axis=1)
