"""
Bombe Mathematical Utilities
=============================

NumPy helpers for the frequency statistics computed over whole batches
of candidate plaintexts at once.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

FloatArray = NDArray[np.float64]
CountArray = NDArray[np.int64]


def row_histograms(
    values: NDArray[np.integer],
    bins: int,
    mask: NDArray[np.bool_] | None = None,
) -> CountArray:
    """Count symbol occurrences independently for every row of *values*.

    Each row is shifted into its own block of *bins* slots so that one
    :func:`numpy.bincount` call produces all histograms.

    Args:
        values: ``(rows, cols)`` matrix of symbols in ``[0, bins)``.
        bins:   Number of distinct symbols.
        mask:   Optional ``(rows, cols)`` boolean matrix; only ``True``
                cells are counted.

    Returns:
        ``(rows, bins)`` matrix of counts.
    """
    rows = values.shape[0]
    offsets = (np.arange(rows, dtype=np.int64) * bins)[:, None]
    flat = values.astype(np.int64) + offsets
    if mask is not None:
        flat = flat[mask]
    return np.bincount(flat.ravel(), minlength=rows * bins).reshape(rows, bins)


def percent_of(counts: NDArray[np.integer], total: int) -> FloatArray:
    """Express *counts* as percentages of *total* (``count / total * 100``)."""
    if total <= 0:
        return np.zeros(counts.shape, dtype=np.float64)
    return counts / total * 100.0


def absolute_deviation(
    counts: NDArray[np.integer],
    total: int,
    expected: FloatArray,
    absent_penalty: FloatArray | None = None,
) -> FloatArray:
    """Row-wise sum of ``|actual% - expected%|``.

    Cells with a zero count contribute nothing, or ``absent_penalty`` for
    that column when given.

    Args:
        counts:   ``(rows, k)`` observed counts.
        total:    Denominator for the percentages.
        expected: ``(k,)`` expected percentages.
        absent_penalty: Optional ``(k,)`` contribution of zero-count cells.

    Returns:
        ``(rows,)`` divergence per row.
    """
    actual = percent_of(counts, total)
    absent = 0.0 if absent_penalty is None else absent_penalty
    return np.where(counts > 0, np.abs(actual - expected), absent).sum(axis=1)
