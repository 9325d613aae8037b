"""
Bombe Analyzers
================

Plaintext scoring: English letter-frequency divergence and crib matching.
"""

from bombe.analyzers.crib import contains_crib, crib_mask
from bombe.analyzers.frequency import FrequencyAnalysis, score_batch, score_text

__all__ = [
    "FrequencyAnalysis",
    "contains_crib",
    "crib_mask",
    "score_batch",
    "score_text",
]
