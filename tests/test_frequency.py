"""Tests for the English frequency scorer."""

import numpy as np
import pytest

from bombe.analyzers.frequency import (
    ENGLISH_DIGRAM_FREQUENCY,
    ENGLISH_UNIGRAM_FREQUENCY,
    FrequencyAnalysis,
    score_batch,
    score_text,
)
from bombe.core.exceptions import InvalidCharacterError
from bombe.core.models import ScoringMode

from tests.conftest import CIPHERTEXT, PLAINTEXT


def _to_matrix(*texts):
    return np.asarray([[ord(c) - 65 for c in text] for text in texts], dtype=np.uint8)


class TestTables:
    def test_unigram_table_is_complete(self):
        assert len(ENGLISH_UNIGRAM_FREQUENCY) == 26
        assert sum(ENGLISH_UNIGRAM_FREQUENCY.values()) == pytest.approx(100.0, abs=0.1)

    def test_digram_table(self):
        assert len(ENGLISH_DIGRAM_FREQUENCY) == 25
        assert ENGLISH_DIGRAM_FREQUENCY["TH"] == 1.52
        assert ENGLISH_DIGRAM_FREQUENCY["ET"] == 0.19


class TestFrequencyAnalysis:
    def test_basic_score_of_known_plaintext(self):
        assert score_text(PLAINTEXT) == pytest.approx(32.729342, rel=1e-6)

    def test_extended_score_of_known_plaintext(self):
        assert score_text(PLAINTEXT, ScoringMode.EXTENDED) == pytest.approx(528.038573, rel=1e-6)

    def test_english_beats_ciphertext(self):
        assert score_text(PLAINTEXT) < score_text(CIPHERTEXT)
        assert score_text(PLAINTEXT, "extended") < score_text(CIPHERTEXT, "extended")

    def test_single_letter(self):
        # E is 100% of the text: |100 - 12.702|
        assert score_text("E") == pytest.approx(87.298)

    def test_absent_letters_contribute_nothing(self):
        assert score_text("AB") == pytest.approx(abs(50 - 8.167) + abs(50 - 1.492))

    def test_empty_text(self):
        assert score_text("") == 0.0
        expected = sum(ENGLISH_DIGRAM_FREQUENCY.values()) * 100
        assert score_text("", ScoringMode.EXTENDED) == pytest.approx(expected)

    def test_counts(self):
        analysis = FrequencyAnalysis(ScoringMode.EXTENDED)
        analysis.extend("THTHE")
        assert analysis.total == 5
        assert analysis.counts["T"] == 2
        assert analysis.counts["Z"] == 0
        assert analysis.digram_counts["TH"] == 2
        assert analysis.digram_counts["HE"] == 1

    def test_basic_mode_skips_digrams(self):
        analysis = FrequencyAnalysis()
        analysis.extend("THTH")
        assert set(analysis.digram_counts.values()) == {0}

    def test_extended_adds_digram_term(self):
        text = "THEREISNOTHING"
        assert score_text(text, ScoringMode.EXTENDED) > score_text(text)

    def test_rejects_invalid_letter(self):
        analysis = FrequencyAnalysis()
        with pytest.raises(InvalidCharacterError):
            analysis.add("e")
        assert analysis.total == 0

    def test_mode_from_string(self):
        assert FrequencyAnalysis("extended").mode is ScoringMode.EXTENDED


class TestScoreBatch:
    @pytest.mark.parametrize("mode", list(ScoringMode))
    def test_matches_streaming_scorer(self, mode):
        texts = [PLAINTEXT, CIPHERTEXT, "A" * len(PLAINTEXT), PLAINTEXT[::-1]]
        scores = score_batch(_to_matrix(*texts), mode)
        assert scores.shape == (4,)
        for text, score in zip(texts, scores):
            assert score == pytest.approx(score_text(text, mode), rel=1e-9)

    @pytest.mark.parametrize("mode", list(ScoringMode))
    def test_single_column(self, mode):
        scores = score_batch(_to_matrix("E", "Q"), mode)
        assert scores[0] == pytest.approx(score_text("E", mode))
        assert scores[1] == pytest.approx(score_text("Q", mode))
