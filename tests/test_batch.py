"""Tests for the lockstep batch evaluator."""

import threading

import numpy as np
import pytest

from bombe.core.batch import KEY_SPACE_SIZE, BatchMachine, matrix_row_text
from bombe.core.exceptions import InvalidCharacterError
from bombe.core.machine import EnigmaMachine
from bombe.core.models import MachineConfig

from tests.conftest import CIPHERTEXT, PLAINTEXT

# AAA, ADU, QEV, VPC, ZZZ and a few others
SAMPLE_STARTS = [0, 3 * 26 + 20, 16 * 676 + 4 * 26 + 21, 21 * 676 + 15 * 26 + 2, 17575, 1, 5000, 12345]


def _start_index(key: str) -> int:
    a, b, c = (ord(letter) - 65 for letter in key)
    return a * 676 + b * 26 + c


class TestBatchMachine:
    def test_default_covers_key_space(self, rotors_123, reflector_b):
        batch = BatchMachine(*rotors_123, reflector_b)
        assert len(batch) == KEY_SPACE_SIZE == 17576
        assert batch.config_at(0).key == "AAA"
        assert batch.config_at(1).key == "AAB"
        assert batch.config_at(17575).key == "ZZZ"

    @pytest.mark.parametrize("names", [["1", "2", "3"], ["3", "1", "2"], ["5", "4", "2"], ["2", "6", "5"]])
    @pytest.mark.parametrize("reflector", ["A", "B", "C"])
    def test_rows_match_scalar_machine(self, table, names, reflector):
        rotors = table.rotors(names)
        ukw = table.reflector(reflector)
        batch = BatchMachine(*rotors, ukw, starts=SAMPLE_STARTS)
        matrix = batch.decipher(CIPHERTEXT)

        assert matrix.shape == (len(SAMPLE_STARTS), len(CIPHERTEXT))
        for row, start in enumerate(SAMPLE_STARTS):
            config = MachineConfig.from_index(start, rotors, ukw)
            assert batch.config_at(row) == config
            assert matrix_row_text(matrix, row) == EnigmaMachine(config).encipher(CIPHERTEXT)

    def test_advance_matches_scalar(self, table):
        rotors = table.rotors(["3", "1", "2"])
        batch = BatchMachine(*rotors, table.reflector("B"), starts=[_start_index("VPC")])
        positions = []
        for _ in range(5):
            pa, pb, pc = batch.advance()
            positions.append((int(pa[0]), int(pb[0]), int(pc[0])))
        assert positions == [(21, 15, 3), (21, 15, 4), (21, 16, 5), (22, 17, 6), (22, 17, 7)]

    def test_recovers_known_plaintext(self, rotors_123, reflector_b):
        batch = BatchMachine(*rotors_123, reflector_b)
        matrix = batch.decipher(CIPHERTEXT)
        assert matrix.dtype == np.uint8
        assert matrix_row_text(matrix, _start_index("AAB")) == PLAINTEXT

    def test_decipher_resets_between_calls(self, rotors_123, reflector_b):
        batch = BatchMachine(*rotors_123, reflector_b, starts=[0, 1])
        first = batch.decipher("APPLE")
        second = batch.decipher("APPLE")
        assert np.array_equal(first, second)
        assert matrix_row_text(first, 0) == "BHSDR"

    def test_rejects_invalid_text(self, rotors_123, reflector_b):
        batch = BatchMachine(*rotors_123, reflector_b, starts=[0])
        with pytest.raises(InvalidCharacterError):
            batch.decipher("ABC1")

    def test_stop_abandons_run(self, rotors_123, reflector_b):
        batch = BatchMachine(*rotors_123, reflector_b, starts=[0, 1])
        stop = threading.Event()
        assert batch.decipher("APPLE", stop) is not None
        stop.set()
        assert batch.decipher("APPLE", stop) is None
