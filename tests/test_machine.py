"""Tests for the Enigma machine simulator and the machine pool."""

import pytest

from bombe.core.exceptions import InvalidCharacterError
from bombe.core.machine import EnigmaMachine, MachinePool, describe_settings
from bombe.core.models import MachineConfig
from bombe.core.rotor import ALPHABET


def _press(machine, letters):
    return "".join(machine.step(letter) for letter in letters)


class TestStepping:
    def test_start_aaa(self, make_config):
        machine = EnigmaMachine(make_config("AAA"))
        assert _press(machine, "APPLE") == "BHSDR"

    def test_double_step_region(self, make_config):
        machine = EnigmaMachine(make_config("ADU"))
        assert _press(machine, "ORANGE") == "WVIDEO"

    def test_other_rotor_order(self, table, make_config):
        config = make_config("VPC", rotors=table.rotors(["3", "1", "2"]))
        assert _press(EnigmaMachine(config), "FOOTBALL") == "KVZJITYW"

    def test_known_message(self, make_config):
        assert EnigmaMachine(make_config("AAA")).encipher("HELLOWORLD") == "ILBDAAMTAZ"

    def test_rejects_non_letters(self, make_config):
        machine = EnigmaMachine(make_config("AAA"))
        with pytest.raises(InvalidCharacterError):
            machine.step("a")
        # Rejected input does not move the rotors
        assert machine.positions == (0, 0, 0)


class TestAdvance:
    def test_fast_rotor_moves(self, make_config):
        machine = EnigmaMachine(make_config("AAA"))
        assert [machine.advance() for _ in range(3)] == [(0, 0, 1), (0, 0, 2), (0, 0, 3)]

    def test_double_step(self, table, make_config):
        machine = EnigmaMachine(make_config("VPC", rotors=table.rotors(["3", "1", "2"])))
        assert [machine.advance() for _ in range(5)] == [
            (21, 15, 3),
            (21, 15, 4),
            (21, 16, 5),
            (22, 17, 6),
            (22, 17, 7),
        ]

    def test_fast_rotor_wraps(self, make_config):
        machine = EnigmaMachine(make_config("AAZ"))
        assert machine.advance() == (0, 0, 0)


class TestMachineProperties:
    @pytest.mark.parametrize("key", ["AAA", "ADU", "QEV", "ZZZ", "MRT"])
    def test_reciprocity(self, make_config, key):
        config = make_config(key)
        for letter in ALPHABET:
            out = EnigmaMachine(config).step(letter)
            assert EnigmaMachine(config).step(out) == letter

    def test_message_reciprocity(self, table, make_config):
        config = make_config("KDO", rotors=table.rotors(["5", "4", "2"]), reflector=table.reflector("C"))
        ciphertext = EnigmaMachine(config).encipher("ATTACKATDAWN")
        assert EnigmaMachine(config).encipher(ciphertext) == "ATTACKATDAWN"

    @pytest.mark.parametrize("key", ["AAA", "BQX", "ZZZ"])
    def test_no_letter_maps_to_itself(self, make_config, key):
        machine = EnigmaMachine(make_config(key))
        for letter in ALPHABET * 3:
            assert machine.step(letter) != letter

    def test_reset_restores_start(self, make_config):
        machine = EnigmaMachine(make_config("AAA"))
        machine.encipher("XXXXXXXX")
        machine.reset(make_config("AAA"))
        assert machine.positions == (0, 0, 0)
        assert machine.encipher("APPLE") == "BHSDR"


class TestDescribe:
    def test_describe_settings(self, make_config):
        assert describe_settings(make_config("AAB")) == (
            "KEY: AAB\n"
            "ROTORS: Rotor I (1930), Rotor II (1930), Rotor III (1930)\n"
            "REFLECTOR: Reflector B"
        )

    def test_machine_describe(self, make_config):
        machine = EnigmaMachine(make_config("QWE"))
        assert machine.start_key == "QWE"
        assert machine.describe().startswith("KEY: QWE\n")


class TestMachineConfig:
    def test_from_index(self, rotors_123, reflector_b):
        config = MachineConfig.from_index(3 * 676 + 4 * 26 + 21, rotors_123, reflector_b)
        assert config.key == "DEV"
        assert config.rotor_names == ["1", "2", "3"]

    def test_rejects_bad_start(self, make_config):
        with pytest.raises(InvalidCharacterError):
            make_config("AA1")

    def test_rejects_bad_key_length(self, make_config):
        with pytest.raises(ValueError):
            make_config("AAAA")


class TestMachinePool:
    def test_reuses_released_machines(self, make_config):
        pool = MachinePool()
        with pool.lease(make_config("AAA")) as machine:
            machine.encipher("HELLO")
        with pool.lease(make_config("AAA")) as again:
            assert again is machine
            # Leased machines are fully re-initialised
            assert again.positions == (0, 0, 0)
            assert again.encipher("APPLE") == "BHSDR"
        assert pool.created == 1
        assert len(pool) == 1

    def test_prefill(self, make_config):
        pool = MachinePool(prefill=4, template=make_config("AAA"))
        assert len(pool) == 4
        machine = pool.acquire(make_config("ADU"))
        assert machine.start_key == "ADU"
        assert len(pool) == 3
