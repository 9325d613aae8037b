"""Shared fixtures for the Bombe test suite."""

from __future__ import annotations

import pytest

from shared.config import BombeConfig
from shared.logger import BombeLogger

from bombe.core.engine import SearchEngine
from bombe.core.models import MachineConfig
from bombe.core.rotor import RotorTable

CIPHERTEXT = (
    "ZTQBLVXKPBPGAVQBRYDYQEZNKRLMZTMRGBJSQKHDPHHNTNIDLYVFCOKZYYSMJFAHQBTEAVFKOXRPSQX"
)
PLAINTEXT = (
    "THISISASLIGHTLYLONGERTESTSOIHAVETOSEEIFICANKEEPWRITINGALONGERSTRINGTOUSEASINPUT"
)


@pytest.fixture(scope="session")
def table() -> RotorTable:
    return RotorTable.default()


@pytest.fixture
def rotors_123(table):
    return table.rotors(["1", "2", "3"])


@pytest.fixture
def reflector_b(table):
    return table.reflector("B")


@pytest.fixture
def make_config(rotors_123, reflector_b):
    """Build a :class:`MachineConfig`; rotors I, II, III and UKW-B by default."""

    def _make(key: str, rotors=None, reflector=None) -> MachineConfig:
        return MachineConfig.from_key(key, rotors or rotors_123, reflector or reflector_b)

    return _make


@pytest.fixture
def engine(table) -> SearchEngine:
    return SearchEngine(
        BombeConfig(),
        table=table,
        logger=BombeLogger("test", console_output=False),
    )
