"""
Bombe Core Module
==================

Rotor table, machine simulators, data models and the search engine.
"""

from bombe.core.engine import SearchEngine
from bombe.core.exceptions import BombeError
from bombe.core.machine import EnigmaMachine, MachinePool
from bombe.core.models import (
    EvaluatedCandidate,
    EvaluationStrategy,
    MachineConfig,
    ScoringMode,
    SearchResult,
)
from bombe.core.rotor import DEFAULT_TABLE, Rotor, RotorTable

__all__ = [
    "BombeError",
    "DEFAULT_TABLE",
    "EnigmaMachine",
    "EvaluatedCandidate",
    "EvaluationStrategy",
    "MachineConfig",
    "MachinePool",
    "Rotor",
    "RotorTable",
    "ScoringMode",
    "SearchEngine",
    "SearchResult",
]
