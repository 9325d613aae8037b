"""
Bombe Core Data Models
=======================

Data models for the Bombe key-search engine.

:class:`MachineConfig` is a frozen, slotted dataclass: millions of them may
be built during a scalar search, and they hold references to
:class:`~bombe.core.rotor.Rotor` objects rather than serialisable values.
The result models (:class:`EvaluatedCandidate`, :class:`SearchResult`) are
Pydantic models, serialisable to JSON for the report and CLI layers.

References:
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import datetime as _dt
import enum
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bombe.core.rotor import ALPHABET, Rotor, letter_index


# ===================================================================== #
#  Enumerations
# ===================================================================== #


class ScoringMode(str, enum.Enum):
    """Which English-frequency statistics the scorer compares against.

    BASIC is the canonical scorer: absolute unigram divergence only.
    EXTENDED adds the 25 most common digrams, with a heavy penalty for
    every tracked digram that never occurs.
    """

    BASIC = "basic"
    EXTENDED = "extended"


class EvaluationStrategy(str, enum.Enum):
    """How a (rotor order, reflector) work unit is evaluated."""

    VECTORIZED = "vectorized"
    SCALAR = "scalar"


# ===================================================================== #
#  Machine configuration
# ===================================================================== #


@dataclass(frozen=True, slots=True)
class MachineConfig:
    """Complete key for one three-rotor machine.

    Attributes:
        start_a: Start letter of the left (slow) rotor.
        start_b: Start letter of the middle rotor.
        start_c: Start letter of the right (fast) rotor.
        rotor_a: Left rotor.
        rotor_b: Middle rotor.
        rotor_c: Right rotor.
        reflector: Reflector (Umkehrwalze).
    """

    start_a: str
    start_b: str
    start_c: str
    rotor_a: Rotor
    rotor_b: Rotor
    rotor_c: Rotor
    reflector: Rotor

    def __post_init__(self) -> None:
        for letter in (self.start_a, self.start_b, self.start_c):
            letter_index(letter, "start position")

    @classmethod
    def from_key(
        cls,
        key: str,
        rotors: tuple[Rotor, Rotor, Rotor] | list[Rotor],
        reflector: Rotor,
    ) -> MachineConfig:
        """Build a config from a three-letter key such as ``"AAB"``."""
        if len(key) != 3:
            raise ValueError(f"key must have three letters, got {key!r}")
        rotor_a, rotor_b, rotor_c = rotors
        return cls(key[0], key[1], key[2], rotor_a, rotor_b, rotor_c, reflector)

    @classmethod
    def from_index(
        cls,
        index: int,
        rotors: tuple[Rotor, Rotor, Rotor] | list[Rotor],
        reflector: Rotor,
    ) -> MachineConfig:
        """Build a config from a start index ``a*676 + b*26 + c``."""
        key = ALPHABET[index // 676] + ALPHABET[(index // 26) % 26] + ALPHABET[index % 26]
        return cls.from_key(key, rotors, reflector)

    @property
    def key(self) -> str:
        return self.start_a + self.start_b + self.start_c

    @property
    def rotors(self) -> tuple[Rotor, Rotor, Rotor]:
        return (self.rotor_a, self.rotor_b, self.rotor_c)

    @property
    def rotor_names(self) -> list[str]:
        return [r.name for r in self.rotors]


# ===================================================================== #
#  Results
# ===================================================================== #


class EvaluatedCandidate(BaseModel):
    """One decryption attempt and its score.

    Attributes:
        plaintext: Decoded text, same length as the ciphertext.
        score: Frequency divergence minus any crib bonus; lower is better.
        settings: Human-readable key, rotor and reflector description.
        key: Start letters of the rotors, left to right.
        rotors: Rotor registry names, left to right.
        reflector: Reflector registry name.
        crib_found: Whether the crib occurs in the plaintext.
    """

    model_config = ConfigDict(frozen=True)

    plaintext: str
    score: float
    settings: str
    key: str = ""
    rotors: list[str] = Field(default_factory=list)
    reflector: str = ""
    crib_found: bool = False

    @property
    def rank_key(self) -> tuple[float, str, str, str]:
        """Ordering used by the ranking: score, then key identity."""
        return (self.score, ",".join(self.rotors), self.reflector, self.key)


class SearchResult(BaseModel):
    """Outcome of a complete key search.

    Attributes:
        ciphertext: The message that was attacked.
        crib: Crib used for the bonus, if any.
        scoring: Scoring mode in effect.
        strategy: Evaluation strategy in effect.
        candidates: Best candidates, ascending by score.
        keys_total: Size of the enumerated key space.
        keys_evaluated: Keys whose work unit completed.
        workers: Number of worker threads.
        timed_out: True when the search stopped at its time limit.
        started_at: UTC start timestamp.
        finished_at: UTC end timestamp.
    """

    ciphertext: str
    crib: Optional[str] = None
    scoring: ScoringMode = ScoringMode.BASIC
    strategy: EvaluationStrategy = EvaluationStrategy.VECTORIZED
    candidates: list[EvaluatedCandidate] = Field(default_factory=list)
    keys_total: int = 0
    keys_evaluated: int = 0
    workers: int = 1
    timed_out: bool = False
    started_at: _dt.datetime = Field(
        default_factory=lambda: _dt.datetime.now(_dt.timezone.utc)
    )
    finished_at: Optional[_dt.datetime] = None

    @property
    def best(self) -> Optional[EvaluatedCandidate]:
        return self.candidates[0] if self.candidates else None

    @property
    def elapsed_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()
