"""
Bombe Search Engine
====================

Central orchestrator for the ciphertext-only key search. The
:class:`SearchEngine` enumerates every key of the search space

    ordered rotor triples (distinct rotors) x reflectors x 26^3 start positions,

decrypts the ciphertext under each key, scores the plaintext with
:class:`~bombe.analyzers.frequency.FrequencyAnalysis` (plus an optional
crib bonus) and keeps the best *N* candidates in a
:class:`~shared.collect.TopNCollector`.

Work is split into units of one (rotor triple, reflector) pair, i.e.
17,576 keys each. Units run on a thread pool and return their local best
*N*; the dispatching thread folds every unit result into the single
collector (fan-out / fan-in), so the collector is never contended.

Two evaluation strategies produce identical rankings:

- ``vectorized``: :class:`~bombe.core.batch.BatchMachine` deciphers all
  start positions of a unit in lockstep with NumPy.
- ``scalar``: one pooled :class:`~bombe.core.machine.EnigmaMachine` per
  key, stepping letter by letter.
"""

from __future__ import annotations

import itertools
import threading
from concurrent import futures
from datetime import datetime, timezone
from typing import Callable, Iterator, NamedTuple, Optional, Sequence

import numpy as np

from shared.collect import TopNCollector
from shared.config import BombeConfig
from shared.logger import BombeLogger

from bombe.analyzers.crib import contains_crib, crib_bonus, crib_mask
from bombe.analyzers.frequency import FrequencyAnalysis, score_batch
from bombe.core.batch import KEY_SPACE_SIZE, BatchMachine, matrix_row_text
from bombe.core.exceptions import (
    InsufficientReflectorsError,
    InsufficientRotorsError,
    MissingMessageError,
)
from bombe.core.machine import MachinePool, describe_settings
from bombe.core.models import (
    EvaluatedCandidate,
    EvaluationStrategy,
    MachineConfig,
    ScoringMode,
    SearchResult,
)
from bombe.core.rotor import ALPHABET, DEFAULT_TABLE, Rotor, RotorTable, validate_text

RotorTriple = tuple[Rotor, Rotor, Rotor]
ProgressCallback = Callable[[int], None]


class _UnitResult(NamedTuple):
    candidates: list[EvaluatedCandidate]
    evaluated: int


def _rank_key(candidate: EvaluatedCandidate) -> tuple[float, str, str, str]:
    return candidate.rank_key


def start_positions() -> Iterator[tuple[str, str, str]]:
    """All 17,576 start-letter triples, ``AAA`` to ``ZZZ``."""
    return itertools.product(ALPHABET, repeat=3)


def rotor_orders(rotors: Sequence[Rotor]) -> Iterator[RotorTriple]:
    """All ordered triples of distinct rotors from *rotors*."""
    return itertools.permutations(rotors, 3)


def enumerate_keys(
    rotors: Sequence[Rotor],
    reflectors: Sequence[Rotor],
) -> Iterator[MachineConfig]:
    """Every key of the search space, in rotor-order, reflector, start order."""
    for triple in rotor_orders(rotors):
        for reflector in reflectors:
            for a, b, c in start_positions():
                yield MachineConfig(a, b, c, *triple, reflector)


class SearchEngine:
    """Brute-force key search over a pool of rotors and reflectors.

    Usage::

        engine = SearchEngine()
        result = engine.run(ciphertext, rotors=["1", "2", "3"], reflectors=["B"])
        print(result.best.plaintext)

    Attributes:
        config: Bombe configuration instance; supplies defaults for every
            search parameter not passed to :meth:`run`.
        table: Rotor registry used to resolve names.
        logger: Logger for the engine.
    """

    def __init__(
        self,
        config: Optional[BombeConfig] = None,
        *,
        table: Optional[RotorTable] = None,
        logger: Optional[BombeLogger] = None,
    ) -> None:
        self.config = config or BombeConfig()
        self.table = table or DEFAULT_TABLE
        self.logger = logger or BombeLogger.from_config(
            "engine", self.config.global_settings
        )
        self._pool = MachinePool()

    # ------------------------------------------------------------------ #
    #  Input resolution
    # ------------------------------------------------------------------ #

    def resolve_rotors(self, rotors: Sequence[str | Rotor]) -> list[Rotor]:
        """Resolve rotor names, drop duplicates and check the pool size.

        Raises:
            UnknownRotorNameError: If a name is not in the table.
            InsufficientRotorsError: If fewer than three distinct rotors remain.
        """
        resolved: list[Rotor] = []
        for item in rotors:
            rotor = self.table.rotor(item) if isinstance(item, str) else item
            if rotor not in resolved:
                resolved.append(rotor)
        if len(resolved) < 3:
            raise InsufficientRotorsError(
                f"At least 3 distinct rotors are required, got {len(resolved)}"
            )
        return resolved

    def resolve_reflectors(self, reflectors: Sequence[str | Rotor]) -> list[Rotor]:
        """Resolve reflector names, drop duplicates and check the pool size.

        Raises:
            UnknownReflectorNameError: If a name is not in the table.
            InsufficientReflectorsError: If the pool is empty.
        """
        resolved: list[Rotor] = []
        for item in reflectors:
            reflector = self.table.reflector(item) if isinstance(item, str) else item
            if reflector not in resolved:
                resolved.append(reflector)
        if not resolved:
            raise InsufficientReflectorsError("At least 1 reflector is required")
        return resolved

    # ------------------------------------------------------------------ #
    #  Single-key evaluation
    # ------------------------------------------------------------------ #

    def evaluate(
        self,
        config: MachineConfig,
        ciphertext: str,
        *,
        crib: Optional[str] = None,
        scoring: ScoringMode = ScoringMode.BASIC,
    ) -> EvaluatedCandidate:
        """Decrypt *ciphertext* under *config* and score the plaintext."""
        analysis = FrequencyAnalysis(scoring)
        letters: list[str] = []
        with self._pool.lease(config) as machine:
            for cipher_letter in ciphertext:
                letter = machine.step(cipher_letter)
                letters.append(letter)
                analysis.add(letter)

        plaintext = "".join(letters)
        score = analysis.calculate_difference()
        found = contains_crib(plaintext, crib)
        if found:
            score -= crib_bonus(crib, self.config.search.crib_bonus)

        return self._candidate(config, plaintext, score, found)

    @staticmethod
    def _candidate(
        config: MachineConfig, plaintext: str, score: float, crib_found: bool
    ) -> EvaluatedCandidate:
        return EvaluatedCandidate(
            plaintext=plaintext,
            score=score,
            settings=describe_settings(config),
            key=config.key,
            rotors=config.rotor_names,
            reflector=config.reflector.name,
            crib_found=crib_found,
        )

    # ------------------------------------------------------------------ #
    #  Work units
    # ------------------------------------------------------------------ #

    def _evaluate_unit(
        self,
        ciphertext: str,
        rotors: RotorTriple,
        reflector: Rotor,
        crib: Optional[str],
        capacity: int,
        scoring: ScoringMode,
        strategy: EvaluationStrategy,
        stop: threading.Event,
    ) -> _UnitResult:
        if stop.is_set():
            return _UnitResult([], 0)
        if strategy is EvaluationStrategy.VECTORIZED:
            return self._evaluate_unit_vectorized(
                ciphertext, rotors, reflector, crib, capacity, scoring, stop
            )
        return self._evaluate_unit_scalar(
            ciphertext, rotors, reflector, crib, capacity, scoring, stop
        )

    def _evaluate_unit_vectorized(
        self,
        ciphertext: str,
        rotors: RotorTriple,
        reflector: Rotor,
        crib: Optional[str],
        capacity: int,
        scoring: ScoringMode,
        stop: threading.Event,
    ) -> _UnitResult:
        batch = BatchMachine(*rotors, reflector)
        matrix = batch.decipher(ciphertext, stop)
        if matrix is None:
            return _UnitResult([], 0)
        scores = score_batch(matrix, scoring)
        found = crib_mask(matrix, crib)
        if crib:
            scores = scores - found * crib_bonus(crib, self.config.search.crib_bonus)

        # Stable sort: equal scores keep start order, matching the rank key.
        best_rows = np.argsort(scores, kind="stable")[:capacity]
        candidates = [
            self._candidate(
                batch.config_at(row),
                matrix_row_text(matrix, row),
                float(scores[row]),
                bool(found[row]),
            )
            for row in best_rows
        ]
        return _UnitResult(candidates, len(batch))

    def _evaluate_unit_scalar(
        self,
        ciphertext: str,
        rotors: RotorTriple,
        reflector: Rotor,
        crib: Optional[str],
        capacity: int,
        scoring: ScoringMode,
        stop: threading.Event,
    ) -> _UnitResult:
        local: TopNCollector[EvaluatedCandidate] = TopNCollector(capacity, key=_rank_key)
        evaluated = 0
        for a, b, c in start_positions():
            if stop.is_set():
                break
            config = MachineConfig(a, b, c, *rotors, reflector)
            local.maybe_add(
                self.evaluate(config, ciphertext, crib=crib, scoring=scoring)
            )
            evaluated += 1
        return _UnitResult(local.to_list(), evaluated)

    # ------------------------------------------------------------------ #
    #  Search
    # ------------------------------------------------------------------ #

    def run(
        self,
        ciphertext: str,
        rotors: Optional[Sequence[str | Rotor]] = None,
        reflectors: Optional[Sequence[str | Rotor]] = None,
        *,
        crib: Optional[str] = None,
        results: Optional[int] = None,
        workers: Optional[int] = None,
        scoring: Optional[ScoringMode | str] = None,
        strategy: Optional[EvaluationStrategy | str] = None,
        timeout: Optional[float] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> SearchResult:
        """Search the key space for the most English-looking plaintexts.

        Parameters left as ``None`` fall back to ``config.search``.

        Args:
            ciphertext: Message to attack (A-Z only).
            rotors: Rotor names or objects; at least three distinct.
            reflectors: Reflector names or objects; at least one.
            crib: Optional plaintext fragment granting a score bonus.
            results: Number of candidates to keep (N >= 1).
            workers: Worker threads.
            scoring: ``basic`` or ``extended``.
            strategy: ``vectorized`` or ``scalar``.
            timeout: Wall-clock limit in seconds; on expiry the best
                candidates folded so far are returned.
            progress: Called on the dispatching thread with the number of
                keys of each completed unit.

        Returns:
            SearchResult with candidates in ascending score order.

        Raises:
            MissingMessageError: If *ciphertext* is empty.
            InvalidCharacterError: If the ciphertext or crib holds non A-Z.
            InsufficientRotorsError, InsufficientReflectorsError,
            UnknownRotorNameError, UnknownReflectorNameError: On bad pools.
        """
        settings = self.config.search
        if not ciphertext:
            raise MissingMessageError("A message to crack is required")
        validate_text(ciphertext, "message")
        if crib:
            validate_text(crib, "crib")
        else:
            crib = None

        rotor_pool = self.resolve_rotors(rotors if rotors is not None else settings.rotors)
        reflector_pool = self.resolve_reflectors(
            reflectors if reflectors is not None else settings.reflectors
        )
        capacity = results if results is not None else settings.results
        if capacity < 1:
            raise ValueError(f"results must be >= 1, got {capacity}")
        worker_count = max(1, workers if workers is not None else settings.num_threads)
        scoring_mode = ScoringMode(scoring if scoring is not None else settings.scoring)
        eval_strategy = EvaluationStrategy(strategy if strategy is not None else settings.strategy)
        time_limit = timeout if timeout is not None else settings.timeout

        units = [
            (triple, reflector)
            for triple in rotor_orders(rotor_pool)
            for reflector in reflector_pool
        ]
        result = SearchResult(
            ciphertext=ciphertext,
            crib=crib,
            scoring=scoring_mode,
            strategy=eval_strategy,
            keys_total=len(units) * KEY_SPACE_SIZE,
            workers=worker_count,
        )
        collector: TopNCollector[EvaluatedCandidate] = TopNCollector(capacity, key=_rank_key)
        stop = threading.Event()

        self.logger.info(
            "Searching %d keys (%d rotor orders x %d reflectors) on %d workers",
            result.keys_total,
            len(units) // len(reflector_pool),
            len(reflector_pool),
            worker_count,
            strategy=eval_strategy.value,
            scoring=scoring_mode.value,
        )

        executor = futures.ThreadPoolExecutor(
            max_workers=worker_count, thread_name_prefix="bombe"
        )
        timed_out = False
        try:
            with self.logger.operation("search"), self.logger.timed("key search"):
                pending = {
                    executor.submit(
                        self._evaluate_unit,
                        ciphertext,
                        triple,
                        reflector,
                        crib,
                        capacity,
                        scoring_mode,
                        eval_strategy,
                        stop,
                    ): (triple, reflector)
                    for triple, reflector in units
                }
                try:
                    for future in futures.as_completed(pending, timeout=time_limit):
                        unit = future.result()
                        collector.extend(unit.candidates)
                        result.keys_evaluated += unit.evaluated
                        if progress is not None:
                            progress(unit.evaluated)
                        triple, reflector = pending[future]
                        self.logger.debug(
                            "Unit %s / %s done",
                            ",".join(r.name for r in triple),
                            reflector.name,
                        )
                except futures.TimeoutError:
                    timed_out = True
                    self.logger.warning(
                        "Search timed out after %.1fs; returning partial results "
                        "(%d of %d keys evaluated)",
                        time_limit,
                        result.keys_evaluated,
                        result.keys_total,
                    )
        finally:
            stop.set()
            executor.shutdown(wait=not timed_out, cancel_futures=True)

        result.candidates = collector.to_list()
        result.timed_out = timed_out
        result.finished_at = datetime.now(timezone.utc)
        if result.best is not None:
            self.logger.info(
                "Best candidate %s score=%.3f",
                result.best.key,
                result.best.score,
            )
        return result
