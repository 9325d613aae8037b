"""
Bombe Configuration Management
===============================

Centralized configuration for the Bombe key-search toolkit using Python
dataclasses and TOML-based persistence.

Configuration is kept separate from code so that rotor pools, worker
counts and scoring choices can be changed per run without editing the
package (Wiggins, 2011).

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "bombe.toml"


# ============================ Search Settings ==============================


@dataclass(frozen=False, slots=True)
class SearchConfig:
    """Parameters of the brute-force key search.

    Rotor and reflector pools are given as registry names (``"1"``..``"6"``
    and ``"A"``..``"C"``). ``scoring`` selects the frequency scorer:
    ``"basic"`` (unigram, canonical) or ``"extended"`` (unigram + digram).
    ``strategy`` selects the evaluator: ``"vectorized"`` runs every start
    position of a rotor order in lockstep with NumPy, ``"scalar"`` steps
    one machine per key.
    """

    rotors: list[str] = field(default_factory=lambda: ["1", "2", "3", "4", "5"])
    reflectors: list[str] = field(default_factory=lambda: ["A", "B", "C"])
    num_threads: int = 4
    results: int = 3
    scoring: str = "basic"
    crib_bonus: float = 100.0
    timeout: float | None = None
    strategy: str = "vectorized"

    def __post_init__(self) -> None:
        if self.scoring not in ("basic", "extended"):
            raise ValueError(f"search.scoring must be basic or extended, got {self.scoring!r}")
        if self.strategy not in ("vectorized", "scalar"):
            raise ValueError(f"search.strategy must be vectorized or scalar, got {self.strategy!r}")
        if self.num_threads < 1 or self.results < 1:
            raise ValueError("search.num_threads and search.results must be >= 1")


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings: logging verbosity, log file and debug mode."""

    log_level: str = "INFO"
    log_file: str | None = None
    log_json: bool = False
    debug: bool = False


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class BombeConfig:
    """Master configuration aggregating global and search settings.

    Usage:
        >>> config = BombeConfig.load()                  # from default path
        >>> config = BombeConfig.load("custom.toml")     # from custom path
        >>> print(config.search.rotors)
        ['1', '2', '3', '4', '5']
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    search: SearchConfig = field(default_factory=SearchConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> BombeConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``bombe.toml`` in the
        project root. Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.

        Returns:
            A fully-populated :class:`BombeConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        search = raw.get("search", {})
        # Pools may be written either as TOML arrays or "1,2,3" strings.
        for pool in ("rotors", "reflectors"):
            if isinstance(search.get(pool), str):
                search[pool] = [n.strip() for n in search[pool].split(",") if n.strip()]

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            search=cls._build_section(SearchConfig, search),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares.

        Unknown keys in the TOML source are ignored so that newer config
        files do not break older code.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)

