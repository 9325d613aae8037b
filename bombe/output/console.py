"""
Bombe Console Output
=====================

Rich-based renderers for search results: an overview panel with the
search statistics, a ranked candidate table, and a detail panel for the
best candidate.
"""

from __future__ import annotations

from typing import Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shared.console import BombeConsole
from bombe.core.models import EvaluatedCandidate, SearchResult
from bombe.core.rotor import RotorTable


class BombeConsoleOutput:
    """Console formatters for key-search results.

    Usage::

        output = BombeConsoleOutput(BombeConsole())
        output.display_search(result)
    """

    def __init__(self, console: Optional[BombeConsole] = None) -> None:
        self.console = console or BombeConsole()
        self._rich = self.console.rich

    # ------------------------------------------------------------------ #
    #  Search results
    # ------------------------------------------------------------------ #

    def display_search(self, result: SearchResult) -> None:
        """Display the overview, ranking and best-candidate panels."""
        self.console.section("Key Search")
        self._rich.print(Panel(self._overview(result), title="Overview", border_style="cyan"))

        if result.timed_out:
            self.console.warning(
                f"Search stopped at its time limit after "
                f"{result.keys_evaluated:,} of {result.keys_total:,} keys."
            )

        if not result.candidates:
            self.console.warning("No candidates were evaluated.")
            return

        self._rich.print(self._ranking_table(result))
        self.display_candidate(result.candidates[0], title="Best Candidate")

    def display_candidate(self, candidate: EvaluatedCandidate, title: str = "Candidate") -> None:
        body = Text()
        body.append("Key: ", style="bold")
        body.append(f"{candidate.key}\n")
        body.append("Rotors: ", style="bold")
        body.append(f"{', '.join(candidate.rotors)}   ")
        body.append("Reflector: ", style="bold")
        body.append(f"{candidate.reflector}\n")
        body.append("Score: ", style="bold")
        body.append(f"{candidate.score:.3f} (smaller is better)\n")
        if candidate.crib_found:
            body.append("Crib found\n", style="bold green")
        body.append("\n")
        body.append(candidate.plaintext, style="bold bright_white")
        self._rich.print(Panel(body, title=title, border_style="bright_green"))

    @staticmethod
    def _overview(result: SearchResult) -> Text:
        text = Text()
        text.append("Ciphertext: ", style="bold")
        text.append(f"{result.ciphertext}\n")
        if result.crib:
            text.append("Crib: ", style="bold")
            text.append(f"{result.crib}\n")
        text.append("Keys: ", style="bold")
        text.append(f"{result.keys_evaluated:,} / {result.keys_total:,}\n")
        text.append("Scoring: ", style="bold")
        text.append(f"{result.scoring.value}   ")
        text.append("Strategy: ", style="bold")
        text.append(f"{result.strategy.value}   ")
        text.append("Workers: ", style="bold")
        text.append(f"{result.workers}\n")
        elapsed = result.elapsed_seconds
        if elapsed is not None:
            text.append("Elapsed: ", style="bold")
            text.append(f"{elapsed:.2f}s")
        return text

    @staticmethod
    def _ranking_table(result: SearchResult) -> Table:
        tbl = Table(
            title="Ranked Candidates",
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
        )
        tbl.add_column("#", style="dim", justify="right", width=3)
        tbl.add_column("Score", justify="right")
        tbl.add_column("Key", style="bold")
        tbl.add_column("Rotors")
        tbl.add_column("UKW")
        tbl.add_column("Plaintext", ratio=3, overflow="fold")

        for rank, candidate in enumerate(result.candidates, start=1):
            score_style = "bold green" if candidate.crib_found else ""
            tbl.add_row(
                str(rank),
                Text(f"{candidate.score:.3f}", style=score_style),
                candidate.key,
                ", ".join(candidate.rotors),
                candidate.reflector,
                candidate.plaintext,
            )
        return tbl

    # ------------------------------------------------------------------ #
    #  Rotor table
    # ------------------------------------------------------------------ #

    def display_rotor_table(self, table: RotorTable) -> None:
        self.console.section("Rotor Table")
        rows = [
            (name, rotor.description, rotor.mapping, rotor.turnover_letter)
            for name, rotor in ((n, table.rotor(n)) for n in table.rotor_names)
        ]
        rows += [
            (name, reflector.description, reflector.mapping, "-")
            for name, reflector in ((n, table.reflector(n)) for n in table.reflector_names)
        ]
        self.console.table(
            "Rotors and Reflectors",
            ["Name", "Description", "Wiring", "Notch"],
            rows,
            styles=["bold", "", "bright_white", "yellow"],
        )
