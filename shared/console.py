"""
Bombe Console Interface
========================

Rich console wrapper shared by the Bombe commands: the start-up banner,
section rules, status lines, a key-search progress bar and plain tables.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

import datetime as _dt
from contextlib import contextmanager
from typing import Any, Generator, Sequence

from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

_BOMBE_THEME = Theme(
    {
        "bombe.rule": "bold bright_magenta",
        "bombe.ok": "bold green",
        "bombe.warn": "bold yellow",
        "bombe.fail": "bold red",
        "bombe.label": "bold bright_blue",
        "bombe.dim": "dim white",
    }
)

_BANNER_ART = r"""[bright_cyan]
  ____   ___  __  __ ____  _____
 | __ ) / _ \|  \/  | __ )| ____|
 |  _ \| | | | |\/| |  _ \|  _|
 | |_) | |_| | |  | | |_) | |___
 |____/ \___/|_|  |_|____/|_____|
[/bright_cyan]"""

_TAGLINE = "Enigma I ciphertext-only key search"


class BombeConsole:
    """Presentation layer of the Bombe CLI.

    Usage::

        con = BombeConsole()
        con.banner("1.0.0")
        with con.progress("Searching", total=3_163_680) as (bar, task):
            bar.update(task, advance=17_576)
        con.success("Search complete")

    Args:
        quiet: Suppress all output; used for the JSON output mode.
    """

    def __init__(self, *, quiet: bool = False) -> None:
        self._console = Console(theme=_BOMBE_THEME, quiet=quiet, highlight=False)

    @property
    def rich(self) -> Console:
        """The wrapped :class:`rich.console.Console`."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Banner / sections
    # ------------------------------------------------------------------ #

    def banner(self, version: str) -> None:
        stamp = _dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        body = Text.from_markup(
            f"{_BANNER_ART}\n[bold]{_TAGLINE}[/bold]\n"
            f"[bombe.dim]v{version}  |  {stamp}[/bombe.dim]"
        )
        self._console.print(
            Panel(Align.center(body), border_style="bright_cyan", padding=(0, 2))
        )

    def section(self, title: str) -> None:
        self._console.rule(f" {title} ", style="bombe.rule")

    # ------------------------------------------------------------------ #
    #  Status lines
    # ------------------------------------------------------------------ #

    def _status(self, style: str, tag: str, message: str) -> None:
        self._console.print(f"[{style}]{escape(tag)}[/{style}] {escape(message)}")

    def success(self, message: str) -> None:
        self._status("bombe.ok", "[+]", message)

    def warning(self, message: str) -> None:
        self._status("bombe.warn", "[!]", message)

    def error(self, message: str) -> None:
        self._status("bombe.fail", "[x] ERROR:", message)

    # ------------------------------------------------------------------ #
    #  Progress bar
    # ------------------------------------------------------------------ #

    @contextmanager
    def progress(
        self,
        description: str,
        total: int,
    ) -> Generator[tuple[Progress, int], None, None]:
        """Progress bar counting evaluated keys.

        Yields:
            ``(progress, task_id)``; advance with
            ``progress.update(task_id, advance=keys)``.
        """
        bar = Progress(
            SpinnerColumn("line", style="bright_cyan"),
            TextColumn("[bombe.label]{task.description}"),
            BarColumn(bar_width=None, complete_style="bright_green"),
            TextColumn("{task.completed:,.0f}/{task.total:,.0f} keys"),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=self._console,
        )
        with bar:
            yield bar, bar.add_task(description, total=total)

    # ------------------------------------------------------------------ #
    #  Tables
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Print *rows* under *columns*; cells are converted with ``str``."""
        tbl = Table(title=title, border_style="bright_cyan", header_style="bold")
        for idx, name in enumerate(columns):
            tbl.add_column(name, style=styles[idx] if styles else None)
        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))
        self._console.print(tbl)
