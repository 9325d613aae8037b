"""
Bombe CLI
==========

Click-based command-line interface for the Bombe key search.

Usage::

    python -m bombe crack --message ZTQBLVXKPBPGAVQBRYDYQ...
    python -m bombe crack --message ... --crib KEEP --rotors 1,2,3,4,5 --reflectors B
    python -m bombe encipher --key AAB --rotors 1,2,3 --reflector B HELLOWORLD
    python -m bombe rotors

Exit codes: 0 on success, 1 for invalid input (missing message, unknown
rotor or reflector, pool too small, non A-Z text), 2 for usage errors.

References:
    - Click Documentation. https://click.palletsprojects.com/
"""

from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Optional

import click

from shared.config import BombeConfig
from shared.console import BombeConsole
from shared.logger import BombeLogger

from bombe import __version__
from bombe.core.batch import KEY_SPACE_SIZE
from bombe.core.engine import SearchEngine
from bombe.core.exceptions import BombeError, MissingMessageError
from bombe.core.machine import EnigmaMachine
from bombe.core.models import EvaluationStrategy, MachineConfig, ScoringMode, SearchResult
from bombe.core.rotor import validate_text
from bombe.output.console import BombeConsoleOutput
from bombe.output.report import BombeReportGenerator


def _split_names(value: Optional[str]) -> Optional[list[str]]:
    """Split a comma-separated name list, e.g. ``"1, 2,3"``."""
    if value is None:
        return None
    return [name.strip() for name in value.split(",") if name.strip()]


def _fail(ctx: click.Context, exc: Exception) -> None:
    console: BombeConsole = ctx.obj["console"]
    if console.rich.quiet:
        click.echo(f"Error: {exc}", err=True)
    else:
        console.error(str(exc))
    ctx.exit(1)


# ===================================================================== #
#  CLI Group
# ===================================================================== #

@click.group()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a Bombe configuration file (TOML).",
)
@click.option(
    "--output", "-o",
    type=click.Choice(["console", "json"]),
    default="console",
    help="Output format.",
)
@click.option(
    "--output-file", "-f",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the JSON report to this file.",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    default=False,
    help="Suppress the banner and the progress bar.",
)
@click.version_option(__version__, prog_name="bombe")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[str],
    output: str,
    output_file: Optional[str],
    quiet: bool,
) -> None:
    """Bombe -- Enigma I ciphertext-only key search.

    Tries every rotor order, reflector and start position, and ranks the
    decryptions by how closely they match English letter frequencies.
    """
    ctx.ensure_object(dict)

    try:
        bombe_config = BombeConfig.load(config)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--config") from exc
    ctx.obj["config"] = bombe_config
    ctx.obj["output_format"] = output
    ctx.obj["output_file"] = output_file
    ctx.obj["quiet"] = quiet

    console = BombeConsole(quiet=output == "json")
    ctx.obj["console"] = console
    ctx.obj["display"] = BombeConsoleOutput(console)
    ctx.obj["reporter"] = BombeReportGenerator()

    if not quiet and output == "console":
        console.banner(version=__version__)


# ===================================================================== #
#  Subcommands
# ===================================================================== #

@cli.command()
@click.option("--message", "-m", default=None, help="The encrypted message to crack (A-Z).")
@click.option("--crib", default=None, help="Plaintext fragment believed to be in the message.")
@click.option("--rotors", "-r", default=None, help='Comma-separated rotor names (default "1,2,3,4,5").')
@click.option("--reflectors", "-u", default=None, help='Comma-separated reflector names (default "A,B,C").')
@click.option(
    "--num-threads", "--num_threads", "num_threads",
    type=click.IntRange(min=1),
    default=None,
    help="Number of worker threads.",
)
@click.option(
    "--results", "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Number of ranked candidates to display (default 3).",
)
@click.option(
    "--scoring",
    type=click.Choice([m.value for m in ScoringMode]),
    default=None,
    help="Frequency scorer: basic (unigram) or extended (unigram + digram).",
)
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in EvaluationStrategy]),
    default=None,
    help="Evaluator: vectorized (NumPy lockstep) or scalar (one machine per key).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Stop after this many seconds and show the best candidates so far.",
)
@click.pass_context
def crack(
    ctx: click.Context,
    message: Optional[str],
    crib: Optional[str],
    rotors: Optional[str],
    reflectors: Optional[str],
    num_threads: Optional[int],
    results: Optional[int],
    scoring: Optional[str],
    strategy: Optional[str],
    timeout: Optional[float],
) -> None:
    """Recover the key of an Enigma I message by exhaustive search."""
    config: BombeConfig = ctx.obj["config"]
    console: BombeConsole = ctx.obj["console"]
    display: BombeConsoleOutput = ctx.obj["display"]

    # Engine log lines render through the progress bar console
    logger = BombeLogger.from_config(
        "engine", config.global_settings, console=None if console.rich.quiet else console.rich
    )
    engine = SearchEngine(config, logger=logger)
    try:
        if not message:
            raise MissingMessageError("You must provide a message to be cracked (--message)")
        # Resolve names up front so bad input fails before the progress bar starts
        rotor_names = _split_names(rotors)
        reflector_names = _split_names(reflectors)
        rotor_pool = engine.resolve_rotors(
            config.search.rotors if rotor_names is None else rotor_names
        )
        reflector_pool = engine.resolve_reflectors(
            config.search.reflectors if reflector_names is None else reflector_names
        )
        validate_text(message, "message")
    except BombeError as exc:
        _fail(ctx, exc)
        return

    search = functools.partial(
        engine.run,
        message,
        rotor_pool,
        reflector_pool,
        crib=crib,
        results=results,
        workers=num_threads,
        scoring=scoring,
        strategy=strategy,
        timeout=timeout,
    )
    units = len(rotor_pool) * (len(rotor_pool) - 1) * (len(rotor_pool) - 2) * len(reflector_pool)
    try:
        if ctx.obj["quiet"] or console.rich.quiet:
            result = search()
        else:
            with console.progress("Searching key space", total=units * KEY_SPACE_SIZE) as (bar, task):
                result = search(progress=lambda keys: bar.update(task, advance=keys))
    except BombeError as exc:
        _fail(ctx, exc)
        return

    _emit(ctx, result)
    if ctx.obj["output_format"] == "console":
        display.display_search(result)


def _emit(ctx: click.Context, result: SearchResult) -> None:
    """Write the JSON report to a file or stdout when requested."""
    reporter: BombeReportGenerator = ctx.obj["reporter"]
    output_file = ctx.obj["output_file"]

    if output_file:
        path = reporter.generate_json(result, Path(output_file))
        ctx.obj["console"].success(f"JSON report saved to: {path}")
    elif ctx.obj["output_format"] == "json":
        click.echo(reporter.to_json(result))


@cli.command()
@click.argument("text")
@click.option("--key", "-k", default="AAA", show_default=True, help="Start positions, left to right.")
@click.option("--rotors", "-r", default="1,2,3", show_default=True, help="Three rotor names, left to right.")
@click.option("--reflector", "-u", default="B", show_default=True, help="Reflector name.")
@click.pass_context
def encipher(ctx: click.Context, text: str, key: str, rotors: str, reflector: str) -> None:
    """Encipher (or, reciprocally, decipher) TEXT under a fixed key."""
    config: BombeConfig = ctx.obj["config"]
    engine = SearchEngine(config)
    names = _split_names(rotors) or []
    if len(names) != 3:
        raise click.BadParameter("exactly three rotor names are required", param_hint="--rotors")
    if len(key) != 3:
        raise click.BadParameter("the key must have three letters", param_hint="--key")

    try:
        rotor_triple = engine.table.rotors(names)
        machine_config = MachineConfig.from_key(
            key, rotor_triple, engine.table.reflector(reflector)
        )
        output = EnigmaMachine(machine_config).encipher(validate_text(text, "text"))
    except BombeError as exc:
        _fail(ctx, exc)
        return

    click.echo(output)


@cli.command("rotors")
@click.pass_context
def rotors_command(ctx: click.Context) -> None:
    """List the rotors and reflectors known to the rotor table."""
    engine_table = SearchEngine(ctx.obj["config"]).table
    display: BombeConsoleOutput = ctx.obj["display"]
    if ctx.obj["output_format"] == "json":
        click.echo(json.dumps(
            [
                {
                    "name": rotor.name,
                    "description": rotor.description,
                    "wiring": rotor.mapping,
                    "reflector": rotor.name in engine_table.reflector_names,
                    "notch": rotor.turnover_letter,
                }
                for rotor in engine_table
            ],
            indent=2,
        ))
        return
    display.display_rotor_table(engine_table)


# ===================================================================== #
#  Entry Point
# ===================================================================== #

def main() -> None:
    """Main entry point for the Bombe CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
