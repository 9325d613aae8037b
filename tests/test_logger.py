"""Tests for the structured logger."""

import io
import json

from rich.console import Console

from shared.config import GlobalConfig
from shared.logger import BombeLogger


def test_json_file_logging(tmp_path):
    log_file = tmp_path / "logs" / "bombe.log"
    log = BombeLogger("search", log_file=log_file, json_logs=True, console_output=False)
    with log.operation("unit"):
        log.info("Evaluated %d keys", 17576, rotors="1,2,3")

    entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert entry["logger"] == "bombe.search"
    assert entry["message"] == "Evaluated 17576 keys"
    assert entry["component"] == "search"
    assert entry["operation"] == "unit"
    assert entry["extra"] == {"rotors": "1,2,3"}


def test_level_filtering(tmp_path):
    log_file = tmp_path / "bombe.log"
    log = BombeLogger("filter", log_level="WARNING", log_file=log_file, console_output=False)
    log.info("hidden")
    log.warning("shown")
    text = log_file.read_text(encoding="utf-8")
    assert "shown" in text
    assert "hidden" not in text


def test_from_config_debug():
    log = BombeLogger.from_config("dbg", GlobalConfig(debug=True))
    assert log.underlying.level == 10
    assert log.component == "dbg"


def test_timed():
    log = BombeLogger("timer", console_output=False)
    with log.timed("work") as timer:
        pass
    assert timer.elapsed >= 0.0


def test_shared_console():
    buffer = io.StringIO()
    console = Console(file=buffer, width=120)
    log = BombeLogger("shared", console=console)
    log.warning("Search timed out")
    assert log.underlying.handlers[0].console is console
    assert "Search timed out" in buffer.getvalue()


def test_from_config_passes_console():
    console = Console(file=io.StringIO())
    log = BombeLogger.from_config("cfg", GlobalConfig(), console=console)
    assert log.underlying.handlers[0].console is console
