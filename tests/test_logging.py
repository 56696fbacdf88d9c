"""Tests for structured logging setup."""

import json
import logging
from pathlib import Path

from observability.logging import LoggingConfig, get_logger, run_context, setup_logging


def _flush() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_file_logging_tags_records_with_run(tmp_path: Path):
    log_file = tmp_path / "logs" / "run.log"
    setup_logging({"logging": {"to_console": False, "to_file": True, "file": str(log_file)}})

    with run_context("run_abc", lexicon="bing"):
        get_logger("tests").info("scored", partitions=3)
    get_logger("tests").info("outside")
    _flush()

    inside, outside = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert inside["event"] == "scored"
    assert inside["partitions"] == 3
    assert (inside["run_id"], inside["lexicon"]) == ("run_abc", "bing")
    assert inside["level"] == "info"
    assert "run_id" not in outside


def test_stdlib_records_share_the_renderer(tmp_path: Path):
    log_file = tmp_path / "plain.log"
    setup_logging(LoggingConfig(to_console=False, to_file=True, file=str(log_file), json=False))

    logging.getLogger("lexicon.loaders").warning("Loaded lexicon %s", "nrc")
    _flush()

    (line,) = log_file.read_text(encoding="utf-8").splitlines()
    assert "event='Loaded lexicon nrc'" in line
    assert "level='warning'" in line


def test_level_names_are_resolved():
    config = setup_logging({"level": "debug", "to_console": False})
    assert config.level == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG


def test_unknown_level_falls_back_to_info():
    setup_logging({"level": "chatty", "to_console": False})
    assert logging.getLogger().level == logging.INFO
