"""Tests for the SQLite results store."""

from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from features.indexer import ByDate, ByGroupAndDate, ByWindow
from features.net_sentiment import NetSentimentRow
from features.normalize import ScoredRow
from storage.db import ResultsDatabase
from storage.models import RunRecord


@pytest.fixture
def database(tmp_path: Path) -> ResultsDatabase:
    return ResultsDatabase(str(tmp_path / "results.db"))


def test_run_round_trip(database):
    run = RunRecord(
        run_id="run_1",
        started_at=datetime(2020, 1, 5, 12, tzinfo=timezone.utc),
        lexicon="bing",
        bucket_policy="by_fixed_window",
        window_size=80,
        documents=10,
        tokens=123,
    )
    database.save_run(run)
    assert database.get_run("run_1") == run
    assert database.get_run("missing") is None
    assert [r.run_id for r in database.list_runs()] == ["run_1"]


def test_scored_rows_keep_partition_columns(database):
    rows = [
        ScoredRow(ByGroupAndDate("cnn", date(2020, 1, 1)), "negative", 2.0, 4, 0.5),
        ScoredRow(ByGroupAndDate("cnn", date(2020, 1, 1)), "positive", 1.0, 4, 0.25),
    ]
    assert database.save_scored_rows("run_1", rows) == 2

    stored = database.get_scored_rows("run_1")
    assert [(r.source, r.day, r.label, r.rate) for r in stored] == [
        ("cnn", date(2020, 1, 1), "negative", 0.5),
        ("cnn", date(2020, 1, 1), "positive", 0.25),
    ]
    assert stored[0].window_id is None


def test_undefined_rates_are_stored_as_null(database):
    rows = [ScoredRow(ByDate(date(2020, 1, 3)), "positive", 0.0, 0, float("nan"))]
    database.save_scored_rows("run_2", rows)
    (stored,) = database.get_scored_rows("run_2")
    assert stored.rate is None
    assert stored.total_tokens == 0


def test_net_sentiment_rows(database):
    rows = [NetSentimentRow(ByWindow(1), -0.5), NetSentimentRow(ByWindow(0), float("nan"))]
    database.save_net_sentiment("run_3", rows, "rate")
    stored = database.get_net_sentiment("run_3")
    assert [(r.window_id, r.sentiment) for r in stored] == [(0, None), (1, -0.5)]
    assert {r.value_scale for r in stored} == {"rate"}
