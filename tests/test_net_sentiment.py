"""Tests for the net sentiment combiner."""

import math
from datetime import date

from features.indexer import ByDate
from features.net_sentiment import NetSentimentCombiner, NetSentimentRow, ValueScale
from features.normalize import ScoredRow

DAY1 = ByDate(date(2020, 1, 1))
DAY2 = ByDate(date(2020, 1, 2))


def _row(partition, label, raw, total):
    rate = raw / total if total else float("nan")
    return ScoredRow(partition=partition, label=label, raw_count=raw, total_tokens=total, rate=rate)


ROWS = [
    _row(DAY1, "negative", 2.0, 4),
    _row(DAY1, "positive", 1.0, 4),
    _row(DAY2, "negative", 0.0, 2),
    _row(DAY2, "positive", 2.0, 2),
]


def test_raw_count_difference():
    net = NetSentimentCombiner(value=ValueScale.RAW_COUNT).combine(ROWS)
    assert net == [NetSentimentRow(DAY1, -1.0), NetSentimentRow(DAY2, 2.0)]


def test_rate_difference():
    net = NetSentimentCombiner(value="rate").combine(ROWS)
    assert net == [NetSentimentRow(DAY1, -0.25), NetSentimentRow(DAY2, 1.0)]


def test_missing_label_contributes_zero():
    net = NetSentimentCombiner(value=ValueScale.RAW_COUNT).combine(
        [_row(DAY1, "positive", 3.0, 5), _row(DAY2, "joy", 1.0, 5)]
    )
    assert net == [NetSentimentRow(DAY1, 3.0), NetSentimentRow(DAY2, 0.0)]


def test_single_signed_label():
    combiner = NetSentimentCombiner(positive_label="score", negative_label=None, value="raw_count")
    assert combiner.labels == ["score"]
    assert combiner.combine([_row(DAY1, "score", -4.0, 9)]) == [NetSentimentRow(DAY1, -4.0)]


def test_undefined_rates_propagate():
    rows = [_row(DAY1, "positive", 0.0, 0), _row(DAY1, "negative", 0.0, 0)]
    (row,) = NetSentimentCombiner().combine(rows)
    assert math.isnan(row.sentiment)


def test_empty_input():
    assert NetSentimentCombiner().combine([]) == []
