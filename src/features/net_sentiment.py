"""Net sentiment (positive minus negative) per partition."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .indexer import Partition, partition_sort_key
from .normalize import ScoredRow


class ValueScale(str, Enum):
    RATE = "rate"
    RAW_COUNT = "raw_count"


@dataclass(frozen=True)
class NetSentimentRow:
    partition: Partition
    sentiment: float


class NetSentimentCombiner:
    """Label arithmetic over scored rows; indifferent to normalization.

    With ``negative_label=None`` the positive label's value is returned as is,
    which suits single-label signed lexicons where the weight already carries
    the sign.
    """

    def __init__(
        self,
        positive_label: str = "positive",
        negative_label: Optional[str] = "negative",
        value: ValueScale | str = ValueScale.RATE,
    ) -> None:
        self._positive = positive_label
        self._negative = negative_label
        self._value = ValueScale(value)

    @property
    def labels(self) -> List[str]:
        return [label for label in (self._positive, self._negative) if label is not None]

    def combine(self, rows: Iterable[ScoredRow]) -> List[NetSentimentRow]:
        values: Dict[Partition, Dict[str, float]] = defaultdict(dict)
        for row in rows:
            # every partition seen gets a row, even if only other labels were scored
            bucket = values[row.partition]
            if row.label in (self._positive, self._negative):
                bucket[row.label] = self._value_of(row)

        result: List[NetSentimentRow] = []
        for partition in sorted(values, key=partition_sort_key):
            bucket = values[partition]
            sentiment = bucket.get(self._positive, 0.0)
            if self._negative is not None:
                sentiment -= bucket.get(self._negative, 0.0)
            result.append(NetSentimentRow(partition=partition, sentiment=sentiment))
        return result

    def _value_of(self, row: ScoredRow) -> float:
        if self._value is ValueScale.RAW_COUNT:
            return float(row.raw_count)
        return float(row.rate)
