"""Partition totals and rate normalization of aggregated label counts."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

from .errors import MissingTotalsError, ZeroDenominatorError
from .indexer import IndexedToken, Partition, partition_sort_key
from .sentiment import AggregateKey

Totals = Dict[Partition, int]

_logger = logging.getLogger(__name__)


class ZeroDenominatorPolicy(str, Enum):
    """What a partition with zero tokens normalizes to.

    ``NAN`` keeps the row and sets ``rate`` to NaN; ``RAISE`` raises
    :class:`ZeroDenominatorError`. Neither drops the partition nor reports 0.
    """

    NAN = "nan"
    RAISE = "raise"


@dataclass(frozen=True)
class ScoredRow:
    partition: Partition
    label: str
    raw_count: float
    total_tokens: int
    rate: float

    @property
    def is_undefined(self) -> bool:
        return math.isnan(self.rate)


def count_totals(tokens: Iterable[IndexedToken]) -> Totals:
    """Count every token per partition, matched or not."""
    totals: Dict[Partition, int] = defaultdict(int)
    for indexed in tokens:
        totals[indexed.partition] += 1
    return dict(totals)


class Normalizer:
    """Outer-join aggregates with totals and divide counts by partition size."""

    def __init__(
        self,
        labels: Optional[Iterable[str]] = None,
        zero_denominator: ZeroDenominatorPolicy | str = ZeroDenominatorPolicy.NAN,
    ) -> None:
        self._labels = sorted(set(labels)) if labels is not None else None
        self._zero_denominator = ZeroDenominatorPolicy(zero_denominator)

    @property
    def zero_denominator(self) -> ZeroDenominatorPolicy:
        return self._zero_denominator

    def normalize(
        self,
        aggregate: Mapping[AggregateKey, float],
        totals: Mapping[Partition, int],
    ) -> List[ScoredRow]:
        """Return one row per (partition, label), partitions taken from ``totals``.

        Labels default to those observed in ``aggregate``. Pairs absent from
        ``aggregate`` get ``raw_count`` 0.
        """
        orphans = {partition for partition, _ in aggregate if partition not in totals}
        if orphans:
            sample = ", ".join(repr(p) for p in sorted(orphans, key=partition_sort_key)[:3])
            raise MissingTotalsError(
                f"{len(orphans)} aggregated partition(s) have no token total: {sample}"
            )

        labels = self._labels
        if labels is None:
            labels = sorted({label for _, label in aggregate})

        rows: List[ScoredRow] = []
        undefined = 0
        for partition in sorted(totals, key=partition_sort_key):
            total = int(totals[partition])
            for label in labels:
                raw_count = float(aggregate.get((partition, label), 0.0))
                if total == 0:
                    if self._zero_denominator is ZeroDenominatorPolicy.RAISE:
                        raise ZeroDenominatorError(f"Partition {partition!r} has zero tokens")
                    rate = float("nan")
                    undefined += 1
                else:
                    rate = raw_count / total
                rows.append(
                    ScoredRow(
                        partition=partition,
                        label=label,
                        raw_count=raw_count,
                        total_tokens=total,
                        rate=rate,
                    )
                )

        if undefined:
            _logger.warning("%d scored rows have an undefined rate (zero tokens)", undefined)
        return rows
