"""Lexicon scoring of indexed tokens into per-partition label counts."""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from lexicon.lexicon import Lexicon

from .indexer import IndexedToken, Partition

AggregateKey = Tuple[Partition, str]
Aggregate = Dict[AggregateKey, float]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WordContribution:
    label: str
    word: str
    count: int
    weight: float


def merge_aggregates(*aggregates: Mapping[AggregateKey, float]) -> Aggregate:
    """Sum partial aggregates; merge order does not affect the result."""
    merged: Dict[AggregateKey, float] = defaultdict(float)
    for aggregate in aggregates:
        for key, value in aggregate.items():
            merged[key] += value
    return dict(merged)


class Scorer:
    """Join indexed tokens against a lexicon and sum matched weights.

    A token matching several labels counts toward each of them, so the
    label totals for a partition can exceed its token count when a
    multi-label lexicon is used.
    """

    def __init__(
        self,
        lexicon: Lexicon,
        labels: Optional[Iterable[str]] = None,
        presence_only: bool = False,
    ) -> None:
        self._labels = frozenset(labels) if labels is not None else None
        self._lexicon = lexicon.restrict(self._labels) if self._labels is not None else lexicon
        self._presence_only = presence_only

    @property
    def lexicon(self) -> Lexicon:
        return self._lexicon

    @property
    def labels(self) -> frozenset:
        return self._labels if self._labels is not None else self._lexicon.labels

    def score(self, tokens: Iterable[IndexedToken]) -> Aggregate:
        aggregate: Dict[AggregateKey, float] = defaultdict(float)
        for indexed in tokens:
            for entry in self._lexicon.lookup(indexed.text):
                increment = 1.0 if self._presence_only else entry.weight
                aggregate[(indexed.partition, entry.label)] += increment
        return dict(aggregate)

    def score_sharded(
        self,
        shards: Sequence[Sequence[IndexedToken]],
        max_workers: Optional[int] = None,
    ) -> Aggregate:
        """Score shards independently and merge the partial sums."""
        if not shards:
            return {}
        if max_workers and max_workers > 1 and len(shards) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                partials = list(pool.map(self.score, shards))
        else:
            partials = [self.score(shard) for shard in shards]
        _logger.debug("Merged %d scoring shards", len(partials))
        return merge_aggregates(*partials)

    def word_contributions(
        self, tokens: Iterable[IndexedToken], top_n: Optional[int] = 10
    ) -> Dict[str, List[WordContribution]]:
        """Words that contribute the most weight to each label, largest first."""
        counts: Dict[Tuple[str, str], int] = defaultdict(int)
        weights: Dict[Tuple[str, str], float] = defaultdict(float)
        for indexed in tokens:
            for entry in self._lexicon.lookup(indexed.text):
                key = (entry.label, indexed.text)
                counts[key] += 1
                weights[key] += 1.0 if self._presence_only else entry.weight

        by_label: Dict[str, List[WordContribution]] = defaultdict(list)
        for (label, word), count in counts.items():
            by_label[label].append(WordContribution(label, word, count, weights[(label, word)]))

        result: Dict[str, List[WordContribution]] = {}
        for label, rows in sorted(by_label.items()):
            rows.sort(key=lambda row: row.word)
            ranked = sorted(rows, key=lambda row: (abs(row.weight), row.count), reverse=True)
            result[label] = ranked if top_n is None else ranked[:top_n]
        return result


def shard_tokens(tokens: Sequence[IndexedToken], shard_count: int) -> List[Sequence[IndexedToken]]:
    """Split tokens into contiguous shards for :meth:`Scorer.score_sharded`."""
    if shard_count <= 1 or len(tokens) <= 1:
        return [tokens]
    size = -(-len(tokens) // shard_count)
    return [tokens[start:start + size] for start in range(0, len(tokens), size)]
