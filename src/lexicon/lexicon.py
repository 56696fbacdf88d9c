"""Immutable word -> (label, weight) lexicons."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Set, Tuple

import pandas as pd

EMPTY_ENTRIES: FrozenSet["LexiconEntry"] = frozenset()


@dataclass(frozen=True, order=True)
class LexiconEntry:
    label: str
    weight: float = 1.0


class Lexicon:
    """Read-only word lookup shared by every scorer that receives it.

    Words are stored case-folded; ``lookup`` folds its argument the same way
    so that tokens produced by a lowercasing tokenizer match directly.
    """

    def __init__(self, entries: Mapping[str, Iterable[LexiconEntry]], name: str = "lexicon") -> None:
        table: Dict[str, FrozenSet[LexiconEntry]] = {}
        for word, word_entries in entries.items():
            key = self._fold(word)
            if not key:
                continue
            merged = table.get(key, EMPTY_ENTRIES) | frozenset(word_entries)
            if merged:
                table[key] = merged
        self._table = MappingProxyType(table)
        self._name = name

    @classmethod
    def from_entries(
        cls, rows: Iterable[Tuple[str, str, float]], name: str = "lexicon"
    ) -> "Lexicon":
        """Build from ``(word, label, weight)`` triples."""
        grouped: Dict[str, Set[LexiconEntry]] = defaultdict(set)
        for word, label, weight in rows:
            grouped[str(word)].add(LexiconEntry(str(label), float(weight)))
        return cls(grouped, name=name)

    @classmethod
    def from_categories(
        cls, categories: Mapping[str, Iterable[str]], name: str = "categories"
    ) -> "Lexicon":
        """Binary lexicon: every word listed under a category gets weight 1."""
        return cls.from_entries(
            ((word, label, 1.0) for label, words in categories.items() for word in words),
            name=name,
        )

    @classmethod
    def from_scores(
        cls, scores: Mapping[str, float], label: str = "score", name: str = "scores"
    ) -> "Lexicon":
        """Signed-scalar lexicon such as AFINN (word -> integer valence)."""
        return cls.from_entries(((word, label, value) for word, value in scores.items()), name=name)

    @classmethod
    def from_word_list(
        cls, words: Iterable[str], label: str = "custom", name: str = "custom"
    ) -> "Lexicon":
        return cls.from_entries(((word, label, 1.0) for word in words), name=name)

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        word_column: str = "word",
        label_column: str = "sentiment",
        weight_column: Optional[str] = None,
        name: str = "frame",
    ) -> "Lexicon":
        """Build from a tidy table, one row per (word, label) pair."""
        missing = [col for col in (word_column, label_column) if col not in frame.columns]
        if weight_column is not None and weight_column not in frame.columns:
            missing.append(weight_column)
        if missing:
            raise KeyError(f"Lexicon table missing columns: {', '.join(missing)}")

        frame = frame.dropna(subset=[word_column, label_column])
        weights = (
            frame[weight_column].astype(float)
            if weight_column is not None
            else pd.Series(1.0, index=frame.index)
        )
        return cls.from_entries(
            zip(frame[word_column].astype(str), frame[label_column].astype(str), weights),
            name=name,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def labels(self) -> FrozenSet[str]:
        return frozenset(entry.label for entries in self._table.values() for entry in entries)

    def lookup(self, word: str) -> FrozenSet[LexiconEntry]:
        if not isinstance(word, str):
            return EMPTY_ENTRIES
        return self._table.get(self._fold(word), EMPTY_ENTRIES)

    def restrict(self, labels: Iterable[str]) -> "Lexicon":
        """Return a new lexicon holding only entries whose label is in ``labels``."""
        keep = frozenset(labels)
        return Lexicon(
            {
                word: [entry for entry in entries if entry.label in keep]
                for word, entries in self._table.items()
            },
            name=self._name,
        )

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {"word": word, "label": entry.label, "weight": entry.weight}
            for word, entries in sorted(self._table.items())
            for entry in sorted(entries)
        ]
        return pd.DataFrame(rows, columns=["word", "label", "weight"])

    def __contains__(self, word: object) -> bool:
        return bool(self.lookup(word))  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"Lexicon(name={self._name!r}, words={len(self)}, labels={sorted(self.labels)!r})"

    @staticmethod
    def _fold(word: str) -> str:
        return str(word).strip().replace("’", "'").lower()
