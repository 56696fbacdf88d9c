"""Partition assignment for ordered token streams."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from data.corpus import Document, Token

from .errors import PartitionOrderError


@dataclass(frozen=True, order=True)
class ByDate:
    date: date

    def columns(self) -> Dict[str, Any]:
        return {"date": self.date}


@dataclass(frozen=True, order=True)
class ByWindow:
    window_id: int

    def columns(self) -> Dict[str, Any]:
        return {"index": self.window_id}


@dataclass(frozen=True, order=True)
class ByGroup:
    key: str

    def columns(self) -> Dict[str, Any]:
        return {"group": self.key}


@dataclass(frozen=True, order=True)
class ByGroupAndDate:
    key: str
    date: date

    def columns(self) -> Dict[str, Any]:
        return {"group": self.key, "date": self.date}


Partition = Union[ByDate, ByWindow, ByGroup, ByGroupAndDate]


def partition_sort_key(partition: Partition) -> Tuple[str, Partition]:
    """Sort key that keeps mixed partition schemes from comparing across types."""
    return (type(partition).__name__, partition)


class BucketPolicy(str, Enum):
    BY_CALENDAR_DATE = "by_calendar_date"
    BY_FIXED_WINDOW = "by_fixed_window"
    BY_GROUP = "by_group"
    BY_GROUP_AND_DATE = "by_group_and_date"


@dataclass(frozen=True)
class IndexedToken:
    token: Token
    partition: Partition

    @property
    def text(self) -> str:
        return self.token.text


class Indexer:
    """Assign each token the partition it is aggregated under."""

    def __init__(self, policy: BucketPolicy | str, window_size: Optional[int] = None) -> None:
        self._policy = BucketPolicy(policy)
        if self._policy is BucketPolicy.BY_FIXED_WINDOW:
            if window_size is None or isinstance(window_size, bool) or int(window_size) != window_size:
                raise ValueError("by_fixed_window requires an integer window_size")
            if window_size <= 0:
                raise ValueError(f"window_size must be positive, got {window_size}")
        self._window_size = int(window_size) if window_size is not None else None

    @property
    def policy(self) -> BucketPolicy:
        return self._policy

    @property
    def window_size(self) -> Optional[int]:
        return self._window_size

    def index(self, tokens: Iterable[Token]) -> List[IndexedToken]:
        """Return the tokens paired with their partitions, in input order.

        Fixed-window bucketing requires positions to be strictly increasing in
        the order supplied; anything else means the total order was rebuilt
        or shuffled after positions were assigned.
        """
        indexed: List[IndexedToken] = []
        previous: Optional[int] = None
        for token in tokens:
            if self._policy is BucketPolicy.BY_FIXED_WINDOW:
                if previous is not None and token.position <= previous:
                    raise PartitionOrderError(
                        f"Token position {token.position} follows {previous}; "
                        "fixed-window bucketing needs the frozen corpus order"
                    )
                previous = token.position
            indexed.append(IndexedToken(token=token, partition=self.partition_of(token)))
        return indexed

    def partition_of(self, token: Token) -> Partition:
        if self._policy is BucketPolicy.BY_CALENDAR_DATE:
            return ByDate(token.date)
        if self._policy is BucketPolicy.BY_FIXED_WINDOW:
            return ByWindow(token.position // self._window_size)
        if self._policy is BucketPolicy.BY_GROUP:
            return ByGroup(token.group_key)
        return ByGroupAndDate(token.group_key, token.date)

    def partition_of_document(self, document: Document) -> Optional[Partition]:
        """Partition a whole document falls into, or None for window bucketing."""
        if self._policy is BucketPolicy.BY_CALENDAR_DATE:
            return ByDate(document.date)
        if self._policy is BucketPolicy.BY_GROUP:
            return ByGroup(document.group_key)
        if self._policy is BucketPolicy.BY_GROUP_AND_DATE:
            return ByGroupAndDate(document.group_key, document.date)
        return None
