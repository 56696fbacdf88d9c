"""Corpus records and the single token ordering used by every later stage."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

from text.tokenizer import Tokenizer

_logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = {
    "id": "id",
    "text": "text",
    "timestamp": "created_at",
    "group_key": "screen_name",
}


class Document(BaseModel):
    id: str = Field(
        ...,
        min_length=1,
        description="Stable document identifier.",
        examples=["1217158412186767360"],
    )
    text: str = Field(
        "",
        description="Raw document text; malformed values are stored as empty text.",
        examples=["Senate opens impeachment trial https://t.co/abc"],
    )
    timestamp: datetime = Field(
        ...,
        description="Publication time.",
        examples=["2020-01-14T18:22:05Z"],
    )
    group_key: str = Field(
        "",
        description="Source partition key, e.g. the account name.",
        examples=["nytimes"],
    )
    metrics: Dict[str, float] = Field(
        default_factory=dict,
        description="Auxiliary numeric fields such as retweet or favorite counts.",
        examples=[{"retweet_count": 120, "favorite_count": 431}],
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return value if isinstance(value, str) else str(value)

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("timestamp", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_validator("group_key", mode="before")
    @classmethod
    def _coerce_group(cls, value: Any) -> str:
        if value is None or (isinstance(value, float) and pd.isna(value)):
            return ""
        return str(value)

    @property
    def date(self) -> date:
        return self.timestamp.date()


@dataclass(frozen=True)
class Token:
    document_id: str
    position: int
    text: str
    date: date
    group_key: str


def documents_from_records(records: Iterable[Mapping[str, Any]]) -> List[Document]:
    """Validate in-memory records (``id``, ``text``, ``timestamp``, ``group_key``)."""
    return [Document.model_validate(dict(record)) for record in records]


def documents_from_frame(
    frame: pd.DataFrame,
    columns: Optional[Mapping[str, str]] = None,
    metric_columns: Sequence[str] = (),
) -> List[Document]:
    """Adapt a tabular corpus, mapping its column names onto Document fields."""
    mapping = dict(DEFAULT_COLUMNS)
    mapping.update(columns or {})

    missing = [mapping[key] for key in ("id", "timestamp") if mapping[key] not in frame.columns]
    if missing:
        raise KeyError(f"Corpus table missing columns: {', '.join(missing)}")

    timestamps = pd.to_datetime(frame[mapping["timestamp"]], utc=True)
    documents: List[Document] = []
    for position, (_, row) in enumerate(frame.iterrows()):
        metrics = {
            name: float(row[name])
            for name in metric_columns
            if name in frame.columns and not pd.isna(row[name])
        }
        documents.append(
            Document(
                id=row[mapping["id"]],
                text=row.get(mapping["text"], ""),
                timestamp=timestamps.iloc[position].to_pydatetime(),
                group_key=row.get(mapping["group_key"], ""),
                metrics=metrics,
            )
        )
    return documents


def load_corpus(
    path: str | Path,
    columns: Optional[Mapping[str, str]] = None,
    metric_columns: Sequence[str] = (),
) -> List[Document]:
    """Read a CSV or JSON-lines corpus from disk."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in {".jsonl", ".ndjson"}:
        frame = pd.read_json(path, lines=True, dtype={"id": str})
    elif suffix == ".json":
        frame = pd.read_json(path, dtype={"id": str})
    else:
        frame = pd.read_csv(path, dtype={"id": str})

    documents = documents_from_frame(frame, columns=columns, metric_columns=metric_columns)
    _logger.info("Loaded %d documents from %s", len(documents), path)
    return documents


def order_tokens(
    documents: Sequence[Document],
    tokenizer: Tokenizer,
    max_workers: Optional[int] = None,
) -> List[Token]:
    """Tokenize a corpus and assign every token its global position.

    Documents are ordered chronologically (ties broken by id) and tokens keep
    their reading order. Tokenization may run concurrently; positions are only
    assigned once every document has been tokenized, so the order is fixed.
    """
    ordered = sorted(documents, key=_document_sort_key)
    if not ordered:
        return []

    def _tokenize(document: Document) -> List[str]:
        return list(tokenizer.tokenize(document.text))

    if max_workers and max_workers > 1 and len(ordered) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            token_lists = list(pool.map(_tokenize, ordered))
    else:
        token_lists = [_tokenize(document) for document in ordered]

    tokens: List[Token] = []
    for document, words in zip(ordered, token_lists):
        doc_date = document.date
        for word in words:
            tokens.append(
                Token(
                    document_id=document.id,
                    position=len(tokens),
                    text=word,
                    date=doc_date,
                    group_key=document.group_key,
                )
            )
    return tokens


def _document_sort_key(document: Document) -> Tuple[datetime, str]:
    return (document.timestamp, document.id)
