from __future__ import annotations

import socket
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

import pytest

from data.corpus import Document, Token, order_tokens
from features.indexer import BucketPolicy, IndexedToken, Indexer
from lexicon.lexicon import Lexicon
from main import PipelineConfig
from text.tokenizer import Tokenizer


@pytest.fixture
def make_document() -> Callable[..., Document]:
    counter = {"n": 0}

    def _factory(
        text: object,
        day: str = "2020-01-01",
        group: str = "nytimes",
        doc_id: Optional[str] = None,
        minute: int = 0,
    ) -> Document:
        counter["n"] += 1
        timestamp = datetime.fromisoformat(day).replace(tzinfo=timezone.utc) + timedelta(minutes=minute)
        return Document(
            id=doc_id or f"doc-{counter['n']:04d}",
            text=text,
            timestamp=timestamp,
            group_key=group,
        )

    return _factory


@pytest.fixture
def bing_lexicon() -> Lexicon:
    return Lexicon.from_categories(
        {
            "positive": ["good", "great", "win", "hope"],
            "negative": ["bad", "crisis", "attack", "fear"],
        },
        name="bing",
    )


@pytest.fixture
def nrc_lexicon() -> Lexicon:
    return Lexicon.from_entries(
        [
            ("attack", "anger", 1),
            ("attack", "fear", 1),
            ("attack", "negative", 1),
            ("hope", "anticipation", 1),
            ("hope", "joy", 1),
            ("hope", "positive", 1),
            ("crisis", "fear", 1),
            ("crisis", "negative", 1),
        ],
        name="nrc",
    )


@pytest.fixture
def afinn_lexicon() -> Lexicon:
    return Lexicon.from_scores({"good": 3, "bad": -3, "crisis": -3, "hope": 2}, name="afinn")


@pytest.fixture
def example_documents(make_document) -> List[Document]:
    return [
        make_document("good bad", day="2020-01-01", minute=0),
        make_document("bad ok", day="2020-01-01", minute=5),
        make_document("good good", day="2020-01-02", minute=0),
    ]


@pytest.fixture
def tokenizer() -> Tokenizer:
    return Tokenizer()


@pytest.fixture
def index_documents(tokenizer: Tokenizer) -> Callable[..., List[IndexedToken]]:
    def _index(
        documents: Sequence[Document],
        policy: BucketPolicy = BucketPolicy.BY_CALENDAR_DATE,
        window_size: Optional[int] = None,
    ) -> List[IndexedToken]:
        tokens: List[Token] = order_tokens(documents, tokenizer)
        return Indexer(policy, window_size).index(tokens)

    return _index


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(labels=["positive", "negative"], top_words=5)


@pytest.fixture
def mock_no_network(monkeypatch: pytest.MonkeyPatch) -> None:
    def _blocked(*_args: object, **_kwargs: object) -> None:
        raise ConnectionError("Network access disabled for tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
