"""Smoke test runner for lexiscore."""

from __future__ import annotations

import argparse
import hashlib
import logging
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

import numpy as np

from data.corpus import Document
from features.indexer import BucketPolicy
from lexicon.lexicon import Lexicon
from main import PipelineConfig, SentimentPipeline
from storage.db import ResultsDatabase

_VOCABULARY = [
    "senate", "trial", "vote", "president", "report", "city", "market", "storm",
    "good", "great", "win", "hope", "bad", "crisis", "attack", "fear",
]
_SOURCES = ["nytimes", "washingtonpost", "cnn", "foxnews"]


@dataclass(frozen=True)
class _SyntheticCorpusConfig:
    base_time: datetime
    documents: int = 200
    words_per_document: int = 12
    days: int = 7


def build_corpus(config: _SyntheticCorpusConfig) -> List[Document]:
    rng = np.random.default_rng(_seed("lexiscore"))
    documents = []
    for i in range(config.documents):
        words = rng.choice(_VOCABULARY, size=config.words_per_document)
        offset = timedelta(days=int(rng.integers(0, config.days)), minutes=int(rng.integers(0, 1440)))
        documents.append(
            Document(
                id=f"{i:06d}",
                text=" ".join(words) + " https://t.co/" + f"{i:x}",
                timestamp=config.base_time + offset,
                group_key=_SOURCES[i % len(_SOURCES)],
            )
        )
    return documents


def _seed(value: str) -> int:
    digest = hashlib.sha256(value.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "little")


def _parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="lexiscore smoke test")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    return parser.parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = _parse_args(argv)
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    documents = build_corpus(
        _SyntheticCorpusConfig(base_time=datetime(2020, 1, 13, tzinfo=timezone.utc))
    )
    lexicon = Lexicon.from_categories(
        {"positive": ["good", "great", "win", "hope"], "negative": ["bad", "crisis", "attack", "fear"]},
        name="smoke",
    )

    try:
        with tempfile.TemporaryDirectory() as tmpdir:
            database = ResultsDatabase(f"{tmpdir}/smoke.db")
            for policy in BucketPolicy:
                window_size = 80 if policy is BucketPolicy.BY_FIXED_WINDOW else None
                config = PipelineConfig(bucket_policy=policy, window_size=window_size, max_workers=4)
                result = SentimentPipeline(config, lexicon).run(documents)
                if not result.net:
                    raise RuntimeError(f"No net sentiment rows for {policy.value}")
                database.save_scored_rows(policy.value, result.scored)
                database.save_net_sentiment(policy.value, result.net, config.value_scale.value)
                print(f"{policy.value}: {len(result.totals)} partitions, {len(result.tokens)} tokens")
    except Exception as exc:
        message = f"SMOKE TEST FAILED: {exc}"
        print(message)
        if args.verbose:
            logging.exception("Smoke test failure")
        return 1

    print("SMOKE TEST PASSED: every bucket policy produced net sentiment")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
