"""Main entrypoint for the lexicon scoring pipeline."""

from __future__ import annotations

import argparse
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd
import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from data.corpus import Document, Token, load_corpus, order_tokens
from features.indexer import BucketPolicy, IndexedToken, Indexer, Partition
from features.net_sentiment import NetSentimentCombiner, NetSentimentRow, ValueScale
from features.normalize import Normalizer, ScoredRow, Totals, ZeroDenominatorPolicy, count_totals
from features.sentiment import Aggregate, Scorer, WordContribution, shard_tokens
from lexicon.lexicon import Lexicon
from lexicon.loaders import load as load_lexicon
from observability.logging import LoggingConfig, get_logger, run_context, setup_logging
from storage.db import ResultsDatabase
from storage.models import RunRecord
from text.tokenizer import Tokenizer, TokenizerConfig, load_stopwords

DEFAULT_CONFIG_PATH = "config.yaml"
ENV_PREFIX = "LEXISCORE_"


class CorpusConfig(BaseModel):
    path: Optional[str] = Field(None, description="CSV or JSON-lines corpus file.")
    columns: Dict[str, str] = Field(
        default_factory=dict,
        description="Maps Document fields (id, text, timestamp, group_key) to file columns.",
        examples=[{"timestamp": "created_at", "group_key": "screen_name"}],
    )
    metric_columns: List[str] = Field(
        default_factory=list,
        examples=[["retweet_count", "favorite_count"]],
    )


class PipelineConfig(BaseModel):
    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    stopwords_file: Optional[str] = None
    bucket_policy: BucketPolicy = BucketPolicy.BY_CALENDAR_DATE
    window_size: Optional[int] = Field(None, gt=0, examples=[80])
    labels: Optional[List[str]] = Field(
        None,
        description="Label subset to score; all lexicon labels when omitted.",
        examples=[["positive", "negative"]],
    )
    positive_label: str = "positive"
    negative_label: Optional[str] = "negative"
    presence_only: bool = False
    value_scale: ValueScale = ValueScale.RATE
    zero_denominator: ZeroDenominatorPolicy = ZeroDenominatorPolicy.NAN
    max_workers: int = Field(1, ge=1)
    top_words: int = Field(10, ge=0)
    corpus: CorpusConfig = Field(default_factory=CorpusConfig)
    lexicons: Dict[str, str] = Field(
        default_factory=dict,
        description="Lexicon name -> file path.",
        examples=[{"bing": "lexicons/bing.csv"}],
    )
    output: Optional[str] = Field(None, description="Directory for CSV results.")
    db_path: Optional[str] = Field(None, description="SQLite file for results.")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("labels")
    @classmethod
    def _dedupe_labels(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return list(dict.fromkeys(str(label) for label in value))

    @model_validator(mode="after")
    def _check_window(self) -> "PipelineConfig":
        if self.bucket_policy is BucketPolicy.BY_FIXED_WINDOW and self.window_size is None:
            raise ValueError("bucket_policy by_fixed_window requires window_size")
        return self


@dataclass
class PipelineResult:
    lexicon: str
    documents: int
    tokens: List[IndexedToken]
    aggregate: Aggregate
    totals: Totals
    scored: List[ScoredRow]
    net: List[NetSentimentRow]
    contributions: Dict[str, List[WordContribution]] = field(default_factory=dict)

    def scored_frame(self) -> pd.DataFrame:
        rows = [
            {
                **row.partition.columns(),
                "label": row.label,
                "raw_count": row.raw_count,
                "total_tokens": row.total_tokens,
                "rate": row.rate,
            }
            for row in self.scored
        ]
        return pd.DataFrame(rows)

    def net_frame(self) -> pd.DataFrame:
        rows = [{**row.partition.columns(), "sentiment": row.sentiment} for row in self.net]
        return pd.DataFrame(rows)

    def contributions_frame(self) -> pd.DataFrame:
        rows = [
            {"label": item.label, "word": item.word, "n": item.count, "weight": item.weight}
            for items in self.contributions.values()
            for item in items
        ]
        return pd.DataFrame(rows, columns=["label", "word", "n", "weight"])


class SentimentPipeline:
    """Tokenize, index, score, normalize and combine a corpus in one pass."""

    def __init__(
        self,
        config: PipelineConfig,
        lexicon: Lexicon,
        tokenizer: Optional[Tokenizer] = None,
    ) -> None:
        self._config = config
        self._lexicon = lexicon
        self._tokenizer = tokenizer or Tokenizer(config.tokenizer)
        self._indexer = Indexer(config.bucket_policy, config.window_size)
        self._combiner = NetSentimentCombiner(
            positive_label=config.positive_label,
            negative_label=config.negative_label,
            value=config.value_scale,
        )
        # the combined labels are always scored, so every partition reaches the net output
        labels = set(config.labels) | set(self._combiner.labels) if config.labels is not None else None
        self._scorer = Scorer(lexicon, labels=labels, presence_only=config.presence_only)
        self._normalizer = Normalizer(
            labels=self._scorer.labels | set(self._combiner.labels),
            zero_denominator=config.zero_denominator,
        )
        self._logger = get_logger(__name__)

    @property
    def lexicon(self) -> Lexicon:
        return self._lexicon

    def run(self, documents: Sequence[Document]) -> PipelineResult:
        tokens: List[Token] = order_tokens(
            documents, self._tokenizer, max_workers=self._config.max_workers
        )
        indexed = self._indexer.index(tokens)

        shards = shard_tokens(indexed, self._config.max_workers)
        aggregate = self._scorer.score_sharded(shards, max_workers=self._config.max_workers)
        totals = self._totals(documents, indexed)
        scored = self._normalizer.normalize(aggregate, totals)
        net = self._combiner.combine(scored)
        contributions = (
            self._scorer.word_contributions(indexed, top_n=self._config.top_words)
            if self._config.top_words
            else {}
        )

        self._logger.info(
            "pipeline_run_complete",
            lexicon=self._lexicon.name,
            documents=len(documents),
            tokens=len(indexed),
            partitions=len(totals),
            matched=len(aggregate),
        )
        return PipelineResult(
            lexicon=self._lexicon.name,
            documents=len(documents),
            tokens=indexed,
            aggregate=aggregate,
            totals=totals,
            scored=scored,
            net=net,
            contributions=contributions,
        )

    def _totals(self, documents: Sequence[Document], indexed: Sequence[IndexedToken]) -> Totals:
        # documents that produced no tokens still own a (zero-sized) partition
        totals: Dict[Partition, int] = {}
        for document in documents:
            partition = self._indexer.partition_of_document(document)
            if partition is not None:
                totals.setdefault(partition, 0)
        totals.update(count_totals(indexed))
        return totals


def compare_lexicons(
    documents: Sequence[Document],
    lexicons: Mapping[str, Lexicon],
    config: PipelineConfig,
    tokenizer: Optional[Tokenizer] = None,
) -> pd.DataFrame:
    """Net sentiment per partition for several lexicons, stacked with a ``lexicon`` column."""
    frames = []
    for name, lexicon in lexicons.items():
        result = SentimentPipeline(config, lexicon, tokenizer=tokenizer).run(documents)
        frame = result.net_frame()
        frame.insert(0, "lexicon", name)
        frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=["lexicon", "sentiment"])
    return pd.concat(frames, ignore_index=True)


def build_tokenizer(config: PipelineConfig) -> Tokenizer:
    tokenizer_config = config.tokenizer
    if config.stopwords_file:
        stopwords = load_stopwords(config.stopwords_file) | tokenizer_config.stopwords
        tokenizer_config = tokenizer_config.model_copy(update={"stopwords": stopwords})
    return Tokenizer(tokenizer_config)


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _load_config(config_path: Optional[Path]) -> Dict[str, Any]:
    if config_path is not None and (config_path.parent / ".env").exists():
        load_dotenv(config_path.parent / ".env", override=False)
    else:
        load_dotenv(override=False)

    config: Dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            config = yaml.safe_load(handle) or {}
        if not isinstance(config, dict):
            raise ValueError("Config file must contain a mapping at the top level.")

    for key in ("db_path", "output", "bucket_policy"):
        env_value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
        if env_value:
            config[key] = env_value
    workers = os.getenv(f"{ENV_PREFIX}MAX_WORKERS")
    if workers:
        config["max_workers"] = _coerce_int(workers, default=1)
    return config


def _apply_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    merged = dict(config)
    if args.corpus:
        merged["corpus"] = {**dict(merged.get("corpus") or {}), "path": args.corpus}
    if args.lexicon:
        merged["lexicons"] = {Path(path).stem: path for path in args.lexicon}
    if args.policy:
        merged["bucket_policy"] = args.policy
    if args.window_size is not None:
        merged["window_size"] = args.window_size
    if args.output:
        merged["output"] = args.output
    if args.db:
        merged["db_path"] = args.db
    return merged


def _parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lexicon sentiment scoring pipeline")
    parser.add_argument("--config", default=None, help="Path to config YAML file.")
    parser.add_argument("--corpus", default=None, help="CSV or JSON-lines corpus file.")
    parser.add_argument(
        "--lexicon",
        action="append",
        default=None,
        help="Lexicon file (CSV, YAML or word list); repeat to compare lexicons.",
    )
    parser.add_argument(
        "--policy",
        choices=[policy.value for policy in BucketPolicy],
        default=None,
        help="Partition scheme.",
    )
    parser.add_argument("--window-size", type=int, default=None, help="Tokens per window.")
    parser.add_argument("--output", default=None, help="Directory for CSV results.")
    parser.add_argument("--db", default=None, help="SQLite file to store results in.")
    return parser.parse_args(argv)


def _write_outputs(result: PipelineResult, output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    result.scored_frame().to_csv(output_dir / f"{result.lexicon}_scored.csv", index=False)
    result.net_frame().to_csv(output_dir / f"{result.lexicon}_net_sentiment.csv", index=False)
    result.contributions_frame().to_csv(output_dir / f"{result.lexicon}_top_words.csv", index=False)


def _save_results(
    database: ResultsDatabase,
    run_id: str,
    started_at: datetime,
    config: PipelineConfig,
    result: PipelineResult,
) -> None:
    database.save_run(
        RunRecord(
            run_id=run_id,
            started_at=started_at,
            lexicon=result.lexicon,
            bucket_policy=config.bucket_policy.value,
            window_size=config.window_size,
            documents=result.documents,
            tokens=len(result.tokens),
        )
    )
    database.save_scored_rows(run_id, result.scored)
    database.save_net_sentiment(run_id, result.net, config.value_scale.value)


def main(argv: Optional[Iterable[str]] = None) -> List[PipelineResult]:
    args = _parse_args(argv)
    raw_config = _load_config(Path(args.config) if args.config else None)
    config = PipelineConfig.model_validate(_apply_overrides(raw_config, args))
    setup_logging(config.logging)
    logger = get_logger(__name__)

    if not config.corpus.path:
        raise ValueError("No corpus configured; pass --corpus or set corpus.path")
    if not config.lexicons:
        raise ValueError("No lexicon configured; pass --lexicon or set lexicons")

    documents = load_corpus(
        config.corpus.path,
        columns=config.corpus.columns,
        metric_columns=config.corpus.metric_columns,
    )
    tokenizer = build_tokenizer(config)
    database = ResultsDatabase(config.db_path) if config.db_path else None

    results: List[PipelineResult] = []
    for name, source in config.lexicons.items():
        lexicon = load_lexicon(source, name=name)
        run_id = f"run_{uuid.uuid4().hex[:12]}"
        started_at = datetime.now(timezone.utc)
        with run_context(run_id, lexicon=name):
            result = SentimentPipeline(config, lexicon, tokenizer=tokenizer).run(documents)
            if config.output:
                _write_outputs(result, Path(config.output))
            if database is not None:
                _save_results(database, run_id, started_at, config, result)
            logger.info("results_written", output=config.output, db=config.db_path)
        results.append(result)
    return results


if __name__ == "__main__":
    main()
