"""SQLite-backed storage for pipeline results."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlite_utils import Database

from features.indexer import Partition
from features.net_sentiment import NetSentimentRow
from features.normalize import ScoredRow

from .models import NetSentimentRecord, RunRecord, ScoredRecord

ModelT = TypeVar("ModelT", bound=BaseModel)


class ResultsDatabase:
    """SQLite storage layer backed by sqlite-utils."""

    def __init__(self, db_path: str) -> None:
        self._db = Database(db_path)
        self._ensure_tables()

    def save_run(self, run: RunRecord) -> None:
        self._db["runs"].upsert(self._model_to_row(run), pk="run_id")

    def save_scored_rows(self, run_id: str, rows: Sequence[ScoredRow]) -> int:
        records = [
            ScoredRecord(
                run_id=run_id,
                label=row.label,
                raw_count=row.raw_count,
                total_tokens=row.total_tokens,
                rate=_finite_or_none(row.rate),
                **_partition_fields(row.partition),
            )
            for row in rows
        ]
        self._db["scored"].insert_all(self._model_to_row(record) for record in records)
        return len(records)

    def save_net_sentiment(
        self, run_id: str, rows: Sequence[NetSentimentRow], value_scale: str
    ) -> int:
        records = [
            NetSentimentRecord(
                run_id=run_id,
                value_scale=value_scale,
                sentiment=_finite_or_none(row.sentiment),
                **_partition_fields(row.partition),
            )
            for row in rows
        ]
        self._db["net_sentiment"].insert_all(self._model_to_row(record) for record in records)
        return len(records)

    def get_run(self, run_id: str) -> Optional[RunRecord]:
        rows = list(self._db["runs"].rows_where("run_id = ?", [run_id], limit=1))
        if not rows:
            return None
        return self._row_to_model(RunRecord, rows[0])

    def list_runs(self) -> List[RunRecord]:
        rows = self._db["runs"].rows_where(order_by="started_at")
        return [self._row_to_model(RunRecord, row) for row in rows]

    def get_scored_rows(self, run_id: str) -> List[ScoredRecord]:
        rows = self._db["scored"].rows_where(
            "run_id = ?", [run_id], order_by="source, day, window_id, label"
        )
        return [self._row_to_model(ScoredRecord, row) for row in rows]

    def get_net_sentiment(self, run_id: str) -> List[NetSentimentRecord]:
        rows = self._db["net_sentiment"].rows_where(
            "run_id = ?", [run_id], order_by="source, day, window_id"
        )
        return [self._row_to_model(NetSentimentRecord, row) for row in rows]

    def _ensure_tables(self) -> None:
        self._ensure_table(
            "runs",
            {
                "run_id": "text",
                "started_at": "text",
                "lexicon": "text",
                "bucket_policy": "text",
                "window_size": "integer",
                "documents": "integer",
                "tokens": "integer",
            },
            pk="run_id",
        )
        self._ensure_table(
            "scored",
            {
                "run_id": "text",
                "source": "text",
                "day": "text",
                "window_id": "integer",
                "label": "text",
                "raw_count": "float",
                "total_tokens": "integer",
                "rate": "float",
            },
        )
        self._ensure_table(
            "net_sentiment",
            {
                "run_id": "text",
                "source": "text",
                "day": "text",
                "window_id": "integer",
                "value_scale": "text",
                "sentiment": "float",
            },
        )

    def _ensure_table(
        self, name: str, columns: Dict[str, str], pk: Optional[str] = None
    ) -> None:
        col_defs = []
        for col_name, col_type in columns.items():
            if pk and col_name == pk:
                col_defs.append(f'"{col_name}" {col_type.upper()} PRIMARY KEY')
            else:
                col_defs.append(f'"{col_name}" {col_type.upper()}')
        create_sql = f"CREATE TABLE IF NOT EXISTS {name} ({', '.join(col_defs)})"
        self._db.execute(create_sql)

        table = self._db.table(name)
        existing = {col.name for col in table.columns}
        for column, col_type in columns.items():
            if column not in existing:
                table.add_column(column, col_type)

    @staticmethod
    def _model_to_row(model: BaseModel) -> Dict[str, Any]:
        data = model.model_dump()
        for key, value in data.items():
            data[key] = ResultsDatabase._serialize_value(value)
        return data

    @staticmethod
    def _serialize_value(value: Any) -> Any:
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        return value

    @staticmethod
    def _row_to_model(model_cls: Type[ModelT], row: Iterable[tuple[str, Any]] | Dict[str, Any]) -> ModelT:
        row_dict = dict(row)
        filtered = {field: row_dict.get(field) for field in model_cls.model_fields}
        return model_cls.model_validate(filtered)


def _partition_fields(partition: Partition) -> Dict[str, Any]:
    columns = partition.columns()
    return {
        "source": columns.get("group"),
        "day": columns.get("date"),
        "window_id": columns.get("index"),
    }


def _finite_or_none(value: float) -> Optional[float]:
    return None if value is None or math.isnan(value) else float(value)
