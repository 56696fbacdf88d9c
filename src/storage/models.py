"""Pydantic models for stored pipeline results."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class RunRecord(BaseModel):
    run_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Identifier shared by every row a pipeline run produced.",
        examples=["run_3f9a1c2e"],
    )
    started_at: datetime = Field(
        ...,
        description="UTC timestamp when the run started.",
        examples=["2026-01-30T14:05:12Z"],
    )
    lexicon: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Name of the lexicon used for scoring.",
        examples=["bing"],
    )
    bucket_policy: str = Field(
        ...,
        description="Partition scheme.",
        examples=["by_calendar_date"],
    )
    window_size: Optional[int] = Field(
        None,
        gt=0,
        description="Token window width for fixed-window bucketing.",
        examples=[80],
    )
    documents: int = Field(
        ...,
        ge=0,
        description="Number of documents in the corpus.",
        examples=[3200],
    )
    tokens: int = Field(
        ...,
        ge=0,
        description="Number of tokens after filtering.",
        examples=[41877],
    )


class ScoredRecord(BaseModel):
    run_id: str = Field(..., min_length=1, max_length=64)
    source: Optional[str] = Field(
        None,
        description="Group partition key, if the scheme has one.",
        examples=["nytimes"],
    )
    day: Optional[date] = Field(
        None,
        description="Calendar date partition key, if the scheme has one.",
        examples=["2020-01-14"],
    )
    window_id: Optional[int] = Field(
        None,
        ge=0,
        description="Fixed-window index, if the scheme has one.",
        examples=[12],
    )
    label: str = Field(
        ...,
        min_length=1,
        description="Lexicon label.",
        examples=["negative"],
    )
    raw_count: float = Field(
        ...,
        description="Summed lexicon weight for the label in the partition.",
        examples=[14.0],
    )
    total_tokens: int = Field(
        ...,
        ge=0,
        description="All tokens in the partition.",
        examples=[311],
    )
    rate: Optional[float] = Field(
        None,
        description="raw_count / total_tokens; null when the partition has no tokens.",
        examples=[0.045],
    )


class NetSentimentRecord(BaseModel):
    run_id: str = Field(..., min_length=1, max_length=64)
    source: Optional[str] = Field(None, examples=["nytimes"])
    day: Optional[date] = Field(None, examples=["2020-01-14"])
    window_id: Optional[int] = Field(None, ge=0, examples=[12])
    value_scale: str = Field(
        ...,
        description="Whether sentiment was computed from rates or raw counts.",
        examples=["rate"],
    )
    sentiment: Optional[float] = Field(
        None,
        description="Positive minus negative; null when undefined.",
        examples=[-0.012],
    )
