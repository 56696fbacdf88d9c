"""The pipeline performs no network I/O."""

from __future__ import annotations

from main import PipelineConfig, SentimentPipeline


def test_pipeline_runs_offline(mock_no_network: None, example_documents, nrc_lexicon) -> None:
    config = PipelineConfig(max_workers=2)
    result = SentimentPipeline(config, nrc_lexicon).run(example_documents)
    assert result.documents == 3
    assert len(result.tokens) == 6
