"""Exception hierarchy for the scoring pipeline."""

from __future__ import annotations


class PipelineError(RuntimeError):
    """Base class for errors raised by the scoring pipeline."""


class LexiconLoadError(PipelineError):
    """Raised when a lexicon source cannot be read or adapted."""


class PartitionOrderError(PipelineError):
    """Raised when tokens reach window bucketing without a frozen total order."""


class MissingTotalsError(PipelineError):
    """Raised when an aggregate references a partition with no token total."""


class ZeroDenominatorError(PipelineError):
    """Raised when a partition with zero tokens is normalized under the raise policy."""
