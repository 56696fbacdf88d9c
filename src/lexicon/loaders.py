"""Adapters that turn lexicon sources into :class:`Lexicon` objects."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import pandas as pd
import yaml

from features.errors import LexiconLoadError

from .lexicon import Lexicon

LexiconSource = Union[Lexicon, Mapping[str, Any], pd.DataFrame, str, Path]

_logger = logging.getLogger(__name__)


def load(source: LexiconSource, name: Optional[str] = None, label: str = "score") -> Lexicon:
    """Load a lexicon from an in-memory object or a CSV / YAML file.

    Mappings are interpreted by value type: ``{category: [words]}`` is a
    binary category lexicon, ``{word: number}`` a signed-scalar one.
    """
    if isinstance(source, Lexicon):
        return source
    if isinstance(source, pd.DataFrame):
        return _from_frame(source, name or "frame")
    if isinstance(source, Mapping):
        return _from_mapping(source, name or "mapping", label)
    if isinstance(source, (str, Path)):
        return _from_path(Path(source), name, label)
    raise LexiconLoadError(f"Unsupported lexicon source type: {type(source).__name__}")


def _from_path(path: Path, name: Optional[str], label: str) -> Lexicon:
    if not path.exists():
        raise LexiconLoadError(f"Lexicon file not found: {path}")

    lexicon_name = name or path.stem
    suffix = path.suffix.lower()
    try:
        if suffix in {".yaml", ".yml"}:
            with path.open("r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle) or {}
            if not isinstance(payload, Mapping):
                raise LexiconLoadError(f"Lexicon file must contain a mapping: {path}")
            lexicon = _from_mapping(payload, lexicon_name, label)
        elif suffix in {".csv", ".tsv"}:
            frame = pd.read_csv(path, sep="\t" if suffix == ".tsv" else ",")
            lexicon = _from_frame(frame, lexicon_name)
        elif suffix == ".txt":
            with path.open("r", encoding="utf-8") as handle:
                words = [line.strip() for line in handle if line.strip() and not line.startswith("#")]
            lexicon = Lexicon.from_word_list(words, label=lexicon_name, name=lexicon_name)
        else:
            raise LexiconLoadError(f"Unsupported lexicon file type: {path.suffix}")
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise LexiconLoadError(f"Failed to read lexicon {path}: {exc}") from exc

    _logger.info("Loaded lexicon %s with %d words from %s", lexicon.name, len(lexicon), path)
    return lexicon


def _from_mapping(payload: Mapping[str, Any], name: str, label: str) -> Lexicon:
    if not payload:
        return Lexicon({}, name=name)

    values = list(payload.values())
    if all(isinstance(value, (list, tuple, set, frozenset)) for value in values):
        return Lexicon.from_categories(payload, name=name)
    if all(isinstance(value, (int, float)) and not isinstance(value, bool) for value in values):
        return Lexicon.from_scores(payload, label=label, name=name)
    raise LexiconLoadError(
        "Lexicon mapping must be {category: [words]} or {word: number}"
    )


def _from_frame(frame: pd.DataFrame, name: str) -> Lexicon:
    columns = {str(col).lower(): col for col in frame.columns}
    word_col = columns.get("word")
    if word_col is None:
        raise LexiconLoadError("Lexicon table requires a 'word' column")

    label_col = next((columns[c] for c in ("sentiment", "label", "category") if c in columns), None)
    weight_col = next((columns[c] for c in ("weight", "value", "score") if c in columns), None)

    if label_col is None and weight_col is None:
        raise LexiconLoadError("Lexicon table requires a label or a weight column")

    if label_col is None:
        frame = frame.assign(_label="score")
        label_col = "_label"

    return Lexicon.from_frame(
        frame,
        word_column=word_col,
        label_column=label_col,
        weight_column=weight_col,
        name=name,
    )
