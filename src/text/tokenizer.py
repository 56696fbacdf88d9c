"""Deterministic word tokenizer for short documents."""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, Optional, Union

from pydantic import BaseModel, Field

_URL_RE = r"(?P<url>(?:https?://|www\.)\S+)"
_WORD_RE = r"(?P<word>[#@]?\w+(?:['’]\w+)*)"
_OTHER_RE = r"(?P<other>\S)"
_TOKEN_RE = re.compile("|".join((_URL_RE, _WORD_RE, _OTHER_RE)), re.UNICODE)
_NUMBER_RE = re.compile(r"^[#@]?\d+(?:[.,]\d+)*$")


class TokenizerConfig(BaseModel):
    lowercase: bool = Field(True, description="Case-fold tokens before filtering.")
    strip_punct: bool = Field(True, description="Drop punctuation tokens.")
    strip_urls: bool = Field(True, description="Drop http(s):// and www. links.")
    strip_numbers: bool = Field(True, description="Drop purely numeric tokens.")
    strip_symbols: bool = Field(True, description="Drop symbol tokens such as currency or emoji.")
    stopwords: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Words removed after normalization.",
        examples=[["the", "a", "of"]],
    )


class TokenSequence:
    """Lazy, re-iterable view of the tokens in one text."""

    def __init__(self, tokenizer: "Tokenizer", text: str) -> None:
        self._tokenizer = tokenizer
        self._text = text

    def __iter__(self) -> Iterator[str]:
        return self._tokenizer._iter_tokens(self._text)

    def __repr__(self) -> str:
        return f"TokenSequence({list(self)!r})"


class Tokenizer:
    """Split raw text into normalized word tokens."""

    def __init__(self, config: Optional[TokenizerConfig] = None) -> None:
        self._config = config or TokenizerConfig()
        self._stopwords = frozenset(self.normalize(word) for word in self._config.stopwords)

    @property
    def config(self) -> TokenizerConfig:
        return self._config

    def normalize(self, word: str) -> str:
        word = unicodedata.normalize("NFC", word).replace("’", "'")
        return word.lower() if self._config.lowercase else word

    def tokenize(self, text: object) -> TokenSequence:
        """Return the tokens of ``text``; non-text input is an empty document."""
        if not isinstance(text, str):
            text = ""
        return TokenSequence(self, text)

    def count(self, text: object) -> int:
        return sum(1 for _ in self.tokenize(text))

    def _iter_tokens(self, text: str) -> Iterator[str]:
        cfg = self._config
        for match in _TOKEN_RE.finditer(text):
            kind = match.lastgroup
            token = match.group(kind)

            if kind == "url":
                if cfg.strip_urls:
                    continue
            elif kind == "word":
                if cfg.strip_numbers and _NUMBER_RE.match(token):
                    continue
            else:
                category = unicodedata.category(token)
                if cfg.strip_punct and category.startswith("P"):
                    continue
                if cfg.strip_symbols and category.startswith("S"):
                    continue

            token = self.normalize(token)
            if not any(ch.isalpha() for ch in token):
                continue
            if token in self._stopwords:
                continue
            yield token


def load_stopwords(source: Union[str, Path, Iterable[str]]) -> FrozenSet[str]:
    """Read stopwords from a one-per-line file or an iterable of words.

    Words keep their case; a :class:`Tokenizer` folds them with its own
    normalization, so they match whatever case setting it uses.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        with path.open("r", encoding="utf-8") as handle:
            lines = handle.read().splitlines()
    else:
        lines = list(source)

    words = set()
    for line in lines:
        word = str(line).strip()
        if not word or word.startswith("#"):
            continue
        words.add(word)
    return frozenset(words)
