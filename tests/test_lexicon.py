"""Tests for lexicons and lexicon loading."""

from pathlib import Path

import pandas as pd
import pytest

from features.errors import LexiconLoadError
from lexicon.lexicon import Lexicon, LexiconEntry
from lexicon.loaders import load


class TestLexicon:
    def test_lookup_is_case_normalized(self, bing_lexicon):
        assert bing_lexicon.lookup("GOOD") == frozenset({LexiconEntry("positive", 1.0)})

    def test_missing_word_returns_empty_set(self, bing_lexicon):
        assert bing_lexicon.lookup("neutral") == frozenset()
        assert "neutral" not in bing_lexicon

    def test_signed_scalar_lexicon(self, afinn_lexicon):
        assert afinn_lexicon.lookup("bad") == frozenset({LexiconEntry("score", -3.0)})
        assert afinn_lexicon.labels == frozenset({"score"})

    def test_multi_label_lexicon(self, nrc_lexicon):
        labels = {entry.label for entry in nrc_lexicon.lookup("attack")}
        assert labels == {"anger", "fear", "negative"}

    def test_custom_word_list_has_unit_weight(self):
        lexicon = Lexicon.from_word_list(["Trump", "impeachment"], label="politics")
        assert lexicon.lookup("trump") == frozenset({LexiconEntry("politics", 1.0)})
        assert len(lexicon) == 2

    def test_restrict_returns_new_lexicon(self, nrc_lexicon):
        restricted = nrc_lexicon.restrict(["positive", "negative"])
        assert restricted.labels == frozenset({"positive", "negative"})
        assert nrc_lexicon.labels >= {"anger", "joy"}
        assert restricted.lookup("attack") == frozenset({LexiconEntry("negative", 1.0)})

    def test_restrict_drops_words_without_kept_labels(self, nrc_lexicon):
        restricted = nrc_lexicon.restrict(["joy"])
        assert list(restricted) == ["hope"]

    def test_from_frame(self):
        frame = pd.DataFrame(
            {"word": ["abandon", "abandon", "able"], "sentiment": ["fear", "sadness", "positive"]}
        )
        lexicon = Lexicon.from_frame(frame)
        assert {entry.label for entry in lexicon.lookup("abandon")} == {"fear", "sadness"}

    def test_to_frame(self, bing_lexicon):
        frame = bing_lexicon.to_frame()
        assert list(frame.columns) == ["word", "label", "weight"]
        assert len(frame) == 8


class TestLoad:
    def test_passes_lexicon_through(self, bing_lexicon):
        assert load(bing_lexicon) is bing_lexicon

    def test_category_mapping(self):
        lexicon = load({"positive": ["win"], "negative": ["loss"]}, name="mini")
        assert lexicon.name == "mini"
        assert lexicon.lookup("loss") == frozenset({LexiconEntry("negative", 1.0)})

    def test_score_mapping(self):
        lexicon = load({"win": 2, "loss": -2})
        assert lexicon.lookup("loss") == frozenset({LexiconEntry("score", -2.0)})

    def test_invalid_mapping(self):
        with pytest.raises(LexiconLoadError):
            load({"win": "yes"})

    def test_csv_file(self, tmp_path: Path):
        path = tmp_path / "afinn.csv"
        path.write_text("word,value\ngood,3\nbad,-3\n", encoding="utf-8")
        lexicon = load(path)
        assert lexicon.name == "afinn"
        assert lexicon.lookup("bad") == frozenset({LexiconEntry("score", -3.0)})

    def test_yaml_file(self, tmp_path: Path):
        path = tmp_path / "bing.yaml"
        path.write_text("positive: [good]\nnegative: [bad]\n", encoding="utf-8")
        lexicon = load(path)
        assert lexicon.labels == frozenset({"positive", "negative"})

    def test_word_list_file(self, tmp_path: Path):
        path = tmp_path / "custom.txt"
        path.write_text("impeach\nsenate\n", encoding="utf-8")
        lexicon = load(path)
        assert lexicon.lookup("senate") == frozenset({LexiconEntry("custom", 1.0)})

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(LexiconLoadError):
            load(tmp_path / "nope.csv")

    def test_table_without_word_column(self):
        with pytest.raises(LexiconLoadError):
            load(pd.DataFrame({"term": ["x"], "sentiment": ["positive"]}))
