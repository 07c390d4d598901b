"""
Tests for dictionary building and greedy longest-match segmentation.
"""

import pytest
from pydantic import ValidationError

from src.data import load_dictionary
from src.engine import Dictionary, PatternEntry, build_dictionary, segment


SMALL_ENTRIES = [
    {"key": "き", "romanizations": ["ki"]},
    {"key": "きゃ", "romanizations": ["kya", "kilya"]},
    {"key": "ゃ", "romanizations": ["xya", "lya"]},
    {"key": "く", "romanizations": ["ku", "cu"]},
    {"key": "ん", "romanizations": ["nn", "xn"]},
]


@pytest.fixture(scope="module")
def kana():
    return load_dictionary()


class TestBuildDictionary:
    """Ordering, input shapes and normalization of dictionary entries."""

    def test_longest_key_first(self):
        """Longer keys are tried before shorter ones."""
        d = build_dictionary(SMALL_ENTRIES)
        assert d.entries[0].key == "きゃ"
        assert d.max_key_len == 2

    def test_ties_keep_source_order(self):
        """Keys of equal length stay in the order they were given."""
        d = build_dictionary(SMALL_ENTRIES)
        singles = [e.key for e in d.entries if len(e.key) == 1]
        assert singles == ["き", "ゃ", "く", "ん"]

    def test_original_field_names(self):
        """Pattern/TypePattern records are accepted."""
        d = build_dictionary([{"Pattern": "し", "TypePattern": ["shi", "si", "ci"]}])
        assert d.lookup("し").romanizations == ["shi", "si", "ci"]

    def test_mapping_input(self):
        """A plain {key: spellings} object is accepted."""
        d = build_dictionary({"ち": ["chi", "ti"], "つ": ["tsu", "tu"]})
        assert len(d) == 2
        assert d.lookup("ち").canonical == "chi"

    def test_pattern_entry_input(self):
        """PatternEntry objects pass through unchanged."""
        entry = PatternEntry(key="ふ", romanizations=["fu", "hu"])
        d = build_dictionary([entry])
        assert d.lookup("ふ") == entry

    def test_spellings_are_normalized(self):
        """Spellings are case-folded, stripped and de-duplicated."""
        d = build_dictionary([{"key": "か", "romanizations": ["KA", " ka ", "Ca"]}])
        assert d.lookup("か").romanizations == ["ka", "ca"]

    def test_duplicate_keys_merge(self):
        """A repeated key adds its new spellings after the existing ones."""
        d = build_dictionary([
            {"key": "じ", "romanizations": ["ji"]},
            {"key": "じ", "romanizations": ["zi", "ji"]},
        ])
        assert len(d) == 1
        assert d.lookup("じ").romanizations == ["ji", "zi"]

    def test_blank_spellings_rejected(self):
        """An entry without a usable spelling is invalid."""
        with pytest.raises(ValidationError):
            build_dictionary([{"key": "あ", "romanizations": ["", "  "]}])

    def test_missing_key_rejected(self):
        """An entry without a key is invalid."""
        with pytest.raises(ValidationError):
            build_dictionary([{"romanizations": ["a"]}])

    def test_empty_dictionary(self):
        """An empty dictionary has no keys."""
        d = Dictionary()
        assert d.max_key_len == 0
        assert "あ" not in d

    def test_katakana_lookup(self):
        """Katakana keys resolve to their hiragana entry."""
        d = build_dictionary(SMALL_ENTRIES)
        assert d.lookup("キャ").key == "きゃ"
        assert "ク" in d


class TestSegment:
    """Greedy longest-match segmentation."""

    def test_longest_match_wins(self):
        """きゃ is taken as one group rather than き + ゃ."""
        d = build_dictionary(SMALL_ENTRIES)
        groups = segment("きゃく", d)
        assert [g.source_units for g in groups] == ["きゃ", "く"]
        assert groups[0].candidates == ["kya", "kilya"]

    def test_max_key_len_limits_lookup(self):
        """Capping the key length forces shorter keys."""
        d = build_dictionary(SMALL_ENTRIES)
        groups = segment("きゃ", d, max_key_len=1)
        assert [g.source_units for g in groups] == ["き", "ゃ"]

    def test_sokuon_group(self, kana):
        """The small tsu binds to the following kana."""
        groups = segment("まっか", kana)
        assert [g.source_units for g in groups] == ["ま", "っか"]
        assert groups[1].canonical == "kka"

    def test_round_trip(self, kana):
        """Source units of all groups rebuild the phrase."""
        for phrase in ["ちょっとまって", "しんかんせん", "びしゃすぷらんと", "きゃりーぱみゅぱみゅ"]:
            groups = segment(phrase, kana)
            assert "".join(g.source_units for g in groups) == phrase
            assert not any(g.literal for g in groups)

    def test_unmapped_symbol_is_literal(self):
        """Symbols outside the dictionary become literal groups."""
        d = build_dictionary(SMALL_ENTRIES)
        groups = segment("き@", d)
        assert groups[-1].literal is True
        assert groups[-1].source_units == "@"
        assert groups[-1].candidates == ["@"]

    def test_fullwidth_literal_typed_halfwidth(self):
        """Full-width symbols are typed as their ASCII form."""
        d = build_dictionary(SMALL_ENTRIES)
        groups = segment("Ａ＃", d)
        assert [g.source_units for g in groups] == ["Ａ", "＃"]
        assert [g.candidates for g in groups] == [["a"], ["#"]]

    def test_hangul_passthrough(self, kana):
        """Scripts the dictionary does not cover pass through unit by unit."""
        groups = segment("한자", kana)
        assert [g.candidates for g in groups] == [["한"], ["자"]]
        assert all(g.literal for g in groups)

    def test_katakana_phrase_keeps_source(self, kana):
        """Katakana segments with the hiragana table but keeps its own text."""
        groups = segment("キャンプ", kana)
        assert [g.source_units for g in groups] == ["キャ", "ン", "プ"]
        assert groups[0].canonical == "kya"

    def test_empty_phrase(self, kana):
        """Nothing to type yields no groups."""
        assert segment("", kana) == []
