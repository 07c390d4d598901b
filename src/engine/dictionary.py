"""
Pattern dictionary and greedy longest-match segmentation.

The dictionary maps grapheme keys (kana, digraphs such as "きゃ") to the
romanizations accepted for them. Segmentation walks a phrase left to right
and always takes the longest key that matches at the current position.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from pydantic import BaseModel, Field, ConfigDict

from .models import Group, PatternEntry
from .normalize import fold_kana, literal_spelling


class Dictionary(BaseModel):
    """
    Ordered table of pattern entries, longest key first.

    Attributes:
        entries: Pattern entries sorted by descending key length
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    entries: List[PatternEntry] = Field(default_factory=list)
    _index: Dict[str, PatternEntry] = None

    def model_post_init(self, __context) -> None:
        """Sort entries (stable) and build the key index."""
        self.entries = sorted(self.entries, key=lambda e: -len(e.key))
        self._index = {}
        for entry in self.entries:
            self._index.setdefault(entry.key, entry)

    @property
    def max_key_len(self) -> int:
        """Length of the longest key, 0 for an empty dictionary."""
        return len(self.entries[0].key) if self.entries else 0

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: str) -> bool:
        return self.lookup(key) is not None

    def lookup(self, key: str) -> Optional[PatternEntry]:
        """
        Find the entry for an exact key.

        Katakana keys fall back to their hiragana form so one kana table
        serves both scripts.

        Args:
            key: Slice of the phrase to look up

        Returns:
            The matching entry, or None
        """
        entry = self._index.get(key)
        if entry is None:
            folded = fold_kana(key)
            if folded != key:
                entry = self._index.get(folded)
        return entry


RawEntries = Union[Iterable[Union[PatternEntry, Mapping[str, Any]]], Mapping[str, List[str]]]


def build_dictionary(raw_entries: RawEntries) -> Dictionary:
    """
    Build a Dictionary from loaded source data.

    Accepts PatternEntry objects, dicts using either field naming
    ({"key", "romanizations"} or {"Pattern", "TypePattern"}), or a plain
    {key: [spellings]} mapping. Repeated keys are merged, keeping the
    spellings of the first occurrence first.

    Args:
        raw_entries: Entries from a dictionary source

    Returns:
        Dictionary ordered longest key first

    Raises:
        pydantic.ValidationError: If an entry has no key or no spelling
    """
    if isinstance(raw_entries, Mapping):
        raw_entries = [{"key": k, "romanizations": v} for k, v in raw_entries.items()]

    merged: Dict[str, PatternEntry] = {}
    for raw in raw_entries:
        entry = raw if isinstance(raw, PatternEntry) else PatternEntry.model_validate(raw)
        if entry.key in merged:
            existing = merged[entry.key]
            extra = [r for r in entry.romanizations if r not in existing.romanizations]
            merged[entry.key] = PatternEntry(key=entry.key, romanizations=existing.romanizations + extra)
        else:
            merged[entry.key] = entry

    return Dictionary(entries=list(merged.values()))


def literal_group(unit: str) -> Group:
    """Passthrough group for a unit the dictionary does not cover."""
    return Group(source_units=unit, romanizations=[literal_spelling(unit)], literal=True)


def segment(phrase: str, dictionary: Dictionary, max_key_len: Optional[int] = None) -> List[Group]:
    """
    Split a phrase into matching groups, greedy longest match first.

    This is not a globally optimal segmentation: once a key is taken the
    scan never backtracks.

    Args:
        phrase: Reading to be typed
        dictionary: Pattern dictionary
        max_key_len: Longest key length to try (defaults to the dictionary's)

    Returns:
        Groups whose source units concatenate back to `phrase`
    """
    if max_key_len is None:
        max_key_len = dictionary.max_key_len

    groups: List[Group] = []
    pos = 0
    while pos < len(phrase):
        longest = min(max_key_len, len(phrase) - pos)
        for length in range(longest, 0, -1):
            piece = phrase[pos:pos + length]
            entry = dictionary.lookup(piece)
            if entry is not None:
                groups.append(Group(source_units=piece, romanizations=list(entry.romanizations)))
                pos += length
                break
        else:
            groups.append(literal_group(phrase[pos]))
            pos += 1

    return groups
