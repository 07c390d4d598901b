"""Text normalization shared by the dictionary, segmenter and match engine."""

import unicodedata

# Katakana block that maps one-to-one onto hiragana (ァ..ヶ -> ぁ..ゖ)
_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30F6
_KANA_OFFSET = 0x60


def normalize_key(key: str) -> str:
    """Fold a keystroke or spelling to the form candidates are compared in."""
    return unicodedata.normalize("NFKC", key).casefold()


def normalize_phrase(phrase: str) -> str:
    """Compose combining marks so dakuten kana become single units."""
    return unicodedata.normalize("NFC", phrase)


def fold_kana(text: str) -> str:
    """Map katakana to hiragana, leaving every other character alone."""
    return "".join(
        chr(ord(ch) - _KANA_OFFSET) if _KATAKANA_START <= ord(ch) <= _KATAKANA_END else ch
        for ch in text
    )


def literal_spelling(unit: str) -> str:
    """Spelling typed for a unit the dictionary does not cover."""
    return normalize_key(unit) or unit


def is_typable_key(key: object) -> bool:
    """
    Input-boundary filter for raw key events.

    Only single printable characters reach the match engine; named keys
    such as "Shift" or "ArrowUp" and control characters are dropped.
    """
    if not isinstance(key, str) or len(key) != 1:
        return False
    return unicodedata.category(key)[0] != "C"


def drop_control(text: str) -> str:
    """Remove control and format characters, which no key event can produce."""
    return "".join(ch for ch in text if unicodedata.category(ch)[0] != "C")
