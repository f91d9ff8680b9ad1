"""Pinyin and stroke lookups for single Chinese characters."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple, Union

from .pinyinlookup import PinyinLookup
from .stroke import STROKES, Stroke, pretty_string

# Letters standing for strokes: heng, shu, pie, na, zhe.
_STROKE_LETTERS = {"h": "1", "s": "2", "p": "3", "n": "4", "z": "5"}

DUYIN_CHAR_LIMIT = 20


def _is_valid_text(text: str) -> bool:
    return not any(0xD800 <= ord(c) <= 0xDFFF for c in text)


class PinyinHelper:
    """Answers reading and stroke queries from lazily loaded tables."""

    def __init__(
        self,
        lookup: Optional[PinyinLookup] = None,
        stroke: Optional[Stroke] = None,
    ) -> None:
        self.pinyin_lookup = lookup if lookup is not None else PinyinLookup()
        self.stroke = stroke if stroke is not None else Stroke()

    def lookup(self, char: Union[str, int]) -> List[str]:
        """Pinyin readings of ``char``; empty if the table cannot be loaded."""
        if self.pinyin_lookup.load():
            return self.pinyin_lookup.lookup(char)
        return []

    def lookup_stroke(self, text: str, limit: int) -> List[Tuple[str, str]]:
        """Characters near a stroke sequence given as digits or as letters.

        ``text`` is either all of ``12345`` or all of ``hspnz``; anything
        else gives an empty list.
        """
        if not text or not self.stroke.load():
            return []
        if text[0] in STROKES:
            if any(c not in STROKES for c in text):
                return []
            return self.stroke.lookup(text, limit)
        if text[0] in _STROKE_LETTERS:
            if any(c not in _STROKE_LETTERS for c in text):
                return []
            converted = "".join(_STROKE_LETTERS[c] for c in text)
            return self.stroke.lookup(converted, limit)
        return []

    def reverse_lookup_stroke(self, hanzi: str) -> str:
        """Stroke sequence of ``hanzi``, or an empty string."""
        if not self.stroke.load():
            return ""
        return self.stroke.reverse_lookup(hanzi)

    def pretty_stroke_string(self, strokes: str) -> str:
        """Stroke sequence rendered with stroke glyphs, or an empty string."""
        if not self.stroke.load():
            return ""
        return pretty_string(strokes)

    def duyin_candidates(self, texts: Iterable[str]) -> List[str]:
        """Lines of the form "字 (reading, reading)" for characters of ``texts``.

        Duplicate and invalid texts are skipped; only the first few
        characters of each text are looked up.
        """
        seen: List[str] = []
        for text in texts:
            if text and text not in seen:
                seen.append(text)
        candidates: List[str] = []
        for text in seen:
            if not _is_valid_text(text):
                continue
            for counter, char in enumerate(text):
                readings = self.lookup(char)
                if readings:
                    candidates.append(f"{char} ({', '.join(readings)})")
                if counter >= DUYIN_CHAR_LIMIT:
                    break
        return candidates