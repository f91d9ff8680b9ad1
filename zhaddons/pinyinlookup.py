"""Pinyin readings of single Chinese characters."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

_VOWELS = (
    ("", "", "", "", ""),
    ("a", "ā", "á", "ǎ", "à"),
    ("ai", "āi", "ái", "ǎi", "ài"),
    ("an", "ān", "án", "ǎn", "àn"),
    ("ang", "āng", "áng", "ǎng", "àng"),
    ("ao", "āo", "áo", "ǎo", "ào"),
    ("e", "ē", "é", "ě", "è"),
    ("ei", "ēi", "éi", "ěi", "èi"),
    ("en", "ēn", "én", "ěn", "èn"),
    ("eng", "ēng", "éng", "ěng", "èng"),
    ("er", "ēr", "ér", "ěr", "èr"),
    ("i", "ī", "í", "ǐ", "ì"),
    ("ia", "iā", "iá", "iǎ", "ià"),
    ("ian", "iān", "ián", "iǎn", "iàn"),
    ("iang", "iāng", "iáng", "iǎng", "iàng"),
    ("iao", "iāo", "iáo", "iǎo", "iào"),
    ("ie", "iē", "ié", "iě", "iè"),
    ("in", "īn", "ín", "ǐn", "ìn"),
    ("ing", "īng", "íng", "ǐng", "ìng"),
    ("iong", "iōng", "ióng", "iǒng", "iòng"),
    ("iu", "iū", "iú", "iǔ", "iù"),
    ("m", "m", "m", "m", "m"),
    ("n", "n", "ń", "ň", "ǹ"),
    ("ng", "ng", "ńg", "ňg", "ǹg"),
    ("o", "ō", "ó", "ǒ", "ò"),
    ("ong", "ōng", "óng", "ǒng", "òng"),
    ("ou", "ōu", "óu", "ǒu", "òu"),
    ("u", "ū", "ú", "ǔ", "ù"),
    ("ua", "uā", "uá", "uǎ", "uà"),
    ("uai", "uāi", "uái", "uǎi", "uài"),
    ("uan", "uān", "uán", "uǎn", "uàn"),
    ("uang", "uāng", "uáng", "uǎng", "uàng"),
    ("ue", "uē", "ué", "uě", "uè"),
    ("ueng", "uēng", "uéng", "uěng", "uèng"),
    ("ui", "uī", "uí", "uǐ", "uì"),
    ("un", "ūn", "ún", "ǔn", "ùn"),
    ("uo", "uō", "uó", "uǒ", "uò"),
    ("ü", "ǖ", "ǘ", "ǚ", "ǜ"),
    ("üan", "üān", "üán", "üǎn", "üàn"),
    ("üe", "üē", "üé", "üě", "üè"),
    ("ün", "ǖn", "ǘn", "ǚn", "ǜn"),
)

_CONSONANTS = (
    "", "b", "c", "ch", "d", "f", "g", "h", "j", "k", "l", "m", "n",
    "ng", "p", "q", "r", "s", "sh", "t", "w", "x", "y", "z", "zh",
)

_MAX_UTF8_LENGTH = 4


def get_vowel(index: int, tone: int) -> str:
    """The final with index ``index`` carrying tone mark ``tone`` (0-4)."""
    if not 0 <= index < len(_VOWELS):
        return ""
    if not 0 <= tone <= 4:
        tone = 0
    return _VOWELS[index][tone]


def get_consonant(index: int) -> str:
    """The initial with index ``index``, or an empty string."""
    if not 0 <= index < len(_CONSONANTS):
        return ""
    return _CONSONANTS[index]


@dataclass(frozen=True)
class PinyinReading:
    """One reading as indices into the initial and final tables."""

    consonant: int
    vowel: int
    tone: int

    def __str__(self) -> str:
        return get_consonant(self.consonant) + get_vowel(self.vowel, self.tone)


def parse_table(data: bytes) -> Dict[str, List[PinyinReading]]:
    """Parse a binary reading table.

    Each record is a length byte, that many bytes of one UTF-8 character,
    a count byte and ``count`` triples of (initial, final, tone) bytes.
    Raises ``ValueError`` on malformed data.
    """
    table: Dict[str, List[PinyinReading]] = {}
    pos = 0
    size = len(data)
    while pos < size:
        word_len = data[pos]
        pos += 1
        if word_len > _MAX_UTF8_LENGTH:
            raise ValueError(f"word length {word_len} too large at {pos - 1}")
        if pos + word_len > size:
            raise ValueError("truncated word")
        raw = data[pos:pos + word_len].split(b"\0", 1)[0]
        pos += word_len
        try:
            word = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError(f"invalid UTF-8 word: {exc}") from exc
        if len(word) != 1:
            raise ValueError(f"record must hold one character, got {word!r}")
        if pos >= size:
            raise ValueError("truncated reading count")
        count = data[pos]
        pos += 1
        if count == 0:
            continue
        if pos + 3 * count > size:
            raise ValueError("truncated readings")
        readings = table.setdefault(word, [])
        for _ in range(count):
            consonant, vowel, tone = data[pos:pos + 3]
            readings.append(PinyinReading(consonant, vowel, tone))
            pos += 3
    return table


class PinyinLookup:
    """Lazily loaded table of the pinyin readings of characters."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._data: Dict[str, List[PinyinReading]] = {}
        self._loaded = False
        self._load_result = False

    def load(self) -> bool:
        """Load the table once; return whether it is usable."""
        if self._loaded:
            return self._load_result
        self._loaded = True
        if self.path is None:
            return False
        try:
            self._data = parse_table(self.path.read_bytes())
        except (OSError, ValueError):
            return False
        self._load_result = True
        return True

    def lookup(self, char: Union[str, int]) -> List[str]:
        """Readings of ``char`` (a character or a code point) with tone marks."""
        if isinstance(char, int):
            char = chr(char)
        readings = []
        for reading in self._data.get(char, ()):
            text = str(reading)
            if text:
                readings.append(text)
        return readings