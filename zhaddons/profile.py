"""Punctuation maps: which full width text a typed punctuation mark becomes."""

from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Tuple, Union

PROFILE_PREFIX = "punc.mb."
_SUB_CONFIG_PREFIX = "punctuationmap/"
_WHITESPACE = " \t\r\n\v\f"
_SPLIT = re.compile("[" + re.escape(_WHITESPACE) + "]+")
_EMPTY_PAIR = ("", "")


def lang_by_path(path: str) -> str:
    """Language named by a "punctuationmap/<lang>" path, or ""."""
    if path.startswith(_SUB_CONFIG_PREFIX):
        return path[len(_SUB_CONFIG_PREFIX):]
    return ""


def _is_valid_text(text: str) -> bool:
    return not any(0xD800 <= ord(c) <= 0xDFFF for c in text)


@dataclass(frozen=True)
class PunctuationMapEntry:
    """A punctuation key, its mapping and the optional closing mapping."""

    key: str
    mapping: str
    alt_mapping: str = ""


class PunctuationProfile:
    """The punctuation map of one language."""

    def __init__(self) -> None:
        self._map: Dict[str, Tuple[str, str]] = {}
        self.entries: List[PunctuationMapEntry] = []
        self.default_entries: List[PunctuationMapEntry] = []

    def _clear(self) -> None:
        self._map.clear()
        self.entries = []

    def _add_entry(self, key: str, value: str, value2: str) -> None:
        if key in self._map:
            return
        self._map[key] = (value, value2)
        self.entries.append(PunctuationMapEntry(key, value, value2))

    def load_system(self, lines: Iterable[str]) -> None:
        """Load the system map and make it the default."""
        self.load(lines)
        self.default_entries = list(self.entries)

    def load(self, lines: Iterable[str]) -> None:
        """Replace the map with "key mapping [alt]" lines.

        Malformed lines are skipped; the first entry for a key wins.
        """
        self._clear()
        for line in lines:
            line = line.strip(_WHITESPACE)
            if not line:
                continue
            tokens = [t for t in _SPLIT.split(line) if t]
            if len(tokens) not in (2, 3):
                continue
            if not any(_is_valid_text(t) for t in tokens):
                continue
            if not _is_valid_text(tokens[0]) or len(tokens[0]) != 1:
                continue
            self._add_entry(tokens[0], tokens[1], tokens[2] if len(tokens) > 2 else "")

    def reset_default_value(self) -> None:
        """Drop the map and its defaults."""
        self._clear()
        self.default_entries = []

    def set(self, entries: Iterable[PunctuationMapEntry]) -> None:
        """Replace the map with ``entries``, skipping invalid and repeated ones."""
        self._clear()
        for entry in entries:
            if not entry.key or not entry.mapping:
                continue
            if not _is_valid_text(entry.key) or len(entry.key) != 1:
                continue
            self._add_entry(entry.key, entry.mapping, entry.alt_mapping)

    def dump(self) -> str:
        """The map in the text form :meth:`load` reads."""
        lines = []
        for entry in self.entries:
            line = f"{entry.key} {entry.mapping}"
            if entry.alt_mapping:
                line += f" {entry.alt_mapping}"
            lines.append(line + "\n")
        return "".join(lines)

    def save(self, path: Union[str, Path]) -> None:
        """Write the map to ``path``, replacing the file atomically."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=target.name + ".")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as out:
                out.write(self.dump())
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def get_punctuation(self, char: Union[str, int]) -> Tuple[str, str]:
        """The (mapping, closing mapping) of ``char``, or two empty strings."""
        if isinstance(char, int):
            char = chr(char)
        return self._map.get(char, _EMPTY_PAIR)