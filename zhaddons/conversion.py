"""Character-table conversion between Simplified and Traditional Chinese."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union


def convert_chars(mapping: Mapping[str, str], text: str) -> str:
    """Replace every character found in ``mapping``; keep the others."""
    return "".join(mapping.get(char, char) for char in text)


def _is_valid_char(char: str) -> bool:
    code = ord(char)
    return not (0xD800 <= code <= 0xDFFF) and code <= 0x10FFFF


class ChttransBackend(ABC):
    """A conversion engine that loads its data once, on first use."""

    def __init__(self) -> None:
        self._load_attempted = False
        self._load_result = False
        self.config: Any = None

    def load(self, config: Any) -> bool:
        """Load the backend data once; return whether it is usable."""
        if not self._load_attempted:
            self.config = config
            self._load_result = self._load_once(config)
            self._load_attempted = True
        return self._load_result

    @property
    def loaded(self) -> bool:
        """True once loading has happened and succeeded."""
        return self._load_attempted and self._load_result

    def update_config(self, config: Any) -> None:
        """Remember the new configuration for later conversions."""
        self.config = config

    def _mark_loaded(self, result: bool) -> None:
        self._load_attempted = True
        self._load_result = result

    @abstractmethod
    def _load_once(self, config: Any) -> bool:
        """Load the backend data."""

    @abstractmethod
    def convert_simp_to_trad(self, text: str) -> str:
        """Convert Simplified Chinese text to Traditional."""

    @abstractmethod
    def convert_trad_to_simp(self, text: str) -> str:
        """Convert Traditional Chinese text to Simplified."""


class NativeBackend(ChttransBackend):
    """Backend driven by a table whose lines start with a simplified and a
    traditional character."""

    def __init__(self, table_path: Optional[Union[str, Path]] = None) -> None:
        super().__init__()
        self.table_path = Path(table_path) if table_path is not None else None
        self._s2t: Dict[str, str] = {}
        self._t2s: Dict[str, str] = {}

    def _load_once(self, config: Any) -> bool:
        if self.table_path is None:
            return False
        try:
            with open(
                self.table_path, encoding="utf-8", errors="surrogateescape",
                newline="",
            ) as table:
                self._add_lines(table)
        except OSError:
            return False
        return True

    def _add_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            line = line.rstrip("\n")
            if len(line) < 2:
                continue
            simp, trad = line[0], line[1]
            if not (_is_valid_char(simp) and _is_valid_char(trad)):
                continue
            self._s2t.setdefault(simp, trad)
            self._t2s.setdefault(trad, simp)

    def load_table(self, lines: Iterable[str]) -> None:
        """Fill the tables from ``lines`` and mark the backend loaded."""
        self._add_lines(lines)
        self._mark_loaded(True)

    def convert_simp_to_trad(self, text: str) -> str:
        return convert_chars(self._s2t, text)

    def convert_trad_to_simp(self, text: str) -> str:
        return convert_chars(self._t2s, text)