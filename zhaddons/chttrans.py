"""Switching committed and preedit text between Simplified and Traditional."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from .conversion import ChttransBackend, NativeBackend


class ChttransEngine(Enum):
    """Conversion engines that can be configured."""

    NATIVE = "Native"
    OPENCC = "OpenCC"


class ChttransIMType(Enum):
    """Script an input method produces or is converted to."""

    SIMP = "Simp"
    TRAD = "Trad"
    OTHER = "Other"


@dataclass
class ChttransConfig:
    """Settings of the conversion addon."""

    engine: ChttransEngine = ChttransEngine.NATIVE
    hotkey: Tuple[str, ...] = ("Control+Shift+F",)
    enabled_im: List[str] = field(default_factory=list)
    opencc_s2t_profile: str = ""
    opencc_t2s_profile: str = ""


@dataclass(frozen=True)
class InputMethodEntry:
    """The parts of an input method that decide how text is converted."""

    unique_name: str
    language_code: str = ""


def input_method_type(entry: InputMethodEntry) -> ChttransIMType:
    """Return the script an input method natively produces."""
    if entry.language_code == "zh_CN":
        return ChttransIMType.SIMP
    if entry.language_code in ("zh_HK", "zh_TW"):
        return ChttransIMType.TRAD
    return ChttransIMType.OTHER


Segment = Tuple[str, Any]


class Chttrans:
    """Keeps the set of input methods whose output is converted."""

    def __init__(
        self,
        config: Optional[ChttransConfig] = None,
        backends: Optional[Dict[ChttransEngine, ChttransBackend]] = None,
    ) -> None:
        self.config = config if config is not None else ChttransConfig()
        self.backends: Dict[ChttransEngine, ChttransBackend] = (
            dict(backends)
            if backends is not None
            else {ChttransEngine.NATIVE: NativeBackend()}
        )
        self.enabled_im: Set[str] = set()
        self.populate_config()

    def set_config(self, config: ChttransConfig) -> None:
        """Replace the configuration and apply it."""
        self.config = config
        self.populate_config()

    def populate_config(self) -> None:
        """Rebuild state from the configuration and notify loaded backends."""
        self.enabled_im = set(self.config.enabled_im)
        for backend in self.backends.values():
            if backend.loaded:
                backend.update_config(self.config)

    def _sync_to_config(self) -> None:
        self.config.enabled_im = sorted(self.enabled_im)

    def toggle(self, entry: Optional[InputMethodEntry]) -> None:
        """Switch conversion on or off for a Chinese input method."""
        if entry is None or input_method_type(entry) is ChttransIMType.OTHER:
            return
        if entry.unique_name in self.enabled_im:
            self.enabled_im.discard(entry.unique_name)
        else:
            self.enabled_im.add(entry.unique_name)
        self._sync_to_config()

    def need_convert(self, entry: Optional[InputMethodEntry]) -> bool:
        """Whether the output of ``entry`` is to be converted."""
        if entry is None or input_method_type(entry) is ChttransIMType.OTHER:
            return False
        return entry.unique_name in self.enabled_im

    def convert_type(self, entry: Optional[InputMethodEntry]) -> ChttransIMType:
        """The script the output of ``entry`` ends up in."""
        if entry is None:
            return ChttransIMType.OTHER
        im_type = input_method_type(entry)
        if im_type is ChttransIMType.OTHER:
            return ChttransIMType.OTHER
        if entry.unique_name not in self.enabled_im:
            return im_type
        if im_type is ChttransIMType.SIMP:
            return ChttransIMType.TRAD
        return ChttransIMType.SIMP

    def convert(self, im_type: ChttransIMType, text: str) -> str:
        """Convert ``text`` towards ``im_type`` with the configured engine."""
        backend = self.backends.get(self.config.engine)
        if backend is None:
            backend = self.backends.get(ChttransEngine.NATIVE)
        if backend is None or not backend.load(self.config):
            return text
        if im_type is ChttransIMType.TRAD:
            return backend.convert_simp_to_trad(text)
        return backend.convert_trad_to_simp(text)

    def filter_output(
        self,
        entry: Optional[InputMethodEntry],
        segments: Sequence[Segment],
        cursor: int,
    ) -> Tuple[List[Segment], int]:
        """Convert formatted text, keeping segment formats and the cursor.

        ``segments`` is a sequence of ``(text, format)`` pairs and ``cursor``
        a character offset, negative when there is none.
        """
        if not self.need_convert(entry):
            return list(segments), cursor
        old = "".join(text for text, _ in segments)
        new = self.convert(self.convert_type(entry), old)
        result: List[Segment] = []
        offset = 0
        remain = len(new)
        for text, fmt in segments:
            length = min(len(text), remain)
            remain -= length
            result.append((new[offset:offset + length], fmt))
            offset += length
        if cursor >= 0:
            cursor = min(len(old[:cursor]), len(new))
        return result, cursor

    def filter_commit(self, entry: Optional[InputMethodEntry], text: str) -> str:
        """Convert a committed string if conversion is on for ``entry``."""
        if not self.need_convert(entry):
            return text
        return self.convert(self.convert_type(entry), text)

    def status_text(self, entry: Optional[InputMethodEntry]) -> str:
        """Label describing the current output script."""
        if self.convert_type(entry) is ChttransIMType.TRAD:
            return "Traditional Chinese"
        return "Simplified Chinese"

    def status_icon(self, entry: Optional[InputMethodEntry]) -> str:
        """Icon name for the current output script."""
        if self.convert_type(entry) is ChttransIMType.TRAD:
            return "fcitx-chttrans-active"
        return "fcitx-chttrans-inactive"