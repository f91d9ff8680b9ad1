"""Turning ASCII input into full width characters."""

from __future__ import annotations

from typing import Optional

_CORNER_TRANS = (
    "　", "！", "＂", "＃", "￥", "％", "＆", "＇", "（", "）", "＊", "＋",
    "，", "－", "．", "／", "０", "１", "２", "３", "４", "５", "６", "７",
    "８", "９", "：", "；", "＜", "＝", "＞", "？", "＠", "Ａ", "Ｂ", "Ｃ",
    "Ｄ", "Ｅ", "Ｆ", "Ｇ", "Ｈ", "Ｉ", "Ｊ", "Ｋ", "Ｌ", "Ｍ", "Ｎ", "Ｏ",
    "Ｐ", "Ｑ", "Ｒ", "Ｓ", "Ｔ", "Ｕ", "Ｖ", "Ｗ", "Ｘ", "Ｙ", "Ｚ", "［",
    "＼", "］", "＾", "＿", "｀", "ａ", "ｂ", "ｃ", "ｄ", "ｅ", "ｆ", "ｇ",
    "ｈ", "ｉ", "ｊ", "ｋ", "ｌ", "ｍ", "ｎ", "ｏ", "ｐ", "ｑ", "ｒ", "ｓ",
    "ｔ", "ｕ", "ｖ", "ｗ", "ｘ", "ｙ", "ｚ", "｛", "｜", "｝", "～",
)


def fullwidth_for_key(sym: int) -> Optional[str]:
    """Full width text for a key symbol, space included, or ``None``."""
    if 32 <= sym < 32 + len(_CORNER_TRANS):
        return _CORNER_TRANS[sym - 32]
    return None


def to_fullwidth(text: str) -> str:
    """Replace printable ASCII other than space with full width forms."""
    return "".join(
        _CORNER_TRANS[ord(c) - 32] if 32 < ord(c) < 32 + len(_CORNER_TRANS) else c
        for c in text
    )


class Fullwidth:
    """On/off state of full width typing."""

    def __init__(self) -> None:
        self.enabled = False

    def set_enabled(self, enabled: bool) -> bool:
        """Set the state; return whether it changed."""
        if enabled == self.enabled:
            return False
        self.enabled = enabled
        return True

    def toggle(self) -> bool:
        """Flip the state and return the new one."""
        self.set_enabled(not self.enabled)
        return self.enabled

    def filter_key(self, sym: int, states: int, is_release: bool) -> Optional[str]:
        """Text to commit for a key press, or ``None`` to let it through."""
        if not self.enabled or states or is_release:
            return None
        return fullwidth_for_key(sym)

    def filter_commit(self, text: str) -> str:
        """Convert a committed string when enabled."""
        if not self.enabled:
            return text
        return to_fullwidth(text)

    def status_text(self) -> str:
        """Label for the current state."""
        return "Full width Character" if self.enabled else "Half width Character"

    def status_icon(self) -> str:
        """Icon name for the current state."""
        return "fcitx-fullwidth-active" if self.enabled else "fcitx-fullwidth-inactive"