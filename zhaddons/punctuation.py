"""Turning typed punctuation into full width punctuation by language."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from .profile import (
    PROFILE_PREFIX,
    PunctuationMapEntry,
    PunctuationProfile,
    lang_by_path,
)

_log = logging.getLogger(__name__)

_EMPTY_PAIR = ("", "")
# Marks kept half width right after a Latin letter or a digit.
_HALF_WIDTH_AFTER_LATIN = frozenset(".,")


def _as_char(char: Union[str, int]) -> str:
    return chr(char) if isinstance(char, int) else char


def _is_ascii_alnum(char: str) -> bool:
    return len(char) == 1 and char.isascii() and char.isalnum()


def _is_valid_text(text: str) -> bool:
    return not any(0xD800 <= ord(c) <= 0xDFFF for c in text)


@dataclass
class PunctuationConfig:
    """Settings of the punctuation addon."""

    hotkey: Tuple[str, ...] = ("Control+period",)
    half_width_punc_after_latin_or_number: bool = True
    type_paired_punctuation_together: bool = False
    enabled: bool = True


@dataclass
class PunctuationState:
    """Per input context memory of what was typed last."""

    last_punc_stack: Dict[str, str] = field(default_factory=dict)
    last_is_eng_or_digit: str = ""
    not_converted: str = ""
    may_rebuild_from_surrounding_text: bool = False
    last_punc_stack_backup: Dict[str, str] = field(default_factory=dict)
    not_converted_backup: str = ""


class Punctuation:
    """Maps punctuation keys to the full width text of the current language."""

    def __init__(
        self,
        config: Optional[PunctuationConfig] = None,
        profiles: Optional[Dict[str, PunctuationProfile]] = None,
    ) -> None:
        self.config = config if config is not None else PunctuationConfig()
        self.profiles: Dict[str, PunctuationProfile] = (
            dict(profiles) if profiles is not None else {}
        )
        self.user_dir: Optional[Path] = None

    @property
    def enabled(self) -> bool:
        """Whether full width punctuation is on."""
        return self.config.enabled

    def set_enabled(self, enabled: bool) -> bool:
        """Switch full width punctuation; return whether the state changed."""
        if enabled == self.config.enabled:
            return False
        self.config.enabled = enabled
        return True

    @staticmethod
    def _profile_names(directory: Optional[Path]) -> Set[str]:
        if directory is None or not directory.is_dir():
            return set()
        return {
            p.name
            for p in directory.iterdir()
            if p.name.startswith(PROFILE_PREFIX) and p.is_file()
        }

    @staticmethod
    def _read_lines(path: Path) -> List[str]:
        with open(path, encoding="utf-8", errors="surrogateescape") as f:
            return f.read().splitlines()

    def load_profiles(
        self,
        system_dir: Optional[Union[str, Path]],
        user_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        """Load every "punc.mb.<lang>" profile; user files override system ones."""
        system = Path(system_dir) if system_dir is not None else None
        user = Path(user_dir) if user_dir is not None else None
        self.user_dir = user
        system_names = self._profile_names(system)
        user_names = self._profile_names(user)
        all_names = system_names | user_names

        for lang in list(self.profiles):
            if PROFILE_PREFIX + lang not in all_names:
                del self.profiles[lang]

        for name in sorted(all_names):
            if len(name) <= len(PROFILE_PREFIX):
                continue
            lang = name[len(PROFILE_PREFIX):]
            profile = self.profiles.setdefault(lang, PunctuationProfile())
            try:
                if name in system_names:
                    profile.load_system(self._read_lines(system / name))
                else:
                    profile.reset_default_value()
                if name in user_names:
                    profile.load(self._read_lines(user / name))
            except (OSError, ValueError) as exc:
                _log.warning("Error when load profile %s: %s", name, exc)

    def get_punctuation(
        self, language: str, char: Union[str, int]
    ) -> Tuple[str, str]:
        """The (mapping, closing mapping) of ``char`` in ``language``."""
        if not self.config.enabled:
            return _EMPTY_PAIR
        profile = self.profiles.get(language)
        if profile is None:
            return _EMPTY_PAIR
        return profile.get_punctuation(_as_char(char))

    def _keep_half_width(self, state: PunctuationState, char: str) -> bool:
        if (
            state.last_is_eng_or_digit
            and self.config.half_width_punc_after_latin_or_number
            and char in _HALF_WIDTH_AFTER_LATIN
        ):
            state.not_converted = char
            return True
        return False

    def push_punctuation(
        self, language: str, state: PunctuationState, char: Union[str, int]
    ) -> str:
        """Text for a typed mark; paired marks alternate opening and closing.

        An empty string means the key is left unconverted.
        """
        if not self.enabled:
            return ""
        char = _as_char(char)
        if self._keep_half_width(state, char):
            return ""
        if language not in self.profiles:
            return ""
        first, second = self.get_punctuation(language, char)
        state.not_converted = ""
        if not second:
            return first
        if char in state.last_punc_stack:
            del state.last_punc_stack[char]
            return second
        state.last_punc_stack[char] = first
        return first

    def push_punctuation_v2(
        self, language: str, state: PunctuationState, char: Union[str, int]
    ) -> Tuple[str, str]:
        """Like :meth:`push_punctuation`, with text to put after the cursor.

        With paired typing on, both halves of a pair come back at once.
        """
        if not self.enabled:
            return _EMPTY_PAIR
        char = _as_char(char)
        if self._keep_half_width(state, char):
            return _EMPTY_PAIR
        if language not in self.profiles:
            return _EMPTY_PAIR
        first, second = self.get_punctuation(language, char)
        state.not_converted = ""
        if not second:
            return (first, "")
        if self.config.type_paired_punctuation_together:
            return (first, second)
        if char in state.last_punc_stack:
            del state.last_punc_stack[char]
            return (second, "")
        state.last_punc_stack[char] = first
        return (first, "")

    def cancel_last(self, language: str, state: PunctuationState) -> str:
        """Full width text for a mark that was left half width, or ""."""
        if not self.enabled:
            return ""
        if state.not_converted in _HALF_WIDTH_AFTER_LATIN and state.not_converted:
            first, _ = self.get_punctuation(language, state.not_converted)
            state.not_converted = ""
            return first
        return ""

    def on_commit(self, state: PunctuationState, text: str) -> None:
        """Remember whether committed text ended in a Latin letter or digit."""
        if text and _is_ascii_alnum(text[-1]):
            state.last_is_eng_or_digit = text[-1]
        else:
            state.last_is_eng_or_digit = ""

    def on_key(
        self,
        state: PunctuationState,
        char: Optional[Union[str, int]],
        accepted: bool,
        is_release: bool,
    ) -> None:
        """Track a key that reached the application unhandled."""
        if is_release or accepted:
            return
        char = _as_char(char) if char is not None else ""
        state.last_is_eng_or_digit = char if _is_ascii_alnum(char) else ""

    def on_focus_in(self, state: PunctuationState, has_surrounding: bool) -> None:
        """Allow state to be rebuilt from the next surrounding text."""
        if has_surrounding:
            state.may_rebuild_from_surrounding_text = True

    def on_reset(self, state: PunctuationState, has_surrounding: bool) -> None:
        """Forget the typing state, keeping a backup to restore from."""
        state.last_is_eng_or_digit = ""
        state.not_converted_backup = state.not_converted
        state.not_converted = ""
        state.last_punc_stack_backup = dict(state.last_punc_stack)
        state.last_punc_stack.clear()
        if has_surrounding:
            state.may_rebuild_from_surrounding_text = True

    def on_surrounding_text(
        self,
        state: PunctuationState,
        text: str,
        cursor: int,
        has_surrounding: bool,
    ) -> None:
        """Restore state from the text before the cursor after a reset."""
        if state.may_rebuild_from_surrounding_text:
            state.may_rebuild_from_surrounding_text = False
        else:
            state.not_converted_backup = ""
            state.last_punc_stack_backup.clear()
            return
        if not has_surrounding or not _is_valid_text(text):
            return
        if cursor <= 0 or cursor > len(text):
            return
        last = text[cursor - 1]
        if _is_ascii_alnum(last):
            state.last_is_eng_or_digit = last
        if last == state.not_converted_backup and not state.not_converted:
            state.not_converted = state.not_converted_backup
        state.not_converted_backup = ""
        if state.last_punc_stack_backup and not state.last_punc_stack:
            for ch in text[:cursor]:
                for key, value in state.last_punc_stack_backup.items():
                    if value == ch:
                        state.last_punc_stack.setdefault(key, value)
                        break
        state.last_punc_stack_backup.clear()

    def get_sub_config(self, path: str) -> Optional[List[PunctuationMapEntry]]:
        """Entries of the profile named by "punctuationmap/<lang>", or None."""
        lang = lang_by_path(path)
        if not lang:
            return None
        profile = self.profiles.get(lang)
        if profile is None:
            return None
        return list(profile.entries)

    def set_sub_config(
        self, path: str, entries: Iterable[PunctuationMapEntry]
    ) -> None:
        """Replace a profile's entries and save it to the user directory."""
        lang = lang_by_path(path)
        profile = self.profiles.get(lang)
        if profile is None:
            return
        profile.set(entries)
        if self.user_dir is not None:
            profile.save(self.user_dir / (PROFILE_PREFIX + lang))

    def status_text(self) -> str:
        """Label for the current state."""
        return "Full width punctuation" if self.enabled else "Half width punctuation"

    def status_icon(self) -> str:
        """Icon name for the current state."""
        return "fcitx-punc-active" if self.enabled else "fcitx-punc-inactive"