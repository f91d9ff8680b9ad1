"""Looking characters up by their stroke sequence."""

from __future__ import annotations

import heapq
import itertools
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

STROKES = "12345"
_STROKE_NAMES = ("一", "丨", "丿", "㇏", "𠃍")
_SEPARATOR = "|"
_SPACE = " \n\t\r\v\f"
_SPLIT = re.compile("[" + re.escape(_SPACE) + "]")

DELETION_WEIGHT = 5
INSERTION_WEIGHT = 5
SUBSTITUTION_WEIGHT = 5
TRANSPOSITION_WEIGHT = 5
_MAX_WEIGHT = 10


def pretty_string(strokes: str) -> str:
    """Render a digit stroke sequence with stroke glyphs; "" if invalid."""
    result = []
    for c in strokes:
        if c not in STROKES:
            return ""
        result.append(_STROKE_NAMES[ord(c) - ord("1")])
    return "".join(result)


@dataclass
class _Node:
    children: Dict[str, "_Node"] = field(default_factory=dict)
    terminal: bool = False

    def insert(self, key: str) -> None:
        node = self
        for c in key:
            node = node.children.setdefault(c, _Node())
        node.terminal = True

    def walk(self, path: str) -> Optional["_Node"]:
        node: Optional[_Node] = self
        for c in path:
            if node is None:
                return None
            node = node.children.get(c)
        return node

    def suffixes(self, prefix: str = "") -> Iterator[str]:
        if self.terminal:
            yield prefix
        for c in sorted(self.children):
            yield from self.children[c].suffixes(prefix + c)


class Stroke:
    """Stroke sequence dictionary with fuzzy lookup."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._root = _Node()
        self._reverse: Dict[str, str] = {}
        self._loaded = False
        self._load_result = False

    def load(self) -> bool:
        """Load the dictionary file once; return whether it is usable."""
        if self._loaded:
            return self._load_result
        self._loaded = True
        if self.path is None:
            return False
        try:
            data = self.path.read_bytes()
        except OSError:
            return False
        lines = []
        for raw in data.split(b"\n"):
            try:
                lines.append(raw.decode("utf-8"))
            except UnicodeDecodeError:
                continue
        self._add_lines(lines)
        self._load_result = True
        return True

    def load_lines(self, lines: Iterable[str]) -> None:
        """Add "strokes character" lines and mark the dictionary loaded."""
        self._add_lines(lines)
        self._loaded = True
        self._load_result = True

    def _add_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            line = line.strip(_SPACE)
            if not line or line.startswith("#"):
                continue
            tokens = _SPLIT.split(line)
            if len(tokens) != 2 or len(tokens[1]) != 1:
                continue
            strokes, hanzi = tokens
            if any(c not in STROKES for c in strokes):
                continue
            self._root.insert(strokes + _SEPARATOR + hanzi)
            self._reverse[hanzi] = strokes

    def lookup(self, strokes: str, limit: int) -> List[Tuple[str, str]]:
        """Characters whose stroke sequence is near ``strokes``.

        Returns ``(character, strokes)`` pairs, closest first, at most one
        per stroke sequence. A sequence that starts only one entry puts that
        entry first. A negative ``limit`` means no limit.
        """
        result: List[Tuple[str, str]] = []
        seen: Set[str] = set()

        def add(hanzi: str, key_strokes: str) -> None:
            if key_strokes not in seen:
                seen.add(key_strokes)
                result.append((hanzi, key_strokes))

        start = self._root.walk(strokes)
        if start is not None:
            matches = list(itertools.islice(start.suffixes(strokes), 2))
            if len(matches) == 1:
                key = matches[0]
                idx = key.rfind(_SEPARATOR)
                if idx >= 0:
                    add(key[idx + 1:], key[:idx])
        if limit >= 0 and len(result) >= limit:
            return result

        counter = itertools.count()
        queue: List[Tuple[int, int, str, str, _Node]] = []

        def push(weight: int, path: str, remain: str, node: _Node) -> None:
            if weight >= _MAX_WEIGHT:
                return
            heapq.heappush(queue, (weight, next(counter), path, remain, node))

        push(0, "", strokes, self._root)

        while queue:
            weight, _, path, remain, node = heapq.heappop(queue)
            if not remain:
                words = node.children.get(_SEPARATOR)
                if words is not None:
                    stop = False
                    for hanzi in words.suffixes():
                        add(hanzi, path)
                        if limit > 0 and len(result) >= limit:
                            stop = True
                            break
                    if stop:
                        break

            if remain:
                push(weight + DELETION_WEIGHT, path, remain[1:], node)

            for c in STROKES:
                child = node.children.get(c)
                if child is None:
                    continue
                if remain and remain[0] == c:
                    push(weight, path + c, remain[1:], child)
                else:
                    push(weight + INSERTION_WEIGHT, path + c, remain, child)
                    if remain:
                        push(weight + SUBSTITUTION_WEIGHT, path + c, remain[1:], child)
                if len(remain) >= 2 and remain[1] == c:
                    grandchild = child.children.get(remain[0])
                    if grandchild is not None:
                        push(
                            weight + TRANSPOSITION_WEIGHT,
                            path + c + remain[0],
                            remain[2:],
                            grandchild,
                        )
        return result

    def reverse_lookup(self, hanzi: str) -> str:
        """The stroke sequence of ``hanzi``, or an empty string."""
        return self._reverse.get(hanzi, "")