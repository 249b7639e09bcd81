"""Marker utilities for closure text concatenation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

MARKER_RULE = "=" * 80
MARKER_PREFIX = "MSG: "


@dataclass(frozen=True)
class ClosureBlock:
    """One dependency definition appended to a closure."""

    full_name: str
    text: str


class ClosureMarkers:
    """Writes and reads the marker lines that delimit dependency blocks."""

    RULE = MARKER_RULE
    HEADER_FMT = MARKER_PREFIX + "{full_name}"

    def header(self, full_name: str) -> str:
        return f"{self.RULE}\n{self.HEADER_FMT.format(full_name=full_name)}\n"

    def wrap(self, full_name: str, text: str) -> str:
        """Return a dependency block preceded by its marker."""
        return self.header(full_name) + ensure_newline(text)

    def split(self, closure: str) -> Tuple[str, List[ClosureBlock]]:
        """Return the own text and the dependency blocks, in marker order."""
        lines = closure.splitlines(keepends=True)
        own: List[str] = []
        blocks: List[ClosureBlock] = []
        current_name: str | None = None
        current: List[str] = []
        index = 0
        while index < len(lines):
            line = lines[index]
            following = lines[index + 1] if index + 1 < len(lines) else ""
            if line.rstrip("\r\n") == self.RULE and following.startswith(MARKER_PREFIX):
                if current_name is not None:
                    blocks.append(ClosureBlock(full_name=current_name, text="".join(current)))
                current_name = following[len(MARKER_PREFIX):].strip()
                current = []
                index += 2
                continue
            if current_name is None:
                own.append(line)
            else:
                current.append(line)
            index += 1
        if current_name is not None:
            blocks.append(ClosureBlock(full_name=current_name, text="".join(current)))
        return "".join(own), blocks


def ensure_newline(text: str) -> str:
    if text and not text.endswith("\n"):
        return text + "\n"
    return text


def split_closure(closure: str) -> Tuple[str, List[ClosureBlock]]:
    """Split closure text into the root's own text and its dependency blocks."""
    return ClosureMarkers().split(closure)


__all__ = ["ClosureBlock", "ClosureMarkers", "ensure_newline", "split_closure"]
