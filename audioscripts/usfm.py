"""Minimal USFM reading: chapter and verse markers only."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

_MARKER_RE = re.compile(r"\\(c|v)\s+(\d+)(?:\s*-\s*(\d+))?")


@dataclass
class VerseRange:
    start: int
    end: int

    @property
    def is_bridge(self) -> bool:
        return self.start != self.end

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass
class Chapter:
    number: int
    verses: List[VerseRange] = field(default_factory=list)

    def bridges(self) -> List[VerseRange]:
        return [v for v in self.verses if v.is_bridge]


def parse_chapters(text: str) -> List[Chapter]:
    """Collect ``\\c`` chapters with the ``\\v`` verse ranges they contain.

    Verses before the first chapter marker are ignored.
    """
    chapters: List[Chapter] = []
    current: Optional[Chapter] = None
    for m in _MARKER_RE.finditer(text):
        tag, start, end = m.group(1), int(m.group(2)), m.group(3)
        if tag == "c":
            current = Chapter(start)
            chapters.append(current)
        elif current is not None:
            current.verses.append(VerseRange(start, int(end) if end else start))
    return chapters
