"""Marker classification.

A marker's kind is decided only by its stored label, so classification is a
pure function that every container variant shares.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Pattern, Tuple

from audioscripts.types import Marker, MarkerKind

_LABEL_PATTERNS: List[Tuple[Pattern[str], MarkerKind]] = [
    (re.compile(r"^orature-vm-(\d+)(?:-(\d+))?$"), MarkerKind.VERSE),
    (re.compile(r"^(\d+)(?:-(\d+))?$"), MarkerKind.VERSE),
    (re.compile(r"^orature-chunk-(\d+)$"), MarkerKind.CHUNK),
    (re.compile(r"^orature-book-([a-z0-9]+)$"), MarkerKind.OTHER),
    (re.compile(r"^orature-chapter-(\d+)$"), MarkerKind.OTHER),
]


def classify(label: str) -> MarkerKind:
    text = (label or "").strip()
    for pattern, kind in _LABEL_PATTERNS:
        if pattern.match(text):
            return kind
    return MarkerKind.UNKNOWN


def make_marker(position: int, label: str) -> Marker:
    return Marker(kind=classify(label), position=int(position), label=label)


def strip_unknown(markers: Iterable[Marker]) -> List[Marker]:
    """Drop UNKNOWN markers, keeping the rest in their original order."""
    return [m for m in markers if m.kind is not MarkerKind.UNKNOWN]
