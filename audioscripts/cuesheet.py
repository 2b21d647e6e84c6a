"""Cue-sheet sidecars for compressed audio.

Only the track blocks are rewritten; header lines (``REM``, ``PERFORMER``,
``FILE`` ...) and the text of every kept track are written back unchanged.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from audioscripts.config import CUE_FRAMES_PER_SECOND, DEFAULT_SAMPLE_RATE
from audioscripts.errors import CueSheetError
from audioscripts.markers import make_marker
from audioscripts.types import Marker

ENCODINGS = ["utf-8", "cp1252", "iso-8859-1"]

_TRACK_RE = re.compile(r"^(\s*)TRACK\s+(\d+)\s+(\S+)\s*$", re.IGNORECASE)
_TITLE_RE = re.compile(r'^\s*TITLE\s+"?([^"]*)"?\s*$', re.IGNORECASE)
_INDEX_RE = re.compile(r"^\s*INDEX\s+01\s+(\d+):(\d+):(\d+)\s*$", re.IGNORECASE)


@dataclass
class CueTrack:
    number: int
    title: str = ""
    index_frames: Optional[int] = None
    lines: List[str] = field(default_factory=list)

    def position(self, sample_rate: int = DEFAULT_SAMPLE_RATE) -> Optional[int]:
        if self.index_frames is None:
            return None
        return self.index_frames * sample_rate // CUE_FRAMES_PER_SECOND

    def marker(self, sample_rate: int = DEFAULT_SAMPLE_RATE) -> Optional[Marker]:
        position = self.position(sample_rate)
        if position is None:
            return None
        return make_marker(position, self.title)


@dataclass
class CueSheet:
    header: List[str] = field(default_factory=list)
    tracks: List[CueTrack] = field(default_factory=list)
    newline: str = "\n"
    trailing_newline: bool = True
    encoding: str = "utf-8"

    def markers(self, sample_rate: int = DEFAULT_SAMPLE_RATE) -> List[Marker]:
        result: List[Marker] = []
        for track in self.tracks:
            marker = track.marker(sample_rate)
            if marker is not None:
                result.append(marker)
        return result


def frames_to_timestamp(frames: int) -> str:
    seconds, ff = divmod(frames, CUE_FRAMES_PER_SECOND)
    mm, ss = divmod(seconds, 60)
    return f"{mm:02d}:{ss:02d}:{ff:02d}"


def position_to_frames(position: int, sample_rate: int = DEFAULT_SAMPLE_RATE) -> int:
    return int(round(position * CUE_FRAMES_PER_SECOND / sample_rate))


def parse_cue_sheet(text: str) -> CueSheet:
    newline = "\r\n" if "\r\n" in text else "\n"
    sheet = CueSheet(newline=newline, trailing_newline=text.endswith("\n"))
    current: Optional[CueTrack] = None
    for line in text.splitlines():
        m = _TRACK_RE.match(line)
        if m:
            current = CueTrack(number=int(m.group(2)), lines=[line])
            sheet.tracks.append(current)
            continue
        if current is None:
            sheet.header.append(line)
            continue
        current.lines.append(line)
        title = _TITLE_RE.match(line)
        if title:
            current.title = title.group(1)
            continue
        index = _INDEX_RE.match(line)
        if index:
            mm, ss, ff = (int(g) for g in index.groups())
            current.index_frames = (mm * 60 + ss) * CUE_FRAMES_PER_SECOND + ff
    if not sheet.tracks and not any(line.strip() for line in sheet.header):
        raise CueSheetError("cue sheet is empty")
    return sheet


def read_cue_sheet(path: str) -> CueSheet:
    """Read and parse a cue sheet, trying a few common encodings."""
    for encoding in ENCODINGS:
        try:
            with open(path, "r", encoding=encoding, newline="") as f:
                text = f.read()
        except UnicodeDecodeError:
            continue
        sheet = parse_cue_sheet(text)
        sheet.encoding = encoding
        return sheet
    raise CueSheetError(f"Could not decode {path} with any of: {ENCODINGS}")


def _new_track(number: int, marker: Marker, sample_rate: int) -> CueTrack:
    frames = position_to_frames(marker.position, sample_rate)
    return CueTrack(
        number=number,
        title=marker.label,
        index_frames=frames,
        lines=[
            f"  TRACK {number:02d} AUDIO",
            f'    TITLE "{marker.label}"',
            f"    INDEX 01 {frames_to_timestamp(frames)}",
        ],
    )


def _renumbered(track: CueTrack, number: int) -> CueTrack:
    if track.number == number:
        return track
    lines = list(track.lines)
    m = _TRACK_RE.match(lines[0])
    if m:
        lines[0] = f"{m.group(1)}TRACK {number:02d} {m.group(3)}"
    return CueTrack(number=number, title=track.title, index_frames=track.index_frames, lines=lines)


def with_markers(sheet: CueSheet, markers: Sequence[Marker], sample_rate: int = DEFAULT_SAMPLE_RATE) -> CueSheet:
    """Return a sheet holding exactly ``markers``.

    Existing tracks are matched to markers in order; tracks without an
    ``INDEX 01`` carry no marker and are always kept.
    """
    remaining = list(markers)
    kept: List[CueTrack] = []
    for track in sheet.tracks:
        marker = track.marker(sample_rate)
        if marker is None:
            kept.append(track)
        elif remaining and remaining[0] == marker:
            kept.append(track)
            remaining.pop(0)
    tracks = [_renumbered(t, i) for i, t in enumerate(kept, start=1)]
    for marker in remaining:
        tracks.append(_new_track(len(tracks) + 1, marker, sample_rate))
    return CueSheet(
        header=list(sheet.header),
        tracks=tracks,
        newline=sheet.newline,
        trailing_newline=sheet.trailing_newline,
        encoding=sheet.encoding,
    )


def render_cue_sheet(sheet: CueSheet) -> str:
    lines = list(sheet.header)
    for track in sheet.tracks:
        lines.extend(track.lines)
    text = sheet.newline.join(lines)
    if sheet.trailing_newline:
        text += sheet.newline
    return text


def write_cue_sheet(sheet: CueSheet, path: str) -> None:
    with open(path, "w", encoding=sheet.encoding, newline="") as f:
        f.write(render_cue_sheet(sheet))
