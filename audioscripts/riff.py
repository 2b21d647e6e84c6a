"""RIFF/WAVE chunk access for embedded markers.

Markers live in a ``cue `` chunk (cue points) and a ``LIST`` chunk of type
``adtl`` (``labl`` sub-chunks keyed by cue point id). Every other chunk,
``data`` included, is carried through a rewrite byte-for-byte.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Sequence, Tuple

from audioscripts.types import Marker

CUE_ID = b"cue "
LIST_ID = b"LIST"
ADTL_TYPE = b"adtl"
LABL_ID = b"labl"

_CUE_POINT = struct.Struct("<II4sIII")


@dataclass
class Chunk:
    chunk_id: bytes
    header_offset: int
    size: int
    list_type: Optional[bytes] = None

    @property
    def payload_offset(self) -> int:
        return self.header_offset + 8

    @property
    def end(self) -> int:
        return self.payload_offset + self.size + (self.size & 1)

    @property
    def is_marker_chunk(self) -> bool:
        return self.chunk_id == CUE_ID or (self.chunk_id == LIST_ID and self.list_type == ADTL_TYPE)


@dataclass
class WaveFormat:
    audio_format: int
    channels: int
    sample_rate: int
    block_align: int
    bits_per_sample: int


@dataclass
class RiffLayout:
    chunks: List[Chunk] = field(default_factory=list)
    file_size: int = 0

    def find(self, chunk_id: bytes) -> Optional[Chunk]:
        for chunk in self.chunks:
            if chunk.chunk_id == chunk_id:
                return chunk
        return None

    @property
    def end(self) -> int:
        if not self.chunks:
            return 12
        return min(self.chunks[-1].end, self.file_size)


def read_layout(fh: BinaryIO) -> RiffLayout:
    """Walk the top-level chunks. Raises ValueError for non RIFF/WAVE input."""
    fh.seek(0, 2)
    file_size = fh.tell()
    fh.seek(0)
    header = fh.read(12)
    if len(header) < 12 or header[:4] != b"RIFF" or header[8:12] != b"WAVE":
        raise ValueError("not a RIFF/WAVE file")

    layout = RiffLayout(file_size=file_size)
    offset = 12
    while offset + 8 <= file_size:
        fh.seek(offset)
        chunk_id, size = struct.unpack("<4sI", fh.read(8))
        # A truncated final chunk keeps what is actually on disk
        size = min(size, file_size - offset - 8)
        list_type = None
        if chunk_id == LIST_ID and size >= 4:
            list_type = fh.read(4)
        chunk = Chunk(chunk_id, offset, size, list_type)
        layout.chunks.append(chunk)
        offset = chunk.end
    return layout


def read_format(fh: BinaryIO, layout: RiffLayout) -> WaveFormat:
    chunk = layout.find(b"fmt ")
    if chunk is None or chunk.size < 16:
        raise ValueError("missing fmt chunk")
    fh.seek(chunk.payload_offset)
    audio_format, channels, sample_rate, _byte_rate, block_align, bits = struct.unpack("<HHIIHH", fh.read(16))
    return WaveFormat(audio_format, channels, sample_rate, block_align, bits)


def read_payload(fh: BinaryIO, chunk: Chunk) -> bytes:
    fh.seek(chunk.payload_offset)
    return fh.read(chunk.size)


def parse_cue_points(payload: bytes) -> List[Tuple[int, int]]:
    """Return (cue id, sample offset) pairs in stored order."""
    if len(payload) < 4:
        return []
    (count,) = struct.unpack_from("<I", payload, 0)
    points: List[Tuple[int, int]] = []
    for i in range(count):
        start = 4 + i * _CUE_POINT.size
        if start + _CUE_POINT.size > len(payload):
            break
        cue_id, _position, _fcc, _chunk_start, _block_start, sample_offset = _CUE_POINT.unpack_from(payload, start)
        points.append((cue_id, sample_offset))
    return points


def parse_adtl_entries(payload: bytes) -> List[Tuple[bytes, int, bytes]]:
    """Split an ``adtl`` LIST payload (type tag included) into sub-chunks.

    Every ``adtl`` sub-chunk (``labl``, ``note``, ``ltxt``) starts with the
    cue point id it belongs to; entries are (sub-chunk id, cue id, rest).
    """
    entries: List[Tuple[bytes, int, bytes]] = []
    offset = 4
    while offset + 8 <= len(payload):
        sub_id, size = struct.unpack_from("<4sI", payload, offset)
        body = payload[offset + 8: offset + 8 + size]
        if len(body) >= 4:
            (cue_id,) = struct.unpack_from("<I", body, 0)
            entries.append((sub_id, cue_id, body[4:]))
        offset += 8 + size + (size & 1)
    return entries


def _read_cues(fh: BinaryIO, layout: RiffLayout) -> Tuple[List[Tuple[int, int]], List[Tuple[bytes, int, bytes]]]:
    points: List[Tuple[int, int]] = []
    entries: List[Tuple[bytes, int, bytes]] = []
    for chunk in layout.chunks:
        if chunk.chunk_id == CUE_ID:
            points.extend(parse_cue_points(read_payload(fh, chunk)))
        elif chunk.chunk_id == LIST_ID and chunk.list_type == ADTL_TYPE:
            entries.extend(parse_adtl_entries(read_payload(fh, chunk)))
    return points, entries


def _labels(entries: Sequence[Tuple[bytes, int, bytes]]) -> Dict[int, str]:
    labels: Dict[int, str] = {}
    for sub_id, cue_id, rest in entries:
        if sub_id == LABL_ID:
            labels[cue_id] = rest.split(b"\x00", 1)[0].decode("utf-8", errors="replace")
    return labels


def read_markers(fh: BinaryIO, layout: RiffLayout) -> List[Tuple[int, str]]:
    """Return (sample offset, label) pairs in cue chunk order."""
    points, entries = _read_cues(fh, layout)
    labels = _labels(entries)
    return [(offset, labels.get(cue_id, "")) for cue_id, offset in points]


def carried_entries(fh: BinaryIO, layout: RiffLayout, markers: Sequence[Marker]) -> List[Tuple[bytes, int, bytes]]:
    """Non-``labl`` adtl entries of the cues that survive as ``markers``.

    Stored cues are matched to ``markers`` in order by position and label;
    each carried entry is renumbered to its marker's new cue id.
    """
    points, entries = _read_cues(fh, layout)
    labels = _labels(entries)
    new_ids: Dict[int, int] = {}
    i = 0
    for cue_id, offset in points:
        if i < len(markers) and markers[i].position == offset and markers[i].label == labels.get(cue_id, ""):
            new_ids[cue_id] = i + 1
            i += 1
    return [(sub_id, new_ids[cue_id], rest) for sub_id, cue_id, rest in entries
            if sub_id != LABL_ID and cue_id in new_ids]


def _chunk(chunk_id: bytes, payload: bytes) -> bytes:
    pad = b"\x00" if len(payload) & 1 else b""
    return chunk_id + struct.pack("<I", len(payload)) + payload + pad


def build_cue_chunk(markers: Sequence[Marker]) -> bytes:
    parts = [struct.pack("<I", len(markers))]
    for cue_id, marker in enumerate(markers, start=1):
        parts.append(_CUE_POINT.pack(cue_id, marker.position, b"data", 0, 0, marker.position))
    return _chunk(CUE_ID, b"".join(parts))


def build_adtl_chunk(markers: Sequence[Marker], extra: Sequence[Tuple[bytes, int, bytes]] = ()) -> bytes:
    parts = [ADTL_TYPE]
    for cue_id, marker in enumerate(markers, start=1):
        text = marker.label.encode("utf-8") + b"\x00"
        parts.append(_chunk(LABL_ID, struct.pack("<I", cue_id) + text))
    for sub_id, cue_id, rest in extra:
        parts.append(_chunk(sub_id, struct.pack("<I", cue_id) + rest))
    return _chunk(LIST_ID, b"".join(parts))


def write_markers(fh: BinaryIO, layout: RiffLayout, markers: Sequence[Marker]) -> None:
    """Replace the marker chunks through ``fh`` (opened ``r+b``).

    Chunks before the first marker chunk are left where they are; the tail is
    rebuilt with every non-marker chunk copied verbatim. ``note``/``ltxt``
    entries follow their cue. With no markers left both marker chunks are
    dropped.
    """
    marker_bytes = b""
    if markers:
        extra = carried_entries(fh, layout, markers)
        marker_bytes = build_cue_chunk(markers) + build_adtl_chunk(markers, extra)

    first = next((i for i, c in enumerate(layout.chunks) if c.is_marker_chunk), len(layout.chunks))
    start = layout.chunks[first].header_offset if first < len(layout.chunks) else layout.end

    tail: List[bytes] = [b"\x00"] if start & 1 else []
    tail.append(marker_bytes)
    for chunk in layout.chunks[first:]:
        if chunk.is_marker_chunk:
            continue
        fh.seek(chunk.header_offset)
        tail.append(fh.read(chunk.end - chunk.header_offset))

    fh.seek(start)
    for part in tail:
        fh.write(part)
    fh.truncate()
    riff_size = fh.tell() - 8
    fh.seek(4)
    fh.write(struct.pack("<I", riff_size))
    fh.flush()
