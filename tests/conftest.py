"""Shared fixtures: WAV files with marker chunks, MP3 stubs with cue sheets."""

import os
import struct
import wave
from typing import List, Optional, Sequence, Tuple

import pytest

from audioscripts.sidecar import sidecar_path_for

SAMPLE_RATE = 44100


def pcm_bytes(frames: int, channels: int = 1, sampwidth: int = 2, seed: int = 7) -> bytes:
    size = frames * channels * sampwidth
    return bytes((seed + i * 31) % 256 for i in range(size))


def _chunk(chunk_id: bytes, payload: bytes) -> bytes:
    pad = b"\x00" if len(payload) % 2 else b""
    return chunk_id + struct.pack("<I", len(payload)) + payload + pad


def marker_chunks(markers: Sequence[Tuple[int, str]], adtl_extra: Sequence[Tuple[bytes, int, bytes]] = ()) -> bytes:
    """cue + adtl chunks; ``adtl_extra`` adds (sub-chunk id, cue id, body) entries such as notes."""
    cue = struct.pack("<I", len(markers))
    adtl = b"adtl"
    for i, (position, label) in enumerate(markers, start=1):
        cue += struct.pack("<II4sIII", i, position, b"data", 0, 0, position)
        adtl += _chunk(b"labl", struct.pack("<I", i) + label.encode("utf-8") + b"\x00")
    for sub_id, cue_id, body in adtl_extra:
        adtl += _chunk(sub_id, struct.pack("<I", cue_id) + body)
    return _chunk(b"cue ", cue) + _chunk(b"LIST", adtl)


def write_wav(
    path,
    markers: Sequence[Tuple[int, str]] = (),
    frames: int = 1000,
    channels: int = 1,
    sampwidth: int = 2,
    extra_chunks: bytes = b"",
    markers_before_data: bool = False,
    pcm: Optional[bytes] = None,
    adtl_extra: Sequence[Tuple[bytes, int, bytes]] = (),
) -> bytes:
    """Write a PCM WAV with optional marker chunks; returns the PCM bytes."""
    path = str(path)
    data = pcm if pcm is not None else pcm_bytes(frames, channels, sampwidth)
    with wave.open(path, "wb") as w:
        w.setnchannels(channels)
        w.setsampwidth(sampwidth)
        w.setframerate(SAMPLE_RATE)
        w.writeframes(data)
    with open(path, "rb") as f:
        raw = f.read()
    body = raw[12:]
    tail = (marker_chunks(markers, adtl_extra) if markers else b"") + extra_chunks
    if markers_before_data and markers:
        fmt_end = 12 + 8 + struct.unpack_from("<I", raw, 16)[0]
        body = raw[12:fmt_end] + marker_chunks(markers, adtl_extra) + raw[fmt_end:] + extra_chunks
    else:
        body = body + tail
    with open(path, "wb") as f:
        f.write(b"RIFF" + struct.pack("<I", 4 + len(body)) + b"WAVE" + body)
    return data


def write_float_wav(path, markers: Sequence[Tuple[int, str]] = (), frames: int = 500, channels: int = 1) -> bytes:
    """Write an IEEE float (format tag 3) WAV by hand; returns the sample bytes."""
    data = b"".join(struct.pack("<f", ((i % 200) - 100) / 100.0) for i in range(frames * channels))
    block_align = 4 * channels
    fmt = struct.pack("<HHIIHH", 3, channels, SAMPLE_RATE, SAMPLE_RATE * block_align, block_align, 32)
    body = _chunk(b"fmt ", fmt) + _chunk(b"fact", struct.pack("<I", frames)) + _chunk(b"data", data)
    body += marker_chunks(markers) if markers else b""
    with open(str(path), "wb") as f:
        f.write(b"RIFF" + struct.pack("<I", 4 + len(body)) + b"WAVE" + body)
    return data


def read_pcm(path) -> bytes:
    with wave.open(str(path), "rb") as w:
        return w.readframes(w.getnframes())


def cue_text(tracks: Sequence[Tuple[str, str]], file_name: str = "audio.mp3") -> str:
    """Cue sheet with (title, mm:ss:ff) tracks."""
    lines: List[str] = ['REM GENRE "Speech"', 'PERFORMER "Reader"', f'FILE "{file_name}" MP3']
    for i, (title, stamp) in enumerate(tracks, start=1):
        lines += [f"  TRACK {i:02d} AUDIO", f'    TITLE "{title}"', f"    INDEX 01 {stamp}"]
    return "\n".join(lines) + "\n"


MP3_BYTES = b"ID3\x04\x00\x00\x00\x00\x00\x00" + b"\xff\xfb\x90\x00" + b"\x00" * 413


def write_mp3_with_cue(mp3_path, tracks: Optional[Sequence[Tuple[str, str]]]) -> str:
    """Write an MP3 stub; write its correlated cue sheet unless ``tracks`` is None."""
    mp3_path = str(mp3_path)
    os.makedirs(os.path.dirname(mp3_path), exist_ok=True)
    with open(mp3_path, "wb") as f:
        f.write(MP3_BYTES)
    cue_path = sidecar_path_for(mp3_path)
    if tracks is not None:
        os.makedirs(os.path.dirname(cue_path), exist_ok=True)
        with open(cue_path, "w", encoding="utf-8", newline="") as f:
            f.write(cue_text(tracks, os.path.basename(mp3_path)))
    return cue_path


@pytest.fixture
def scenario_markers():
    return [(100, "orature-vm-1"), (200, "random marker"), (300, "orature-chunk-1")]


@pytest.fixture
def wav_file(tmp_path, scenario_markers):
    path = tmp_path / "en_ulb_gen_c01.wav"
    write_wav(path, scenario_markers)
    return path
