"""Audio container accessor.

Two variants share one interface: ``WavContainer`` keeps markers next to the
PCM samples it can hand out, ``Mp3Container`` keeps them in a cue-sheet
sidecar and cannot expose samples. Callers branch on the capability flags
(``can_read_samples``, ``can_fingerprint``, ``uses_sidecar``), never on the
file extension.
"""
from __future__ import annotations

import os
import struct
from abc import ABC, abstractmethod
from typing import BinaryIO, List, Optional, Type

from audioscripts import riff
from audioscripts.config import DEFAULT_SAMPLE_RATE, FRAME_SIZE_FALLBACK
from audioscripts.cuesheet import CueSheet, read_cue_sheet, with_markers, write_cue_sheet
from audioscripts.errors import (
    ContainerOpenError,
    ContainerReadOnlyError,
    CueSheetError,
    UnsupportedOperation,
)
from audioscripts.logging_utils import get_logger
from audioscripts.markers import make_marker
from audioscripts.types import Marker, MarkerKind

log = get_logger(__name__)


class AudioContainer(ABC):
    """Base accessor; owns one file handle from construction until ``close``."""

    extension = ""
    can_read_samples = False
    uses_sidecar = False

    def __init__(self, path: str, mode: str = "r") -> None:
        if mode not in ("r", "w"):
            raise ValueError(f"mode must be 'r' or 'w', got {mode!r}")
        self.path = path
        self.mode = mode
        self.total_frames = 0
        self.frame_size = FRAME_SIZE_FALLBACK
        self.sample_rate = DEFAULT_SAMPLE_RATE
        self._markers: List[Marker] = []
        self._fh: Optional[BinaryIO] = None
        try:
            self._fh = open(path, "rb" if mode == "r" else "r+b")
        except OSError as e:
            raise ContainerOpenError(f"cannot open {path}: {e}") from e
        try:
            self._load()
        except ContainerOpenError:
            self.close()
            raise
        except (ValueError, struct.error, CueSheetError) as e:
            self.close()
            raise ContainerOpenError(f"malformed audio file {path}: {e}") from e

    @classmethod
    def can_fingerprint(cls) -> bool:
        return cls.can_read_samples

    @property
    def read_only(self) -> bool:
        return self.mode == "r"

    @abstractmethod
    def _load(self) -> None:
        """Parse the file through ``self._fh`` and fill ``self._markers``."""

    @abstractmethod
    def _commit(self) -> None:
        """Persist ``self._markers``."""

    def _require_writable(self) -> None:
        if self.read_only:
            raise ContainerReadOnlyError(f"{self.path} was opened read-only")

    def get_markers(self) -> List[Marker]:
        return list(self._markers)

    def remove_markers(self, kind: MarkerKind) -> None:
        self._require_writable()
        self._markers = [m for m in self._markers if m.kind is not kind]

    def commit(self) -> None:
        self._require_writable()
        self._commit()
        log.debug(
            "%d marker(s) committed to %s", len(self._markers), self.path,
            extra={"file": self.path, "markers": len(self._markers)})

    def read_samples(self) -> bytes:
        raise UnsupportedOperation(f"{type(self).__name__} cannot read PCM samples")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "AudioContainer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class WavContainer(AudioContainer):
    extension = ".wav"
    can_read_samples = True

    def _load(self) -> None:
        self._layout = riff.read_layout(self._fh)
        fmt = riff.read_format(self._fh, self._layout)
        data = self._layout.find(b"data")
        if data is None:
            raise ContainerOpenError(f"{self.path} has no data chunk")
        self.frame_size = fmt.block_align or FRAME_SIZE_FALLBACK
        self.sample_rate = fmt.sample_rate
        self.total_frames = data.size // self.frame_size
        self._markers = [make_marker(pos, label) for pos, label in riff.read_markers(self._fh, self._layout)]

    def _commit(self) -> None:
        riff.write_markers(self._fh, self._layout, self._markers)
        self._layout = riff.read_layout(self._fh)

    def read_samples(self) -> bytes:
        """Raw ``data`` payload, whole frames only; the sample encoding is not decoded."""
        data = self._layout.find(b"data")
        if data is None:
            raise ContainerOpenError(f"{self.path} has no data chunk")
        return riff.read_payload(self._fh, data)[: self.total_frames * self.frame_size]


class Mp3Container(AudioContainer):
    """Compressed audio whose markers are persisted in a cue-sheet sidecar."""

    extension = ".mp3"
    uses_sidecar = True

    def __init__(self, path: str, mode: str = "r", sidecar_path: Optional[str] = None) -> None:
        self.sidecar_path = sidecar_path or os.path.splitext(path)[0] + ".cue"
        self._sheet = CueSheet()
        super().__init__(path, mode)

    def _load(self) -> None:
        head = self._fh.read(3)
        is_id3 = head == b"ID3"
        is_frame = len(head) >= 2 and head[0] == 0xFF and (head[1] & 0xE0) == 0xE0
        if not (is_id3 or is_frame):
            raise ContainerOpenError(f"{self.path} is not an MP3 stream")
        if not os.path.isfile(self.sidecar_path):
            raise ContainerOpenError(f"cue sheet {self.sidecar_path} not found")
        self._sheet = read_cue_sheet(self.sidecar_path)
        self._markers = self._sheet.markers(self.sample_rate)

    def _commit(self) -> None:
        self._sheet = with_markers(self._sheet, self._markers, self.sample_rate)
        write_cue_sheet(self._sheet, self.sidecar_path)


_VARIANTS: List[Type[AudioContainer]] = [WavContainer, Mp3Container]


def container_class_for(path: str) -> Type[AudioContainer]:
    ext = os.path.splitext(path)[1].lower()
    for variant in _VARIANTS:
        if variant.extension == ext:
            return variant
    raise ContainerOpenError(f"unsupported audio format: {path}")


def open_container(path: str, mode: str = "r", sidecar_path: Optional[str] = None) -> AudioContainer:
    """Open ``path`` with the variant matching its format."""
    variant = container_class_for(path)
    if variant.uses_sidecar:
        return variant(path, mode, sidecar_path=sidecar_path)
    return variant(path, mode)
