from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple, TypedDict


class MarkerKind(str, Enum):
    VERSE = "verse"
    CHUNK = "chunk"
    UNKNOWN = "unknown"
    OTHER = "other"


class Status(str, Enum):
    OK = "OK"
    ERROR = "error"


class FileStatus(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WARNING = "WARNING"


class MarkerDict(TypedDict):
    kind: str
    position: int
    label: str


class StandardizeResultDict(TypedDict):
    file: str
    cues: List[MarkerDict]
    audioMd5: str
    status: str


@dataclass(frozen=True)
class Marker:
    """A labeled sample-frame position inside an audio file."""

    kind: MarkerKind
    position: int
    label: str

    def __post_init__(self) -> None:
        if self.position < 0:
            raise ValueError(f"marker position must be >= 0, got {self.position}")

    def to_dict(self) -> MarkerDict:
        return {"kind": self.kind.value, "position": self.position, "label": self.label}


@dataclass(frozen=True)
class StandardizeResult:
    file: str
    cues: Tuple[Marker, ...] = ()
    audio_md5: str = ""
    status: Status = Status.ERROR

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    def to_dict(self) -> StandardizeResultDict:
        return {
            "file": self.file,
            "cues": [c.to_dict() for c in self.cues],
            "audioMd5": self.audio_md5,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class FileResult:
    """Classification of one file by the validation router."""

    status: FileStatus
    file_name: str
    reason: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"status": self.status.value, "fileName": self.file_name, "reason": self.reason}


@dataclass(frozen=True)
class CueContent:
    language_code: str
    book_code: str
    chapter_number: int


@dataclass
class ChapterResult:
    number: int
    file: str
    cues: List[Marker] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {"number": self.number, "file": self.file, "cues": [c.to_dict() for c in self.cues]}


@dataclass
class BridgeResult:
    language_code: str
    bible_id: str
    book_slug: str
    chapter_number: int
    verses: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "languageCode": self.language_code,
            "bibleId": self.bible_id,
            "bookSlug": self.book_slug,
            "chapterNumber": self.chapter_number,
            "verses": list(self.verses),
        }
