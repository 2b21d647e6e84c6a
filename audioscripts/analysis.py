from __future__ import annotations

import os
from typing import Callable, Dict, List

from audioscripts.containers import WavContainer
from audioscripts.cuesheet import read_cue_sheet
from audioscripts.errors import AudioScriptsError
from audioscripts.filenames import get_content
from audioscripts.logging_utils import get_logger
from audioscripts.types import ChapterResult, Marker

log = get_logger(__name__)

# language -> book -> chapter -> ChapterResult
ResultTree = Dict[str, Dict[str, Dict[int, ChapterResult]]]


def read_audio_metadata(path: str) -> List[Marker]:
    with WavContainer(path) as container:
        return container.get_markers()


def read_cue_markers(path: str) -> List[Marker]:
    return read_cue_sheet(path).markers()


def _analyze(paths: List[str], extension: str, reader: Callable[[str], List[Marker]]) -> Dict:
    tree: ResultTree = {}
    failed: List[str] = []
    files = [p for p in paths if os.path.exists(p) and os.path.splitext(p)[1].lower() == extension]

    for path in files:
        if os.path.getsize(path) == 0:
            log.warning("empty file %s", path, extra={"file": path})
            failed.append(path)
            continue
        content = get_content(path)
        if content is None:
            log.warning("cannot tag file name %s", path, extra={"file": path})
            failed.append(path)
            continue
        try:
            cues = reader(path)
        except (AudioScriptsError, OSError) as e:
            log.error("cannot read markers of %s: %s", path, e, extra={"file": path, "error": str(e)})
            failed.append(path)
            continue
        book = tree.setdefault(content.language_code, {}).setdefault(content.book_code, {})
        book[content.chapter_number] = ChapterResult(content.chapter_number, path, cues)

    log.info(
        "analysis done: %d file(s), %d failed", len(files), len(failed),
        extra={"files": len(files), "failed": len(failed)})
    return {
        "result": {
            lang: {b: {ch: r.to_dict() for ch, r in chapters.items()} for b, chapters in books.items()}
            for lang, books in tree.items()
        },
        "failedFiles": failed,
    }


def analyze_wav_files(paths: List[str]) -> Dict:
    """Group the embedded markers of WAV files by language, book and chapter."""
    return _analyze(paths, ".wav", read_audio_metadata)


def analyze_cue_sheets(paths: List[str]) -> Dict:
    """Group the markers of cue sheets by language, book and chapter."""
    return _analyze(paths, ".cue", read_cue_markers)
