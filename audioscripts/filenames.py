"""Language / book / chapter tags parsed from delivery file names.

Names look like ``en_ulb_gen_c01.wav`` or ``en-x-demo_ulb_1jn_c003.cue``.
"""
from __future__ import annotations

import os
import re
from typing import Optional

from audioscripts.types import CueContent

LANGUAGE_RE = re.compile(r"^([a-zA-Z]+(?:-[a-zA-Z]+-[a-zA-Z]+)?)_.*$")
BOOK_RE = re.compile(r".*_[a-z]{3}_([a-z1-3]{3})_.*")
CHAPTER_RE = re.compile(r".*_c(\d+).*")


def get_language_name(path: str) -> Optional[str]:
    m = LANGUAGE_RE.match(os.path.basename(path))
    return m.group(1) if m else None


def get_book_code(path: str) -> Optional[str]:
    m = BOOK_RE.match(os.path.basename(path))
    return m.group(1) if m else None


def get_chapter_number(path: str) -> Optional[int]:
    m = CHAPTER_RE.match(os.path.basename(path))
    return int(m.group(1)) if m else None


def get_content(path: str) -> Optional[CueContent]:
    language = get_language_name(path)
    book = get_book_code(path)
    chapter = get_chapter_number(path)
    if language is None or book is None or chapter is None:
        return None
    return CueContent(language, book, chapter)
