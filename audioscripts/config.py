"""Constants and environment-driven defaults shared by the CLI scripts."""
from __future__ import annotations

import os
from typing import List, Optional

# PCM bytes per frame assumed when a WAV header reports a zero block align
FRAME_SIZE_FALLBACK = 2

DEFAULT_SAMPLE_RATE = 44100
CUE_FRAMES_PER_SECOND = 75

DEFAULT_FILE_LIST = "files.txt"
DEFAULT_OUTPUT_DIR = "."
DEFAULT_OUTPUT_NAME = "results.json"

DEFAULT_HTTP_TIMEOUT = 60.0

CATALOG_BASE_URL = "https://content.bibletranslationtools.org/WA-Catalog"
CATALOG_REPOSITORIES: List[str] = [
    f"{CATALOG_BASE_URL}/gu_ulb",
    f"{CATALOG_BASE_URL}/hi_ulb",
    f"{CATALOG_BASE_URL}/id_ayt",
    f"{CATALOG_BASE_URL}/ilo_ulb",
    f"{CATALOG_BASE_URL}/ne_ulb",
    f"{CATALOG_BASE_URL}/or_ulb",
    f"{CATALOG_BASE_URL}/tl_ulb",
    f"{CATALOG_BASE_URL}/ta_ulb",
    f"{CATALOG_BASE_URL}/vi_ulb",
]


def work_dir_from_env() -> Optional[str]:
    """Directory for working copies, or None to keep them beside the source."""
    value = os.getenv("AUDIOSCRIPTS_WORK_DIR", "").strip()
    return value or None


def http_timeout_from_env() -> float:
    raw = os.getenv("AUDIOSCRIPTS_HTTP_TIMEOUT")
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT
