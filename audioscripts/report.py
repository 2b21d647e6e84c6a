from __future__ import annotations

import json
import os
from typing import Any, Iterable, List

from audioscripts.errors import FileListError
from audioscripts.logging_utils import get_logger
from audioscripts.types import StandardizeResult

log = get_logger(__name__)


def read_file_list(list_path: str) -> List[str]:
    """Read newline-separated file paths, skipping blank lines."""
    try:
        with open(list_path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]
    except (OSError, UnicodeDecodeError) as e:
        raise FileListError(f"cannot read file list {list_path}: {e}") from e


def results_to_json(results: Iterable[StandardizeResult]) -> List[dict]:
    return [r.to_dict() for r in results]


def write_output(output_dir: str, output_name: str, payload: Any) -> str:
    """Write ``payload`` as JSON to ``output_dir/output_name``, creating the directory."""
    os.makedirs(output_dir, exist_ok=True)
    out_path = os.path.join(output_dir, output_name)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    log.info("report written to %s", out_path, extra={"output": out_path})
    return out_path
