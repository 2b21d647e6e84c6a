from __future__ import annotations

import errno
import os
import shutil
import tempfile
from typing import Optional

from audioscripts.logging_utils import get_logger

log = get_logger(__name__)


def silent_remove(path: Optional[str]) -> None:
    """Delete ``path`` if it exists; absence is not an error."""
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def move_over(src: str, dst: str) -> None:
    """Move ``src`` over ``dst`` so readers never see a partial ``dst``.

    Across filesystems the file is first staged next to ``dst``.
    """
    try:
        os.replace(src, dst)
        return
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
    log.debug("cross-device move %s -> %s; staging beside target", src, dst, extra={"src": src, "dst": dst})
    fd, staging = tempfile.mkstemp(prefix=".", suffix=".partial", dir=os.path.dirname(dst) or ".")
    os.close(fd)
    try:
        shutil.copyfile(src, staging)
        os.replace(staging, dst)
    finally:
        silent_remove(staging)
    os.remove(src)
