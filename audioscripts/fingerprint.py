from __future__ import annotations

import hashlib

from audioscripts.containers import AudioContainer
from audioscripts.errors import UnsupportedOperation


def fingerprint(container: AudioContainer) -> str:
    """MD5 (hex) of the container's PCM bytes, whole frames only.

    Metadata chunks never contribute, so two files with the same audio and
    different markers share a digest.
    """
    if not container.can_fingerprint():
        raise UnsupportedOperation(f"cannot fingerprint {container.path}")
    samples = container.read_samples()
    usable = container.total_frames * container.frame_size
    return hashlib.md5(samples[:usable]).hexdigest()
