"""Marker standardization with verified, atomic publishing.

Every file is handled as: copy original -> mutate the copy -> verify the PCM
fingerprint (or swap the cue-sheet sidecar) -> move the copy over the
original. The original is never written unless verification passed, and the
working copies are always removed before returning.
"""
from __future__ import annotations

import os
import shutil
import uuid
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

from audioscripts.containers import container_class_for, open_container
from audioscripts.fingerprint import fingerprint
from audioscripts.fsutil import move_over, silent_remove
from audioscripts.logging_utils import get_logger
from audioscripts.sidecar import DEFAULT_SIDECAR_RULES, SidecarRule, copy_sidecar, publish_sidecar
from audioscripts.types import Marker, MarkerKind, StandardizeResult, Status

log = get_logger(__name__)


def _temp_paths(source: str, work_dir: Optional[str]) -> Tuple[str, str]:
    """Working file and working sidecar names unique to one invocation."""
    base_dir = work_dir or os.path.dirname(source)
    stem, ext = os.path.splitext(os.path.basename(source))
    token = uuid.uuid4().hex[:12]
    temp = os.path.join(base_dir, f".{stem}.{token}{ext}")
    temp_sidecar = os.path.join(base_dir, f".{stem}.{token}.cue")
    return temp, temp_sidecar


def standardize_markers(
    path: str,
    rules: Sequence[SidecarRule] = DEFAULT_SIDECAR_RULES,
    work_dir: Optional[str] = None,
) -> StandardizeResult:
    """Remove UNKNOWN markers from one file and publish it if audio is intact.

    Never raises: every failure becomes a result with status ERROR.
    """
    source = os.path.abspath(path)
    temp: Optional[str] = None
    temp_sidecar: Optional[str] = None
    cues: Tuple[Marker, ...] = ()
    digest = ""
    status = Status.ERROR

    try:
        temp, temp_sidecar = _temp_paths(source, work_dir)
        silent_remove(temp)
        silent_remove(temp_sidecar)

        variant = container_class_for(source)
        addressable = variant.can_fingerprint()
        sidecar_ok = False
        if variant.uses_sidecar:
            _, sidecar_ok = copy_sidecar(source, temp_sidecar, rules)
            if not sidecar_ok:
                log.error("cue for %s could not be copied", source, extra={"file": source})
                return StandardizeResult(file=source)

        shutil.copyfile(source, temp)
        log.debug("copied %s to %s", source, temp, extra={"file": source, "temp": temp})

        initial_digest = ""
        if addressable:
            with open_container(temp) as container:
                initial_digest = fingerprint(container)
                log.debug(
                    "initial digest of %s over %d frame(s)", source, container.total_frames,
                    extra={"file": source, "frames": container.total_frames})

        with open_container(temp, mode="w", sidecar_path=temp_sidecar) as container:
            cues = tuple(container.get_markers())
            container.remove_markers(MarkerKind.UNKNOWN)
            container.commit()

        final_digest = ""
        if addressable:
            with open_container(temp) as container:
                final_digest = fingerprint(container)

        if addressable:
            if final_digest and final_digest == initial_digest:
                move_over(temp, source)
                digest = final_digest
                status = Status.OK
            else:
                log.warning("audio digest of %s changed; original left untouched", source, extra={
                    "file": source, "initial": initial_digest, "final": final_digest
                })
        elif variant.uses_sidecar and sidecar_ok:
            publish_sidecar(temp_sidecar, source, rules)
            status = Status.OK
    except Exception:
        log.exception("standardize %s failed", source, extra={"file": source})
        status = Status.ERROR
    finally:
        silent_remove(temp)
        silent_remove(temp_sidecar)

    log.info(
        "standardized %s: %s, %d cue(s)", source, status.value, len(cues),
        extra={"file": source, "status": status.value, "cues": len(cues)})
    return StandardizeResult(file=source, cues=cues, audio_md5=digest, status=status)


def _matches_format(path: str, extension: Optional[str]) -> bool:
    if not extension:
        return True
    return os.path.splitext(path)[1].lower() == "." + extension.lower().lstrip(".")


def run_batch(
    paths: Sequence[str],
    rules: Sequence[SidecarRule] = DEFAULT_SIDECAR_RULES,
    work_dir: Optional[str] = None,
    workers: int = 1,
    extension: Optional[str] = None,
) -> List[StandardizeResult]:
    """Standardize every file, returning results in input order.

    With ``workers > 1`` files run on a thread pool; repeated paths stay on
    one worker so a file is never processed twice at the same time.
    """
    selected: List[str] = []
    for p in paths:
        if _matches_format(p, extension):
            selected.append(p)
        else:
            log.warning("skip %s: not a %s file", p, extension, extra={"file": p, "format": extension})

    log.info(
        "start batch of %d file(s) on %d worker(s)", len(selected), workers,
        extra={"files": len(selected), "workers": workers})
    if workers <= 1:
        results = [standardize_markers(p, rules, work_dir) for p in selected]
    else:
        groups: Dict[str, List[int]] = OrderedDict()
        for i, p in enumerate(selected):
            groups.setdefault(os.path.abspath(p), []).append(i)

        def _process(indexes: List[int]) -> List[Tuple[int, StandardizeResult]]:
            return [(i, standardize_markers(selected[i], rules, work_dir)) for i in indexes]

        slots: List[Optional[StandardizeResult]] = [None] * len(selected)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            for pairs in pool.map(_process, groups.values()):
                for i, result in pairs:
                    slots[i] = result
        results = [r for r in slots if r is not None]

    ok = sum(1 for r in results if r.ok)
    log.info(
        "batch done: %d ok, %d error", ok, len(results) - ok,
        extra={"ok": ok, "error": len(results) - ok})
    return results
