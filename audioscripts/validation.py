"""Audio validation: a router classifies files, the batch keeps going.

The router is a black box to the batch; ``validate_files`` hands it one file
at a time so an exception for one file only rejects that file.
"""
from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from audioscripts.containers import container_class_for, open_container
from audioscripts.errors import ContainerOpenError
from audioscripts.logging_utils import get_logger
from audioscripts.markers import strip_unknown
from audioscripts.sidecar import DEFAULT_SIDECAR_RULES, SidecarRule, sidecar_path_for
from audioscripts.types import FileResult, FileStatus

log = get_logger(__name__)


class ValidationRouter(ABC):
    """Classifies a list of files; one result per path, in order."""

    @abstractmethod
    def handle_files(self, paths: List[str]) -> List[FileResult]:
        ...


class ContainerValidationRouter(ValidationRouter):
    """Accepts files whose container opens and carries known markers."""

    def __init__(self, rules: Sequence[SidecarRule] = DEFAULT_SIDECAR_RULES) -> None:
        self.rules = rules

    def handle_files(self, paths: List[str]) -> List[FileResult]:
        return [self._check(p) for p in paths]

    def _check(self, path: str) -> FileResult:
        name = os.path.basename(path)
        try:
            sidecar = sidecar_path_for(path, self.rules) if container_class_for(path).uses_sidecar else None
            with open_container(path, sidecar_path=sidecar) as container:
                markers = container.get_markers()
                if container.can_read_samples and container.total_frames == 0:
                    return FileResult(FileStatus.REJECTED, name, "No audio frames")
        except ContainerOpenError as e:
            return FileResult(FileStatus.REJECTED, name, str(e))

        if not markers:
            return FileResult(FileStatus.WARNING, name, "No markers")
        unknown = len(markers) - len(strip_unknown(markers))
        if unknown:
            return FileResult(FileStatus.WARNING, name, f"{unknown} unknown marker(s)")
        return FileResult(FileStatus.ACCEPTED, name)


def build_router() -> ValidationRouter:
    return ContainerValidationRouter()


def validate_files(paths: List[str], router: Optional[ValidationRouter] = None) -> List[FileResult]:
    router = router or build_router()
    results: List[FileResult] = []
    for path in paths:
        try:
            results.extend(router.handle_files([path]))
        except Exception:
            log.exception("validation of %s failed", path, extra={"file": path})
            results.append(FileResult(FileStatus.REJECTED, os.path.basename(path), "Error"))
    return results
