"""Locate and swap the cue-sheet sidecar that belongs to a compressed file.

Sidecars live in a parallel folder tree: the quality tier folder (``hi`` /
``low``) is dropped and every ``mp3`` path token becomes ``cue``. The
substitutions are kept as data so a different tree layout only needs a new
rule table.
"""
from __future__ import annotations

import json
import os
import shutil
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from audioscripts.errors import SidecarCopyError
from audioscripts.fsutil import move_over, silent_remove
from audioscripts.logging_utils import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SidecarRule:
    old: str
    new: str

    def apply(self, path: str) -> str:
        return path.replace(self.old, self.new)


DEFAULT_SIDECAR_RULES: Tuple[SidecarRule, ...] = (
    SidecarRule("/mp3/hi/", "/mp3/"),
    SidecarRule("hi/chapter", "chapter"),
    SidecarRule("low/chapter", "chapter"),
    SidecarRule("/mp3/low/", "/mp3/"),
    SidecarRule("mp3", "cue"),
)


def load_sidecar_rules(path: str) -> Tuple[SidecarRule, ...]:
    """Load rules from a JSON list of ``{"old": ..., "new": ...}`` objects."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of rules")
    rules: List[SidecarRule] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or not isinstance(item.get("old"), str) or not isinstance(item.get("new"), str):
            raise ValueError(f"{path}: rule {i} needs string 'old' and 'new' fields")
        if not item["old"]:
            raise ValueError(f"{path}: rule {i} has an empty 'old' pattern")
        rules.append(SidecarRule(item["old"], item["new"]))
    return tuple(rules)


def sidecar_path_for(primary_path: str, rules: Sequence[SidecarRule] = DEFAULT_SIDECAR_RULES) -> str:
    path = os.path.abspath(primary_path)
    for rule in rules:
        path = rule.apply(path)
    return path


def copy_sidecar(
    primary_path: str,
    dest_path: str,
    rules: Sequence[SidecarRule] = DEFAULT_SIDECAR_RULES,
) -> Tuple[str, bool]:
    """Copy the sidecar of ``primary_path`` to ``dest_path``.

    Returns ``(dest_path, ok)``; a missing or uncopyable sidecar gives
    ``ok=False`` rather than an exception.
    """
    source = sidecar_path_for(primary_path, rules)
    log.debug(
        "copy sidecar %s -> %s", source, dest_path,
        extra={"src": source, "dst": dest_path, "exists": os.path.exists(source)})
    silent_remove(dest_path)
    try:
        if not os.path.isfile(source):
            raise SidecarCopyError(f"sidecar {source} does not exist")
        shutil.copyfile(source, dest_path)
        return dest_path, True
    except (OSError, SidecarCopyError) as e:
        log.error(
            "sidecar copy %s -> %s failed: %s", source, dest_path, e,
            extra={"src": source, "dst": dest_path, "error": str(e)})
        silent_remove(dest_path)
        return dest_path, False


def publish_sidecar(
    temp_sidecar_path: str,
    primary_path: str,
    rules: Sequence[SidecarRule] = DEFAULT_SIDECAR_RULES,
) -> str:
    """Move the prepared sidecar over the one correlated with ``primary_path``."""
    target = sidecar_path_for(primary_path, rules)
    log.info("update sidecar %s", target, extra={"file": target})
    move_over(temp_sidecar_path, target)
    return target
