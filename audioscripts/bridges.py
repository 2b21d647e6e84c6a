"""Find bridged verses (``\\v 3-4``) in resource-container archives."""
from __future__ import annotations

import posixpath
import zipfile
from typing import Dict, List, Optional, Sequence

import yaml

from audioscripts.catalog_client import download_archive
from audioscripts.config import DEFAULT_HTTP_TIMEOUT
from audioscripts.errors import CatalogError, ResourceContainerError
from audioscripts.logging_utils import get_logger
from audioscripts.types import BridgeResult
from audioscripts.usfm import parse_chapters

log = get_logger(__name__)

MANIFEST_NAME = "manifest.yaml"


def _manifest_path(names: Sequence[str]) -> str:
    """The shallowest manifest.yaml; catalog archives nest it in one folder."""
    candidates = [n for n in names if posixpath.basename(n) == MANIFEST_NAME]
    if not candidates:
        raise ResourceContainerError("archive has no manifest.yaml")
    return min(candidates, key=lambda n: n.count("/"))


def _load_manifest(zf: zipfile.ZipFile, path: str) -> Dict:
    try:
        manifest = yaml.safe_load(zf.read(path).decode("utf-8-sig"))
    except yaml.YAMLError as e:
        raise ResourceContainerError(f"invalid manifest: {e}") from e
    if not isinstance(manifest, dict):
        raise ResourceContainerError("manifest is not a mapping")
    return manifest


def find_bridges(rc_path: str) -> List[BridgeResult]:
    """Report every chapter of every book in the container that has bridges."""
    results: List[BridgeResult] = []
    try:
        with zipfile.ZipFile(rc_path) as zf:
            names = zf.namelist()
            manifest_path = _manifest_path(names)
            root = posixpath.dirname(manifest_path)
            manifest = _load_manifest(zf, manifest_path)
            dublin_core = manifest.get("dublin_core") or {}
            language = str((dublin_core.get("language") or {}).get("identifier", ""))
            bible_id = str(dublin_core.get("identifier", ""))

            for project in manifest.get("projects") or []:
                if not isinstance(project, dict):
                    log.warning("skip malformed project entry in %s: %r", rc_path, project)
                    continue
                book_path = posixpath.normpath(posixpath.join(root, str(project.get("path", ""))))
                if book_path not in names:
                    log.debug("book %s missing from archive", book_path, extra={"path": book_path})
                    continue
                try:
                    usfm = zf.read(book_path).decode("utf-8-sig")
                except UnicodeDecodeError as e:
                    log.warning("skip undecodable book %s in %s: %s", book_path, rc_path, e)
                    continue
                for chapter in parse_chapters(usfm):
                    bridges = [str(v) for v in chapter.bridges()]
                    if bridges:
                        results.append(BridgeResult(language, bible_id, str(project.get("identifier", "")),
                                                    chapter.number, bridges))
    except (zipfile.BadZipFile, OSError, KeyError, AttributeError, TypeError) as e:
        raise ResourceContainerError(f"cannot read resource container {rc_path}: {e}") from e
    log.info(
        "%d chapter(s) with bridges in %s", len(results), rc_path,
        extra={"archive": rc_path, "chapters": len(results)})
    return results


def find_bridges_in_repos(
    repo_urls: Sequence[str],
    download_dir: str,
    timeout: Optional[float] = None,
) -> List[BridgeResult]:
    """Download each repository archive and collect its bridges.

    A repository that fails to download or parse is logged and skipped.
    """
    results: List[BridgeResult] = []
    for url in repo_urls:
        try:
            archive = download_archive(url, download_dir, timeout=timeout or DEFAULT_HTTP_TIMEOUT)
            results.extend(find_bridges(archive))
        except (CatalogError, ResourceContainerError) as e:
            log.error("skip repository %s: %s", url, e, extra={"url": url, "error": str(e)})
    return results
