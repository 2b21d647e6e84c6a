from __future__ import annotations

import os

from audioscripts.config import DEFAULT_HTTP_TIMEOUT
from audioscripts.errors import CatalogError
from audioscripts.logging_utils import get_logger

from apis.catalog import download_file as _download_file_low

log = get_logger(__name__)


def archive_url(repo_url: str) -> str:
    return f"{repo_url.rstrip('/')}/archive/master.zip"


def archive_name(repo_url: str) -> str:
    return f"{repo_url.rstrip('/').split('/')[-1]}.zip"


def download_archive(repo_url: str, download_dir: str, timeout: float = DEFAULT_HTTP_TIMEOUT) -> str:
    """Download the master archive of a catalog repository or raise CatalogError."""
    os.makedirs(download_dir, exist_ok=True)
    url = archive_url(repo_url)
    dest = os.path.join(download_dir, archive_name(repo_url))
    log.info("download %s -> %s", url, dest, extra={"url": url, "dest": dest})
    if not _download_file_low(url, dest, timeout=timeout):
        raise CatalogError(f"Failed to download {url}")
    return dest
