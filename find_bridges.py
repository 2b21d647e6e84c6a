from __future__ import annotations

import argparse
import sys

from audioscripts.bridges import find_bridges_in_repos
from audioscripts.config import CATALOG_REPOSITORIES, DEFAULT_OUTPUT_DIR, http_timeout_from_env
from audioscripts.logging_utils import setup_logging, get_logger
from audioscripts.report import write_output

log = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse CLI arguments for the bridge finder."""
    parser = argparse.ArgumentParser(description="Find bridged verses in catalog resource containers")
    parser.add_argument("--url", dest="urls", action="append", default=None,
                        help="Catalog repository URL (repeatable; default: built-in repository list)")
    parser.add_argument("--download_dir", type=str, default="downloads", help="Where archives are saved")
    parser.add_argument("--output_dir", type=str, default=DEFAULT_OUTPUT_DIR, help="Directory to write results to")
    parser.add_argument("--output_name", type=str, default="bridges.json", help="Name of the results file")
    parser.add_argument("--timeout", type=float, default=None,
                        help="HTTP timeout in seconds (default: AUDIOSCRIPTS_HTTP_TIMEOUT or 60)")
    parser.add_argument("--log_level", type=str, default=None, help="Log level (e.g., INFO, DEBUG)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    urls = args.urls or CATALOG_REPOSITORIES
    results = find_bridges_in_repos(urls, args.download_dir, timeout=args.timeout or http_timeout_from_env())
    write_output(args.output_dir, args.output_name, [r.to_dict() for r in results])
    return 0


if __name__ == "__main__":
    sys.exit(main())
