from __future__ import annotations

import argparse
import sys

from audioscripts.config import DEFAULT_FILE_LIST, DEFAULT_OUTPUT_DIR, DEFAULT_OUTPUT_NAME, work_dir_from_env
from audioscripts.errors import FileListError
from audioscripts.logging_utils import setup_logging, get_logger
from audioscripts.report import read_file_list, results_to_json, write_output
from audioscripts.sidecar import DEFAULT_SIDECAR_RULES, load_sidecar_rules
from audioscripts.standardize import run_batch

log = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse CLI arguments for marker standardization."""
    parser = argparse.ArgumentParser(description="Remove unknown markers from WAV files and MP3 cue sheets")
    parser.add_argument("--files", type=str, default=DEFAULT_FILE_LIST,
                        help="File with the absolute paths to process, one per line")
    parser.add_argument("--output_dir", type=str, default=DEFAULT_OUTPUT_DIR, help="Directory to write results to")
    parser.add_argument("--output_name", type=str, default=DEFAULT_OUTPUT_NAME, help="Name of the results file")
    parser.add_argument("--format", type=str, choices=["wav", "mp3"], default=None,
                        help="Only process files of this format")
    parser.add_argument("--workers", type=int, default=1, help="Files processed in parallel (default: 1)")
    parser.add_argument("--work_dir", type=str, default=None,
                        help="Directory for working copies (default: AUDIOSCRIPTS_WORK_DIR or beside each file)")
    parser.add_argument("--sidecar_rules", type=str, default=None,
                        help="JSON file of {old, new} path substitutions locating cue sheets")
    parser.add_argument("--log_level", type=str, default=None, help="Log level (e.g., INFO, DEBUG)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """CLI entry point.

    Examples:
      python3 fix_markers.py --files files.txt --output_dir out
      python3 fix_markers.py --format mp3 --sidecar_rules rules.json --workers 4
    """
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        paths = read_file_list(args.files)
        rules = load_sidecar_rules(args.sidecar_rules) if args.sidecar_rules else DEFAULT_SIDECAR_RULES
    except (FileListError, OSError, ValueError) as e:
        log.error("setup failed: %s", e, extra={"error": str(e)})
        return 1

    results = run_batch(
        paths,
        rules=rules,
        work_dir=args.work_dir or work_dir_from_env(),
        workers=max(1, args.workers),
        extension=args.format,
    )
    write_output(args.output_dir, args.output_name, results_to_json(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
