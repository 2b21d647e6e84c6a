from __future__ import annotations

import argparse
import sys

from audioscripts.analysis import analyze_cue_sheets, analyze_wav_files
from audioscripts.config import DEFAULT_FILE_LIST, DEFAULT_OUTPUT_DIR, DEFAULT_OUTPUT_NAME
from audioscripts.errors import FileListError
from audioscripts.logging_utils import setup_logging, get_logger
from audioscripts.report import read_file_list, write_output

log = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse CLI arguments for marker analysis."""
    parser = argparse.ArgumentParser(description="Report markers of WAV files or cue sheets by language/book/chapter")
    parser.add_argument("--format", type=str, choices=["wav", "cue"], required=True, help="The format of files to process")
    parser.add_argument("--files", type=str, default=DEFAULT_FILE_LIST,
                        help="File with the absolute paths to process, one per line")
    parser.add_argument("--output_dir", type=str, default=DEFAULT_OUTPUT_DIR, help="Directory to write results to")
    parser.add_argument("--output_name", type=str, default=DEFAULT_OUTPUT_NAME, help="Name of the results file")
    parser.add_argument("--log_level", type=str, default=None, help="Log level (e.g., INFO, DEBUG)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    try:
        paths = read_file_list(args.files)
    except FileListError as e:
        log.error("setup failed: %s", e, extra={"error": str(e)})
        return 1

    if args.format == "wav":
        output = analyze_wav_files(paths)
    else:
        output = analyze_cue_sheets(paths)
    write_output(args.output_dir, args.output_name, output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
