# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for provexif

Prints the provenance record of one or more JPEG files as text or JSON.

Copyright 2025 DNAi inc.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from provexif.config import ExtractionConfig
from provexif.exif_parser import ExtractionResult, read_file


def _flatten(prefix: str, value: Any, lines: List[str]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            _flatten(f"{prefix}.{key}" if prefix else key, item, lines)
    elif isinstance(value, bool) or value not in (None, '', 0, []):
        lines.append(f"{prefix}: {value}")


def format_output(data: Dict[str, Any], format_type: str = "text") -> str:
    """
    Format an extraction result.

    Args:
        data: ExtractionResult.to_dict() output
        format_type: 'text' or 'json'

    Returns:
        Formatted output string. Text output lists only fields that were found.
    """
    if format_type == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)

    lines: List[str] = []
    if data.get('record'):
        _flatten('', data['record'], lines)
    error = data.get('error')
    if error:
        lines.append(f"{error['severity'].capitalize()}: {error['type']}: {error['message']}")
    for diagnostic in data.get('diagnostics', []):
        lines.append(f"[{diagnostic['severity']}] {diagnostic['message']}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='provexif',
        description="provexif - Extract provenance evidence from JPEG EXIF metadata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Read the provenance record
  provexif photo.jpg

  # JSON output with diagnostics
  provexif -j --diagnostics photo.jpg

  # Skip MakerNote decoding
  provexif --no-makernote photo.jpg
        """
    )
    parser.add_argument('files', nargs='+', help='JPEG file(s) to process')
    parser.add_argument('-j', '--json', action='store_true', help='Output the record in JSON format')
    parser.add_argument('--no-makernote', action='store_true',
                        help='Do not decode the HDR+ or vendor MakerNotes')
    parser.add_argument('--diagnostics', action='store_true',
                        help='Include diagnostics (skipped tags, recovery notes) in the output')
    parser.add_argument('--loglevel', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Logging level (default: WARNING)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line.

    Returns:
        0 when every file produced a record, 1 otherwise
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.loglevel),
                        format='%(levelname)s %(name)s: %(message)s')

    config = ExtractionConfig(
        decode_hdrplus=not args.no_makernote,
        decode_vendor_makernotes=not args.no_makernote,
    )
    format_type = "json" if args.json else "text"

    exit_code = 0
    for index, path in enumerate(args.files):
        try:
            result: ExtractionResult = read_file(path, config)
        except OSError as e:
            print(f"Error: Cannot read {path}: {e.strerror or e}", file=sys.stderr)
            exit_code = 1
            continue

        if not result.ok:
            exit_code = 1

        if len(args.files) > 1 and format_type == "text":
            if index:
                print()
            print(f"======== {path}")
        data = result.to_dict(include_diagnostics=args.diagnostics)
        print(format_output(data, format_type))

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
