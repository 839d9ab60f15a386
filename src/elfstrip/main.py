#!/usr/bin/env python3
"""
elfstrip - a simple ELF-32/64 section stripper
==============================================

Cuts the section header table and the section-header string table out of an ELF
executable and clears the header fields that referenced them. Program headers and
segment contents are left untouched, so the stripped file still loads and runs.

CLI Usage:
    elfstrip a.out a.out.stripped
    elfstrip -d a.out a.out.stripped

Module Usage:
    import elfstrip

    result = elfstrip.strip_file('a.out', 'a.out.stripped')

    with open('a.out', 'rb') as f:
        stripped = elfstrip.strip_bytes(f.read())
"""

import sys
import argparse
import logging
from typing import List, Optional

from .utils import setup_logging, detect_elf_architecture
from .errors import ElfStripError
from .elf_image import ElfImage
from .stripper import SectionStripper

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """Raised instead of exiting when the arguments cannot be parsed"""


class UsageParser(argparse.ArgumentParser):
    """Argument parser that reports malformed arguments to the caller"""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = UsageParser(
        prog='elfstrip',
        usage='%(prog)s [-d] <infile> <outfile>',
        description='elfstrip - a simple ELF-32/64 section stripper',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Examples:
  # Strip section headers from a binary
  elfstrip ./a.out ./a.out.stripped

  # Same, with debug output
  elfstrip -d ./a.out ./a.out.stripped
        """
    )

    parser.add_argument('paths', nargs='*', metavar='FILE',
                        help='Input ELF file followed by the output path')
    parser.add_argument('-h', '--help', action='store_true',
                        help='Show this help message and exit')
    parser.add_argument('-d', '--debug', action='store_true',
                        help='Enable debug output')
    return parser


def verify_output(output_path: str) -> bool:
    """Re-open the written file and check that it declares no section headers"""
    if detect_elf_architecture(output_path) is None:
        logger.warning("Output file verification failed: not a valid ELF file")
        return False

    try:
        with ElfImage(output_path) as image:
            fields = image.section_table_fields()
    except ElfStripError as e:
        logger.warning(f"Output file verification failed: {e}")
        return False

    leftover = {name: value for name, value in fields.items() if value}
    if leftover:
        logger.warning(f"Output file verification failed: {leftover}")
        return False

    logger.info("Output file verification passed")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line section stripper"""
    parser = build_parser()
    try:
        args, extra = parser.parse_known_intermixed_args(argv)
    except UsageError:
        args, extra = None, None

    # Usage goes to stderr with a success status, like the original tool
    if args is None or args.help or extra or len(args.paths) != 2:
        parser.print_help(sys.stderr)
        return 0

    setup_logging(args.debug)
    input_path, output_path = args.paths

    try:
        result = SectionStripper().strip(input_path, output_path)
    except ElfStripError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1

    verify_output(output_path)

    if result.region is not None:
        logger.info(f"Removed {result.removed} bytes "
                    f"(section names were at 0x{result.region.offset:x})")
    logger.info("Done! Section headers stripped successfully.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
