"""
Command-line interface for scmver.

Prints (or stores) the version of a project tree: taken from a reference
file when one is given and readable, otherwise queried live from the SCM.
"""

import os
import sys
import argparse
from typing import Optional

from loguru import logger
from rich.console import Console

from . import __version__
from .api import STDIO_PATH, persist, resolve_from_record, resolve_live
from .codec import compare_versions, format_dotted
from .config import Config, OUTPUT_FORMATS, load_config
from .errors import ScmNotFoundError, ScmverError
from .logging_config import setup_logging
from .models import VersionRecord

# Diagnostics console; stdout is reserved for the version itself
console = Console(stderr=True)


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='scmver',
        description='Determine a project version from git, bzr or hg, or from a stored version file.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment variables:
  SCMVER_PATH, SCMVER_REFERENCE, SCMVER_OUTPUT, SCMVER_FORMAT,
  SCMVER_FORCE and LOG_LEVEL mirror the options below.

Examples:
  scmver                          print the version of the current tree
  scmver src/ -r .version         prefer .version, fall back to the SCM
  scmver -o .version              store the version, only if it changed
"""
    )
    parser.add_argument('path', nargs='?', default=None,
                        help='File or directory inside the project (default: current directory)')
    parser.add_argument('-r', '--reference', default=None,
                        help='Version file to read instead of querying the SCM ("-" for stdin)')
    parser.add_argument('-o', '--output', default=None,
                        help='Where to write the version ("-" for stdout, the default)')
    parser.add_argument('--format', dest='output_format', choices=OUTPUT_FORMATS, default=None,
                        help='normalized (v1.2-3-gabcdef0-dirty) or dotted (1.2.git3.abcdef0.dirty)')
    parser.add_argument('-f', '--force', action='store_true', default=None,
                        help='Rewrite the output file even if the version is unchanged')
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'VERBOSE', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        type=str.upper,
                        help='Logging level (default: WARNING)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def determine_version(config: Config) -> VersionRecord:
    """Read the reference record if there is a usable one, else ask the SCM."""
    if config.reference:
        try:
            record = resolve_from_record(config.reference)
            logger.info(f'Using version from {config.reference}')
            return record
        except ScmverError as e:
            logger.info(f'Reference {config.reference} not usable ({e}), querying SCM')
    return resolve_live(config.path)


def write_version(record: VersionRecord, config: Config) -> bool:
    """
    Emit the version to the configured destination.

    An existing output file is left alone when it already holds the same
    version, unless forced.

    Returns:
        bool: True if something was written
    """
    if config.output == STDIO_PATH:
        if config.output_format == 'dotted':
            sys.stdout.write(format_dotted(record) + '\n')
            sys.stdout.flush()
        else:
            persist(record, STDIO_PATH)
        return True

    if not config.force and os.path.exists(config.output):
        try:
            current = resolve_from_record(config.output)
        except ScmverError as e:
            logger.debug(f'Existing {config.output} not readable ({e}), rewriting')
        else:
            if compare_versions(current, record) == 0:
                logger.info(f'{config.output} is up to date')
                return False

    persist(record, config.output)
    logger.info(f'Wrote version to {config.output}')
    return True


def main(argv=None) -> int:
    """Main entry point for the application."""
    setup_logging(console=console)
    args = parse_arguments(argv)
    if args.log_level:
        setup_logging(args.log_level, console=console)

    config: Optional[Config] = load_config(args)
    if config is None:
        return 1
    setup_logging(config.log_level, console=console)

    try:
        record = determine_version(config)
        write_version(record, config)
    except ScmNotFoundError as e:
        logger.error(f'{e}; pass a version file with --reference when building from a tarball')
        return 1
    except ScmverError as e:
        logger.error(f'Could not determine version: {e}')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
