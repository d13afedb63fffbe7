"""
Public entry points for scmver.

Resolves a version either live from the SCM managing a tree, or from a
persisted version record, and writes records back out.
"""

import sys
from contextlib import ExitStack
from typing import Optional

from loguru import logger

from .backends import EXTRACTORS
from .codec import parse_version, serialize_version
from .errors import DetectionError, ScmNotFoundError, VersionIOError, VersionParseError
from .locator import find_scm
from .models import ScmKind, VersionRecord
from .utils import working_directory

# Longest record line we read back
RECORD_BUFSIZE = 256

STDIO_PATH = '-'


def resolve_live(path: Optional[str] = None) -> VersionRecord:
    """
    Determine the version of the tree containing ``path`` from its SCM.

    The process changes into the SCM root while the backend runs and is
    always returned to its original working directory afterwards.

    Args:
        path: File or directory inside the tree, defaults to the current directory

    Returns:
        VersionRecord: Freshly populated record

    Raises:
        ScmNotFoundError: No SCM root above ``path`` (carries a tarball record)
        DetectionError: The root walk or the directory change failed
        SpawnError: The backend command could not be started
        BackendProtocolError: The backend command failed or its output was unusable
        WorkingDirectoryError: The original working directory could not be restored
    """
    record = VersionRecord()
    kind, root = find_scm(path)
    record.scm = kind

    if kind == ScmKind.ERROR:
        raise DetectionError(f"Could not inspect {path or '.'} for SCM directories")
    if not kind.is_scm:
        raise ScmNotFoundError(f"No SCM directory found at or above {path or '.'}", record=record)

    logger.debug(f'Found {kind.long_name} repository at {root}')
    with ExitStack() as stack:
        try:
            stack.enter_context(working_directory(root))
        except OSError as e:
            raise DetectionError(f"Could not change into {root}: {e}") from e
        EXTRACTORS[kind](record)
    return record


def _read_record_line(stream) -> str:
    data = stream.read(RECORD_BUFSIZE)
    return data.split('\n', 1)[0].rstrip('\r')


def resolve_from_record(source: str) -> VersionRecord:
    """
    Read a version record from a file, or from stdin when ``source`` is ``-``.

    Only the first line counts, and only its first RECORD_BUFSIZE characters.

    Raises:
        VersionIOError: The source could not be opened or read
        VersionParseError: The source was empty or held no version string
    """
    try:
        if source == STDIO_PATH:
            line = _read_record_line(sys.stdin)
        else:
            with open(source, 'r', encoding='utf-8') as f:
                line = _read_record_line(f)
    except (OSError, UnicodeDecodeError) as e:
        raise VersionIOError(f"Could not read version from {source}: {e}") from e

    if not line:
        raise VersionParseError(f"No version found in {source}")
    logger.debug(f'Read version {line!r} from {source}')
    return parse_version(line)


def persist(record: VersionRecord, destination: str) -> None:
    """
    Write a record as a normalized version line to a file, or stdout for ``-``.

    Files are created or truncated.

    Raises:
        VersionIOError: The destination could not be opened or written
    """
    line = serialize_version(record) + '\n'
    try:
        if destination == STDIO_PATH:
            sys.stdout.write(line)
            sys.stdout.flush()
        else:
            with open(destination, 'w', encoding='utf-8') as f:
                f.write(line)
    except OSError as e:
        raise VersionIOError(f"Could not write version to {destination}: {e}") from e
    logger.debug(f'Wrote version {line.strip()!r} to {destination}')
