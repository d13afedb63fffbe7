"""
SCM root detection.

Walks from a starting path up through the filesystem looking for the marker
directories of the supported backends.
"""

import os
import stat
from typing import Optional, Tuple

from loguru import logger

from .models import ScmKind

# Marker directories, in the order they are tried at each level
SCM_MARKERS = (
    ('.git', ScmKind.GIT),
    ('.bzr', ScmKind.BZR),
    ('.hg', ScmKind.HG),
)

# Longest path the walk is allowed to build
PATH_MAX = 4096

# Room needed to append the longest marker ("/.git") to a candidate
_MARKER_ROOM = 5


def _parent_dir(path: str) -> Optional[str]:
    """Strip the last component of a path, or None if there is none left."""
    stripped = path.rstrip('/')
    if not stripped:
        return None
    idx = stripped.rfind('/')
    if idx < 0:
        return None
    return stripped[:idx].rstrip('/') or '/'


def _is_dir(path: str) -> bool:
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError:
        return False


def _identity(st: os.stat_result) -> Tuple[int, int]:
    return st.st_dev, st.st_ino


def find_scm(path: Optional[str] = None) -> Tuple[ScmKind, Optional[str]]:
    """
    Locate the SCM root at or above a path.

    Files are replaced by their containing directory. Absolute paths are
    walked by stripping components; relative paths by appending ``/..`` until
    the directory identity stops changing, which happens at the root.

    Args:
        path: Starting file or directory, defaults to the current directory

    Returns:
        Tuple of (kind, root directory). The root is None for
        ScmKind.TARBALL (nothing found) and ScmKind.ERROR (a path could not
        be inspected or grew too long).
    """
    candidate = path or '.'

    # settle on a directory first
    while True:
        try:
            st = os.stat(candidate)
        except OSError as e:
            logger.debug(f'Cannot stat {candidate}: {e}')
            return ScmKind.ERROR, None
        if len(candidate) + _MARKER_ROOM >= PATH_MAX:
            logger.debug(f'Path too long for SCM detection: {candidate[:64]}...')
            return ScmKind.ERROR, None
        if stat.S_ISDIR(st.st_mode):
            break
        candidate = _parent_dir(candidate) or '.'

    while True:
        for marker, kind in SCM_MARKERS:
            probe = os.path.join(candidate, marker)
            logger.debug(f'Trying {probe} ...')
            if _is_dir(probe):
                return kind, candidate

        if not candidate.startswith('/'):
            # going up relatively, stop once .. resolves to the same directory
            try:
                current = _identity(os.stat(candidate))
            except OSError as e:
                logger.debug(f'Cannot stat {candidate}: {e}')
                return ScmKind.ERROR, None
            candidate = candidate + '/..'
            if len(candidate) + _MARKER_ROOM >= PATH_MAX:
                logger.debug(f'Path too long for SCM detection: {candidate[:64]}...')
                return ScmKind.ERROR, None
            try:
                parent = _identity(os.stat(candidate))
            except OSError as e:
                logger.debug(f'Cannot stat {candidate}: {e}')
                return ScmKind.ERROR, None
            if parent == current:
                break
        else:
            parent_dir = _parent_dir(candidate)
            if parent_dir is None:
                break
            candidate = parent_dir

    logger.debug('No SCM directory found, assuming tarball')
    return ScmKind.TARBALL, None
