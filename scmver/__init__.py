"""
scmver

Determine a project's release version from the git, bazaar or mercurial
checkout it lives in, or from a stored version record, using one normalized
version string: v<tag>[-<dist>-<g|b|h><rev>][-dirty].
"""

from ._version import __version__
from .api import persist, resolve_from_record, resolve_live
from .codec import compare_versions, format_dotted, parse_version, serialize_version
from .errors import (
    BackendProtocolError,
    DetectionError,
    ScmNotFoundError,
    ScmverError,
    SpawnError,
    VersionIOError,
    VersionParseError,
    WorkingDirectoryError,
)
from .locator import find_scm
from .models import ScmKind, VersionRecord

__description__ = "Determine project versions from git, bzr and hg checkouts"
