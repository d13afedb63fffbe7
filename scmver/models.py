"""
Data model for scmver.

A VersionRecord is the single entity passed between the backends, the codec
and the public API.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from .utils import bounded_copy

# Capacity of the tag field, terminator included
VTAG_MAX = 16

# Revision widths are stored modulo 8
REVISION_WIDTH_MASK = 0x07


class ScmKind(IntEnum):
    """Kind of source control managing a tree, ordered by genuineness."""
    ERROR = -1
    TARBALL = 0
    GIT = 1
    BZR = 2
    HG = 3

    @property
    def is_scm(self) -> bool:
        """True for real version-control backends."""
        return self > ScmKind.TARBALL

    @property
    def abbrev(self) -> str:
        """One-letter marker used in the normalized version string."""
        return _SCM_ABBREVS.get(self, '')

    @property
    def long_name(self) -> str:
        return _SCM_NAMES.get(self, '')


_SCM_ABBREVS = {
    ScmKind.TARBALL: 't',
    ScmKind.GIT: 'g',
    ScmKind.BZR: 'b',
    ScmKind.HG: 'h',
}

_SCM_NAMES = {
    ScmKind.TARBALL: 'tarball',
    ScmKind.GIT: 'git',
    ScmKind.BZR: 'bzr',
    ScmKind.HG: 'hg',
}


@dataclass
class VersionRecord:
    """
    Version information for one project tree.

    Attributes:
        scm: Where the information came from (TARBALL when unknown)
        vtag: Tag name without the leading v, truncated to VTAG_MAX - 1
        dist: Revisions since vtag was applied, 0 when exactly at the tag
        revision: Numeric value of the short revision
        revision_width: Display width (hex digits) of the revision, modulo 8
        dirty: Working tree had uncommitted changes
    """
    scm: ScmKind = ScmKind.TARBALL
    vtag: str = ''
    dist: int = 0
    revision: int = 0
    revision_width: int = 0
    dirty: bool = False

    def __setattr__(self, name, value):
        if name == 'vtag':
            value, _ = bounded_copy(value, VTAG_MAX)
        elif name == 'revision_width':
            value &= REVISION_WIDTH_MASK
        elif name == 'scm':
            value = ScmKind(value)
        super().__setattr__(name, value)

    @property
    def rvsn(self) -> int:
        """Revision value and width packed into one integer."""
        return (self.revision << 4) | self.revision_width

    @rvsn.setter
    def rvsn(self, packed: int) -> None:
        self.revision, self.revision_width = self.unpack_rvsn(packed)

    @staticmethod
    def unpack_rvsn(packed: int) -> Tuple[int, int]:
        """Split a packed revision into (value, width)."""
        return packed >> 4, packed & REVISION_WIDTH_MASK
