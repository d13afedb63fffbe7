"""
Version extraction from git, bazaar and mercurial working trees.

Each extractor assumes the process is already inside the SCM root, runs the
backend's describe-style command(s) and tokenizes the output into a
VersionRecord. Parsing is split from running so the grammars can be
exercised without the tools installed.
"""

from typing import Callable, Dict, Tuple

from loguru import logger

from .errors import BackendProtocolError
from .models import ScmKind, VersionRecord
from .process import capture, read_bounded, read_last_line
from .utils import parse_decimal, parse_hex

GIT_DESCRIBE = ('git', 'describe', '--tags', '--match=v[0-9]*', '--abbrev=8', '--dirty')
HG_LOG = ('hg', 'log', '--rev', '.', '--template', '{latesttag}\t{latesttagdistance}\t{node|short}\n')
BZR_REVNO = ('bzr', 'revno')
BZR_TAGS = ('bzr', 'tags', '--sort=time')


def _first_line(output: str) -> str:
    return output.split('\n', 1)[0].rstrip('\r')


def _check_exit(cmdline: Tuple[str, ...], rc: int) -> None:
    if rc != 0:
        raise BackendProtocolError(f"{' '.join(cmdline[:2])} exited with status {rc}")


def parse_git_describe(line: str, record: VersionRecord) -> VersionRecord:
    """
    Parse ``git describe`` output of the form vTAG[-DIST-gHASH][-dirty].

    Args:
        line: First line of the describe output
        record: Record to populate

    Returns:
        VersionRecord: The populated record

    Raises:
        BackendProtocolError: If the line is not a v-tag
    """
    if not line or not (line[0] in 'vV' or line[0].isdigit()):
        raise BackendProtocolError(f"git describe did not return a v-tag: {line!r}")
    if line[0] in 'vV':
        line = line[1:]

    fields = line.split('-')
    if len(fields) > 1 and fields[-1] == 'dirty':
        record.dirty = True
        fields.pop()

    record.vtag = fields[0]
    if len(fields) < 2:
        return record

    record.dist, _ = parse_decimal(fields[1])
    if len(fields) > 2 and fields[2].startswith('g'):
        record.rvsn, _ = parse_hex(fields[2], 1)
    return record


def parse_hg_log(line: str, record: VersionRecord) -> VersionRecord:
    """
    Parse the TAG<tab>DISTANCE<tab>NODE line of our ``hg log`` template.

    Raises:
        BackendProtocolError: If the latest tag is not a v-tag or the
            distance field is missing
    """
    if not line.startswith('v'):
        raise BackendProtocolError(f"hg latest tag is not a v-tag: {line!r}")

    fields = line[1:].split('\t', 2)
    record.vtag = fields[0]
    if len(fields) < 2:
        raise BackendProtocolError(f"hg log output lacks a distance field: {line!r}")

    record.dist, _ = parse_decimal(fields[1])
    if len(fields) > 2:
        record.rvsn, _ = parse_hex(fields[2])
    return record


def parse_bzr_revno(output: str) -> Tuple[int, int]:
    """
    Parse ``bzr revno`` output.

    Returns:
        Tuple of (revno, number of characters the number took up)

    Raises:
        BackendProtocolError: If the output holds no revision number
    """
    revno, end = parse_decimal(output)
    if end == 0:
        raise BackendProtocolError(f"bzr revno returned no revision number: {output!r}")
    return revno, end


def parse_bzr_tags_line(line: str) -> Tuple[str, int]:
    """
    Parse the last line of ``bzr tags --sort=time``.

    Lines look like ``v2.0       42``: the tag, whitespace, and the revno the
    tag points at. A missing or unparseable revno yields 0.

    Returns:
        Tuple of (tag without the v, tag revno)

    Raises:
        BackendProtocolError: If the tag is not a v-tag
    """
    if not line.startswith('v'):
        raise BackendProtocolError(f"bzr latest tag is not a v-tag: {line!r}")
    tag, sep, rest = line[1:].partition(' ')
    if not sep:
        return tag, 0
    tag_revno, _ = parse_decimal(rest)
    return tag, tag_revno


def git_version(record: VersionRecord) -> VersionRecord:
    """Populate a record from ``git describe`` in the current directory."""
    output, rc = capture(GIT_DESCRIBE)
    line = _first_line(output)
    logger.debug(f'git describe: {line!r} (exit {rc})')
    if not line:
        _check_exit(GIT_DESCRIBE, rc)
        raise BackendProtocolError("git describe produced no output")
    parse_git_describe(line, record)
    _check_exit(GIT_DESCRIBE, rc)
    return record


def hg_version(record: VersionRecord) -> VersionRecord:
    """Populate a record from ``hg log`` in the current directory."""
    output, rc = capture(HG_LOG)
    line = _first_line(output)
    logger.debug(f'hg log: {line!r} (exit {rc})')
    if not line:
        _check_exit(HG_LOG, rc)
        raise BackendProtocolError("hg log produced no output")
    parse_hg_log(line, record)
    _check_exit(HG_LOG, rc)
    return record


def bzr_version(record: VersionRecord) -> VersionRecord:
    """
    Populate a record from ``bzr revno`` and ``bzr tags`` in the current directory.

    The revision is the working tree's revno (written in hex like any other
    revision) and the distance is how far that revno is past the newest tag.

    Raises:
        BackendProtocolError: If either command fails, prints nothing usable,
            or the newest tag sits past the working tree's revno
    """
    output, rc = capture(BZR_REVNO)
    logger.debug(f'bzr revno: {output.strip()!r} (exit {rc})')
    _check_exit(BZR_REVNO, rc)
    revno, width = parse_bzr_revno(output)
    record.revision = revno
    record.revision_width = width

    line, rc = capture(BZR_TAGS, reader=read_last_line)
    logger.debug(f'bzr tags (last line): {line!r} (exit {rc})')
    if not line:
        _check_exit(BZR_TAGS, rc)
        raise BackendProtocolError("bzr tags produced no output")
    tag, tag_revno = parse_bzr_tags_line(line)
    _check_exit(BZR_TAGS, rc)
    if tag_revno > revno:
        raise BackendProtocolError(
            f"bzr tag v{tag} is at revno {tag_revno}, past the working tree's revno {revno}"
        )
    record.vtag = tag
    record.dist = revno - tag_revno
    return record


EXTRACTORS: Dict[ScmKind, Callable[[VersionRecord], VersionRecord]] = {
    ScmKind.GIT: git_version,
    ScmKind.BZR: bzr_version,
    ScmKind.HG: hg_version,
}
