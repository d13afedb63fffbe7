"""
Normalized version strings.

The normalized form, and the only one written back out, is::

    v<tag>[-<dist>-<g|b|h><hex revision>][-dirty]

On input the embedded-marker form some build pipelines emit is accepted too::

    v<tag>{.git|.bzr|.hg}<dist>[.<hex revision>][.dirty]
"""

from loguru import logger

from .errors import VersionParseError
from .models import ScmKind, VersionRecord
from .utils import find_substring, parse_decimal, parse_hex

# Embedded SCM markers, searched in this order
ALT_MARKERS = (
    ('.git', ScmKind.GIT),
    ('.bzr', ScmKind.BZR),
    ('.hg', ScmKind.HG),
)

DIRTY_FLAG = 'dirty'


def parse_version(text: str) -> VersionRecord:
    """
    Decode a version string into a fresh VersionRecord.

    Missing optional parts (distance, revision, dirty flag) are left at
    zero. When an embedded SCM marker is present it decides where the tag
    ends, even if a dash appears earlier.

    A dirty flag directly after the distance is read as a revision:
    ``v1.2.git4.dirty`` has revision 0xd and is not dirty, since the
    leading d is a hex digit. Write ``v1.2.git4.0.dirty`` instead.

    Args:
        text: Version string, without line terminator

    Returns:
        VersionRecord: The decoded record

    Raises:
        VersionParseError: If the string does not start with v, V or a digit,
            or a dotted suffix appears without an SCM marker
    """
    record = VersionRecord()
    end = len(text)

    if not text:
        raise VersionParseError("Empty version string")
    if text[0] in 'vV':
        pos = 1
    elif '0' <= text[0] <= '9':
        pos = 0
    else:
        raise VersionParseError(f"Version string must start with a v-tag: {text!r}")

    eov = text.find('-', pos)
    if eov < 0:
        eov = end
        dist_pos = None
    else:
        dist_pos = eov + 1

    for marker, kind in ALT_MARKERS:
        idx = find_substring(text, marker, pos, end)
        if idx >= 0:
            record.scm = kind
            eov = idx
            dist_pos = idx + len(marker)
            break

    record.vtag = text[pos:eov]
    if dist_pos is None:
        return record

    record.dist, bp = parse_decimal(text, dist_pos)
    if bp >= end:
        return record
    if text[bp] == '.':
        if not record.scm.is_scm:
            raise VersionParseError(f"Dotted version suffix without SCM marker: {text!r}")
    elif text[bp] != '-':
        return record
    bp += 1

    letter = text[bp] if bp < end else ''
    if letter == 'g':
        record.scm = ScmKind.GIT
        bp += 1
    elif letter == 'h':
        record.scm = ScmKind.HG
        bp += 1
    elif letter == 'b' and not record.scm.is_scm:
        record.scm = ScmKind.BZR
        bp += 1
    elif not record.scm.is_scm:
        # no idea what kind of revision this is
        return record

    record.rvsn, bp = parse_hex(text, bp)

    if (bp < end and text[bp] in '-.'
            and bp + 1 + len(DIRTY_FLAG) <= end
            and text.startswith(DIRTY_FLAG, bp + 1)):
        record.dirty = True

    logger.debug(f'Parsed {text!r} as {record}')
    return record


def _format_revision(record: VersionRecord) -> str:
    return format(record.revision, 'x').rjust(record.revision_width, '0')


def serialize_version(record: VersionRecord) -> str:
    """
    Encode a record in the normalized dash form.

    Distance, revision and dirty flag are only written when they carry
    meaning: nothing follows the tag at distance 0, and the revision (and
    with it the dirty flag) is left out for unknown SCMs or a zero revision.
    """
    out = 'v' + record.vtag
    if not record.dist:
        return out
    out += f'-{record.dist}'
    if not record.rvsn or not record.scm.is_scm:
        return out
    out += f'-{record.scm.abbrev}{_format_revision(record)}'
    if record.dirty:
        out += '-' + DIRTY_FLAG
    return out


def format_dotted(record: VersionRecord) -> str:
    """
    Render a record for display, e.g. ``1.2.3.git4.abc1234.dirty``.

    This is the form configure scripts print; it carries no leading v and is
    not meant for persistence.
    """
    out = record.vtag
    if record.scm.is_scm and record.dist:
        out += f'.{record.scm.long_name}{record.dist}.{_format_revision(record)}'
    if record.dirty:
        out += '.' + DIRTY_FLAG
    return out


def _tag_key(record: VersionRecord) -> bytes:
    return record.vtag.encode('utf-8')


def compare_versions(a: VersionRecord, b: VersionRecord) -> int:
    """
    Order two records crudely, good enough to tell whether a version changed.

    Two records that are both exactly at a tag compare by tag bytes alone.
    Otherwise every field counts, in the order scm, tag, distance, revision,
    dirty, so a dirty tree sorts after the same clean one.

    Returns:
        int: -1, 0 or 1
    """
    if a.dist == 0 and b.dist == 0:
        ka, kb = _tag_key(a), _tag_key(b)
    else:
        ka = (int(a.scm), _tag_key(a), a.dist, a.rvsn, a.dirty)
        kb = (int(b.scm), _tag_key(b), b.dist, b.rvsn, b.dirty)
    return (ka > kb) - (ka < kb)
