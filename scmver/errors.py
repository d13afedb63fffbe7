"""
Exception types raised by scmver.

Absent optional fields (distance, revision, dirty) are never errors;
everything below is a hard failure surfaced to the caller once.
"""


class ScmverError(Exception):
    """Base class for all scmver failures."""
    pass


class ScmNotFoundError(ScmverError):
    """
    No SCM root exists above the starting path.

    This is the common "building from a tarball" outcome. The tarball
    record is attached so callers can fall back to it.
    """

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record


class DetectionError(ScmverError):
    """A filesystem call failed or a path grew too long during the root walk."""
    pass


class SpawnError(ScmverError):
    """A backend command could not be started."""
    pass


class BackendProtocolError(ScmverError):
    """
    A backend command failed or produced unusable output.

    Raised on non-zero exit, empty output, or output that fails the
    minimal grammar check (e.g. a tag without the ``v`` prefix).
    """
    pass


class VersionParseError(ScmverError, ValueError):
    """A stored version string could not be decoded."""
    pass


class VersionIOError(ScmverError, OSError):
    """Reading or writing a version record failed."""
    pass


class WorkingDirectoryError(ScmverError):
    """The original working directory could not be restored."""
    pass
