"""
Subprocess runner for SCM backend commands.

Spawns a command with its standard output piped back, hands the pipe to the
caller, and reaps the exit status. Calls are strictly sequential; the caller
always blocks on completion before moving on.
"""

import subprocess
from typing import Callable, Optional, Sequence, Tuple

from loguru import logger

from .errors import SpawnError

# Single-read buffer for short, one-line command output
OUTPUT_BUFSIZE = 256

# Sliding window used when only the last line of a long output matters
TAIL_BUFSIZE = 4096

# Exit code reported for children that did not exit normally
ABNORMAL_EXIT = 2


def run(command: str, *args: str) -> subprocess.Popen:
    """
    Spawn a command with its standard output piped back to us.

    Args:
        command: Executable to run (looked up on PATH)
        *args: Arguments passed to the command

    Returns:
        subprocess.Popen: Handle whose ``stdout`` is the read end of the pipe

    Raises:
        SpawnError: If the pipe or the process could not be created
    """
    cmdline = [command, *args]
    logger.debug(f'Executing: {" ".join(cmdline)}')
    try:
        return subprocess.Popen(cmdline, stdout=subprocess.PIPE)
    except (OSError, ValueError) as e:
        raise SpawnError(f"Failed to start {command}: {e}") from e


def finish(proc: subprocess.Popen) -> int:
    """
    Wait for a spawned command and return its exit status.

    The parent's end of the output pipe is closed first so an unread
    remainder cannot keep the child blocked.

    Args:
        proc: Handle returned by run()

    Returns:
        int: Exit status, or ABNORMAL_EXIT if the child was killed by a signal
    """
    if proc.stdout is not None and not proc.stdout.closed:
        proc.stdout.close()
    while True:
        try:
            rc = proc.wait()
            break
        except InterruptedError:
            continue
    if rc < 0:
        logger.debug(f'{proc.args[0]} terminated by signal {-rc}')
        return ABNORMAL_EXIT
    return rc


def capture(cmdline: Sequence[str], reader: Optional[Callable[[subprocess.Popen], str]] = None) -> Tuple[str, int]:
    """
    Run a command, read its output with ``reader`` and reap it.

    The pipe is closed and the child waited for on every exit path,
    including when the reader raises.

    Args:
        cmdline: Command and arguments
        reader: Function consuming the handle's output (default read_bounded)

    Returns:
        Tuple of (output text, exit status)
    """
    reader = reader or read_bounded
    proc = run(*cmdline)
    try:
        output = reader(proc)
    finally:
        rc = finish(proc)
    return output, rc


def read_bounded(proc: subprocess.Popen, size: int = OUTPUT_BUFSIZE) -> str:
    """
    Read at most ``size`` bytes of a command's output.

    Returns:
        str: Decoded output, empty if the command printed nothing
    """
    data = proc.stdout.read(size)
    return data.decode('utf-8', errors='replace')


def read_last_line(proc: subprocess.Popen, chunk_size: int = TAIL_BUFSIZE) -> str:
    """
    Stream a command's whole output, keeping only its last non-empty line.

    Output is consumed in chunks of ``chunk_size`` bytes; everything before
    the final complete line is discarded as it goes, so memory use stays
    bounded however much the command prints. A partial line longer than the
    window is cut to the window size.

    Returns:
        str: Last non-empty line without its terminator, or an empty string
    """
    last = b''
    tail = b''
    while True:
        chunk = proc.stdout.read(chunk_size)
        if not chunk:
            break
        data = tail + chunk
        nl = data.rfind(b'\n')
        if nl < 0:
            tail = data[:chunk_size]
            continue
        lines = data[:nl].split(b'\n')
        for line in reversed(lines):
            if line.strip():
                last = line[:chunk_size]
                break
        tail = data[nl + 1:][:chunk_size]
    if tail.strip():
        last = tail
    return last.rstrip(b'\r').decode('utf-8', errors='replace')
