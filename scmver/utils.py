"""
Utility functions for scmver.

Contains the small text primitives shared by the backend parsers and the
version codec, plus the working-directory helper used by live detection.
"""

import os
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from .errors import WorkingDirectoryError

# Number of hex digits that contribute to a parsed revision.
# The digit count is packed into the low bits, so it has to stay below 8.
HEX_DIGITS_MAX = 7

_HEX_VALUES = {c: int(c, 16) for c in '0123456789abcdefABCDEF'}


def bounded_copy(src: str, size: int) -> Tuple[str, int]:
    """
    Copy a string into a destination of fixed capacity.

    The capacity includes room for a terminator, so at most ``size - 1``
    characters survive. Overlong input is truncated, never rejected.

    Args:
        src: Source text
        size: Destination capacity (terminator included)

    Returns:
        Tuple of (copied text, number of characters copied)
    """
    if size <= 0:
        return '', 0
    copied = src if len(src) < size else src[:size - 1]
    return copied, len(copied)


def find_substring(haystack: str, needle: str, start: int = 0, end: Optional[int] = None) -> int:
    """
    Find the first occurrence of needle within haystack[start:end].

    Candidates are filtered with a rolling XOR checksum over a window the
    size of the needle; only windows whose checksum matches are compared.

    Args:
        haystack: Text to search
        needle: Pattern to look for; an empty needle matches at ``start``
        start: First index of the search range
        end: End of the search range (exclusive), defaults to len(haystack)

    Returns:
        int: Index of the match in haystack, or -1 if not found
    """
    if end is None or end > len(haystack):
        end = len(haystack)
    if not needle:
        return start

    first = haystack.find(needle[0], start, end)
    if first < 0:
        return -1
    size = len(needle)
    if end - first < size:
        return -1

    nsum = 0
    hsum = 0
    for i in range(size):
        nsum ^= ord(needle[i])
        hsum ^= ord(haystack[first + i])

    cand = first
    while True:
        if hsum == nsum and haystack.startswith(needle, cand):
            return cand
        if cand + size >= end:
            return -1
        hsum ^= ord(haystack[cand])
        hsum ^= ord(haystack[cand + size])
        cand += 1


def parse_hex(text: str, pos: int = 0) -> Tuple[int, int]:
    """
    Permissively parse a hex string, packing the digit count into the result.

    Every hex digit from ``pos`` onwards is consumed, but only the first
    HEX_DIGITS_MAX of them make it into the value and the count. The value
    lives in the upper bits (shifted by 4), the count in the low bits.

    Args:
        text: Text to parse
        pos: Index to start parsing at

    Returns:
        Tuple of (packed value, index after the last hex digit)
    """
    value = 0
    count = 0
    end = len(text)
    while pos < end and text[pos] in _HEX_VALUES:
        if count < HEX_DIGITS_MAX:
            value = (value << 4) | _HEX_VALUES[text[pos]]
            count += 1
        pos += 1
    return (value << 4) | count, pos


def parse_decimal(text: str, pos: int = 0) -> Tuple[int, int]:
    """
    Parse a leading unsigned decimal number.

    Leading whitespace is skipped. If no digits follow, nothing is consumed
    and the value is 0.

    Returns:
        Tuple of (value, index after the last digit or ``pos``)
    """
    i = pos
    end = len(text)
    while i < end and text[i].isspace():
        i += 1
    digits_start = i
    while i < end and '0' <= text[i] <= '9':
        i += 1
    if i == digits_start:
        return 0, pos
    return int(text[digits_start:i]), i


@contextmanager
def working_directory(path: str) -> Iterator[str]:
    """
    Temporarily change the process working directory.

    The previous directory is restored on every exit path. Failing to get
    back is reported as WorkingDirectoryError, and it takes precedence over
    whatever the body raised.

    Args:
        path: Directory to change into

    Yields:
        str: The directory we came from
    """
    previous = os.getcwd()
    os.chdir(path)
    try:
        yield previous
    finally:
        try:
            os.chdir(previous)
        except OSError as e:
            raise WorkingDirectoryError(f"Could not return to {previous}: {e}") from e
