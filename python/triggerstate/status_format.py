"""Line codec for the status file.

Each data line is ``<decimal mtime>:<absolute path>``. Lines starting with
``#`` are comments. Paths are not escaped: the line is split at the first
``:`` so colons inside a path survive, embedded newlines do not.
"""

import re
from collections.abc import Iterable, Iterator

from .protocols import StateEntry

COMMENT_MARKER = "#"
SEPARATOR = ":"

_TIMESTAMP_RE = re.compile(r"-?[0-9]+")
_TIME_MIN = -(2 ** 63)
_TIME_MAX = 2 ** 63 - 1


class StatusFormatError(ValueError):
    """A status file line could not be parsed."""

    def __init__(self, message: str, line: str, lineno: int | None = None):
        super().__init__(message)
        self.line = line
        self.lineno = lineno


def format_entry(entry: StateEntry) -> str:
    return f"{entry.mtime}{SEPARATOR}{entry.path}\n"


def parse_status_line(line: str) -> StateEntry | None:
    """Parse one status file line.

    Returns None for comment lines. An empty line has no separator and is
    rejected like any other malformed line.

    Raises:
        StatusFormatError: missing separator, empty path or bad timestamp.
    """
    line = line.rstrip("\n")
    if line.startswith(COMMENT_MARKER):
        return None

    stamp, sep, path = line.partition(SEPARATOR)
    if not sep:
        raise StatusFormatError("line is missing the ':' separator", line)
    if not path:
        raise StatusFormatError("line is missing the file name", line)
    if not _TIMESTAMP_RE.fullmatch(stamp):
        raise StatusFormatError(f"invalid timestamp {stamp!r}", line)

    try:
        mtime = int(stamp)
    except ValueError as e:
        # digit strings past the interpreter's int conversion limit
        raise StatusFormatError(f"invalid timestamp {stamp!r}", line) from e
    if not _TIME_MIN <= mtime <= _TIME_MAX:
        raise StatusFormatError(f"timestamp out of range {stamp!r}", line)

    return StateEntry(path=path, mtime=mtime)


def iter_status_lines(lines: Iterable[str]) -> Iterator[tuple[int, StateEntry]]:
    """Yield (lineno, entry) for every data line, skipping comments.

    Line numbers are 1-based. A StatusFormatError carries the line number of
    the offending line.
    """
    for lineno, line in enumerate(lines, start=1):
        try:
            entry = parse_status_line(line)
        except StatusFormatError as e:
            e.lineno = lineno
            raise
        if entry is not None:
            yield lineno, entry
