"""Persistent mtime tracker for trigger hooks.

Records, per canonical path, the modification time seen the last time a
trigger hook ran successfully, so the runner can skip hooks whose inputs have
not changed. The state lives in a flat status file (see status_format).

Typical run:

    with StateTracker() as tracker:
        tracker.load()
        if tracker.needs_update("/usr/share/fonts", force=False):
            run_hook()
            tracker.push_path("/usr/share/fonts")
        tracker.write()

All public operations report failure as a False return value and log the
cause; the caller decides whether that is fatal for the run. The tracker is
not safe for concurrent use and writes are not atomic: a crash mid-write
leaves a truncated status file behind.

needs_update() returns False when the path cannot be canonicalized (for
example it was removed). That suppresses the hook for an unresolvable path;
callers that need to react to deletions must check existence themselves.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator

from .config import STATUS_HEADER, TRACK_DIR_MODE, resolve_status_file
from .fsops import LocalPathProbe
from .protocols import PathProbe, StateEntry
from .status_format import StatusFormatError, format_entry, iter_status_lines

logger = logging.getLogger(__name__)

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _os_error_extra(e: Exception) -> dict:
    return {
        "error_type": type(e).__name__,
        "error_message": getattr(e, "strerror", None) or str(e),
        "errno": getattr(e, "errno", None),
    }


class StateTracker:
    """Index of tracked paths to last-seen mtimes, backed by a status file."""

    def __init__(
        self,
        status_file: str | None = None,
        probe: PathProbe | None = None,
    ):
        self._status_file = resolve_status_file(status_file)
        self._probe: PathProbe = probe if probe is not None else LocalPathProbe()
        # Insertion ordered; iteration walks it newest-first.
        self._entries: dict[str, StateEntry] = {}

    @property
    def status_file(self) -> str:
        return self._status_file

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[StateEntry]:
        return reversed(self._entries.values())

    def __enter__(self) -> StateTracker:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release every entry. The tracker is empty afterwards."""
        self._entries.clear()

    def lookup(self, path: str) -> StateEntry | None:
        """Return the entry for an already-canonical path, or None."""
        return self._entries.get(path)

    def put(self, path: str, mtime: int) -> bool:
        """Insert or update the entry for ``path``.

        An existing entry keeps its identity and position; only its mtime
        changes. A new entry becomes first in iteration order. The path is
        not checked against the filesystem.
        """
        entry = self._entries.get(path)
        if entry is not None:
            entry.mtime = mtime
            return True

        try:
            entry = StateEntry(path=str(path), mtime=int(mtime))
        except MemoryError:
            logger.error("state.put_failed", extra={"path": path})
            return False

        self._entries[entry.path] = entry
        return True

    def push_path(self, path: str) -> bool:
        """Record ``path`` with its current on-disk mtime.

        Fails if the path cannot be canonicalized or stat'ed, so only paths
        that exist at call time can be registered.
        """
        try:
            real = self._probe.canonicalize(path)
            mtime = self._probe.get_mtime(real)
        except (OSError, ValueError) as e:
            # ValueError: embedded NUL in the path
            logger.debug(
                "state.push_failed",
                extra={"path": path, **_os_error_extra(e)},
            )
            return False
        return self.put(real, mtime)

    def needs_update(self, path: str, force: bool = False) -> bool:
        """Decide whether the hook guarded by ``path`` must run again.

        Unknown paths, paths whose mtime cannot be read, and ``force`` all
        report True. Otherwise True only if the recorded mtime is strictly
        older than the current one. An unresolvable path reports False.
        """
        try:
            real = self._probe.canonicalize(path)
        except (OSError, ValueError) as e:
            logger.debug(
                "state.needs_update_unresolvable",
                extra={"path": path, **_os_error_extra(e)},
            )
            return False

        entry = self.lookup(real)
        if entry is None:
            return True

        try:
            current = self._probe.get_mtime(real)
        except OSError:
            return True

        if force:
            return True

        return entry.mtime < current

    def write(self) -> bool:
        """Rewrite the status file from the in-memory entries.

        Entries whose path no longer exists are left out of the file but
        stay in memory. Any I/O error aborts the write; the partially written
        file is left as is.
        """
        directory = os.path.dirname(self._status_file)
        if directory:
            try:
                self._probe.ensure_directory(directory, TRACK_DIR_MODE)
            except OSError as e:
                logger.error(
                    "state.mkdir_failed",
                    extra={"directory": directory, **_os_error_extra(e)},
                )
                return False

        try:
            fh = open(
                self._status_file, "w",
                encoding=_ENCODING, errors=_ERRORS, newline="\n",
            )
        except OSError as e:
            logger.error(
                "state.open_failed",
                extra={"status_file": self._status_file, **_os_error_extra(e)},
            )
            return False

        written = 0
        dropped = 0
        try:
            with fh:
                fh.write(STATUS_HEADER)
                for entry in self:
                    # Entries for deleted files are dropped here
                    if not self._probe.exists(entry.path):
                        dropped += 1
                        continue
                    fh.write(format_entry(entry))
                    written += 1
        except OSError as e:
            logger.error(
                "state.write_failed",
                extra={"status_file": self._status_file, **_os_error_extra(e)},
            )
            return False

        logger.debug(
            "state.written",
            extra={
                "status_file": self._status_file,
                "entries": written,
                "dropped": dropped,
            },
        )
        return True

    def load(self) -> bool:
        """Replace the in-memory entries with the contents of the status file.

        A missing status file is not an error. Lines for paths that no longer
        exist are skipped. Any malformed line makes the whole load fail and
        leaves the tracker empty.
        """
        self._entries.clear()

        try:
            fh = open(
                self._status_file, "r",
                encoding=_ENCODING, errors=_ERRORS, newline="\n",
            )
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error(
                "state.load_failed",
                extra={"status_file": self._status_file, **_os_error_extra(e)},
            )
            return False

        skipped = 0
        try:
            with fh:
                for lineno, entry in iter_status_lines(fh):
                    if not self._probe.exists(entry.path):
                        skipped += 1
                        continue
                    if not self.put(entry.path, entry.mtime):
                        logger.error(
                            "state.load_failed",
                            extra={
                                "status_file": self._status_file,
                                "line_number": lineno,
                                "path": entry.path,
                            },
                        )
                        self._entries.clear()
                        return False
        except StatusFormatError as e:
            logger.error(
                "state.parse_error",
                extra={
                    "status_file": self._status_file,
                    "line_number": e.lineno,
                    "line": e.line,
                    "error_message": str(e),
                },
            )
            self._entries.clear()
            return False
        except OSError as e:
            logger.error(
                "state.load_failed",
                extra={"status_file": self._status_file, **_os_error_extra(e)},
            )
            self._entries.clear()
            return False

        logger.debug(
            "state.loaded",
            extra={
                "status_file": self._status_file,
                "entries": len(self._entries),
                "skipped": skipped,
            },
        )
        return True
