"""Select tracked paths under a directory tree.

Trigger hooks usually guard whole trees (font directories, icon themes,
module directories) rather than single files. Patterns use gitignore syntax
and are matched against the path relative to the root.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

import pathspec

from .state import StateTracker

logger = logging.getLogger(__name__)


def compile_patterns(patterns: Iterable[str]) -> pathspec.GitIgnoreSpec:
    """Compile gitignore-style patterns, dropping blanks and comments."""
    lines = [
        p.strip() for p in patterns
        if p.strip() and not p.strip().startswith("#")
    ]
    return pathspec.GitIgnoreSpec.from_lines(lines)


def select_paths(
    root: str,
    include: Iterable[str],
    exclude: Iterable[str] = (),
) -> list[str]:
    """Return sorted absolute file paths under root matching the patterns.

    A file is selected when its root-relative path matches ``include`` and
    does not match ``exclude``. Directories that cannot be listed are
    skipped.
    """
    root_path = os.path.abspath(root)
    include_spec = compile_patterns(include)
    exclude_spec = compile_patterns(exclude)

    def _on_error(e: OSError) -> None:
        logger.warning(
            "selection.walk_error",
            extra={
                "root": root_path,
                "path": e.filename,
                "error_type": type(e).__name__,
                "error_message": e.strerror or str(e),
            },
        )

    selected: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_on_error):
        dirnames.sort()
        rel_dir = os.path.relpath(dirpath, root_path)
        prefix = "" if rel_dir == "." else rel_dir.replace(os.sep, "/") + "/"
        for name in filenames:
            rel_path = prefix + name
            if not include_spec.match_file(rel_path):
                continue
            if exclude_spec.match_file(rel_path):
                continue
            selected.append(os.path.join(dirpath, name))

    return sorted(selected)


def any_needs_update(
    tracker: StateTracker, paths: Iterable[str], force: bool = False,
) -> bool:
    """True if any of ``paths`` needs its hook re-run."""
    return any(tracker.needs_update(p, force=force) for p in paths)


def push_paths(tracker: StateTracker, paths: Iterable[str]) -> list[str]:
    """Record every path; return the ones that could not be recorded."""
    return [p for p in paths if not tracker.push_path(p)]
