"""Data types and collaborator protocols for triggerstate.

Defines the PathProbe protocol that decouples the state tracker from the
filesystem primitives it consumes (canonicalize, exists, stat, mkdir).
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass
class StateEntry:
    """One tracked path and the mtime recorded for it."""
    path: str
    mtime: int

    def to_dict(self) -> dict:
        return {"path": self.path, "mtime": self.mtime}


class PathProbe(Protocol):
    """Protocol for the filesystem primitives the tracker depends on."""

    def canonicalize(self, path: str) -> str:
        """Resolve symlinks and relative segments.

        Raises:
            OSError: if the path cannot be resolved (e.g. does not exist).
        """
        ...

    def exists(self, path: str) -> bool:
        ...

    def get_mtime(self, path: str) -> int:
        """Return the modification time in whole seconds.

        Raises:
            OSError: if the path cannot be stat'ed.
        """
        ...

    def ensure_directory(self, path: str, mode: int) -> None:
        """Create ``path`` if absent. Raises OSError on any other failure."""
        ...
