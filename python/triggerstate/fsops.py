"""Local filesystem implementation of the PathProbe protocol."""

import os


class LocalPathProbe:
    """PathProbe backed by os.path / os.stat."""

    def canonicalize(self, path: str) -> str:
        # strict=True makes a missing target raise instead of returning a guess
        return os.path.realpath(path, strict=True)

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def get_mtime(self, path: str) -> int:
        # floor like time_t, also for pre-epoch stamps
        return os.stat(path).st_mtime_ns // 1_000_000_000

    def ensure_directory(self, path: str, mode: int) -> None:
        os.makedirs(path, mode=mode, exist_ok=True)
