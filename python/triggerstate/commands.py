"""Command dispatcher for the triggerstate CLI.

Routes --command values to tracker operations. Called from __main__.py.
"""

from __future__ import annotations

from .selection import push_paths, select_paths
from .state import StateTracker


def _load_error(tracker: StateTracker) -> dict:
    return {
        "error": "StateLoadError",
        "message": f"Failed to load state file {tracker.status_file}",
    }


def dispatch(command: str, status_file: str | None, args: dict) -> dict:
    """Dispatch a command to the matching tracker operation.

    Args:
        command: Command name (list, check, record, prune, scan)
        status_file: Status file path, or None for the configured default
        args: Extra arguments dict

    Returns:
        JSON-serializable dict result
    """
    with StateTracker(status_file) as tracker:
        if not tracker.load():
            return _load_error(tracker)

        if command == "list":
            entries = [e.to_dict() for e in tracker]
            return {
                "status_file": tracker.status_file,
                "entries": entries,
                "total": len(entries),
            }

        elif command == "check":
            return _check(tracker, args.get("paths", []), args.get("force", False))

        elif command == "record":
            paths = args.get("paths", [])
            failed = push_paths(tracker, paths)
            return {
                "recorded": [p for p in paths if p not in failed],
                "failed": failed,
                "written": tracker.write(),
            }

        elif command == "prune":
            before = len(tracker)
            written = tracker.write()
            tracker.load()
            return {"before": before, "after": len(tracker), "written": written}

        elif command == "scan":
            paths = select_paths(
                args.get("root", "."),
                include=args.get("include", ["*"]),
                exclude=args.get("exclude", []),
            )
            result = _check(tracker, paths, args.get("force", False))
            result["root"] = args.get("root", ".")
            if args.get("record", False) and result["needs_update"]:
                result["failed"] = push_paths(tracker, result["stale"])
                result["written"] = tracker.write()
            return result

        else:
            return {"error": "UnknownCommand", "message": f"Unknown command: {command}"}


def _check(tracker: StateTracker, paths: list[str], force: bool) -> dict:
    stale = []
    fresh = []
    for path in paths:
        if tracker.needs_update(path, force=force):
            stale.append(path)
        else:
            fresh.append(path)
    return {"stale": stale, "fresh": fresh, "needs_update": bool(stale)}
