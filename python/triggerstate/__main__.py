"""CLI entry point: python3 -m triggerstate

  --command list|check|record|prune|scan   operation to run
  --status-file PATH                       override the status file location
  --args JSON                              command arguments (paths, force, ...)
"""

import argparse
import json
import logging
import sys
import traceback


def main():
    parser = argparse.ArgumentParser(description="Trigger state tracker CLI")
    parser.add_argument("--command", required=True, help="Command to run")
    parser.add_argument("--status-file", help="Status file path")
    parser.add_argument("--args", default="{}", help="JSON-encoded arguments")
    parser.add_argument("--verbose", action="store_true",
                        help="Log debug events to stderr")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            stream=sys.stderr,
            level=logging.DEBUG,
            format="%(levelname)s %(name)s %(message)s",
        )

    try:
        extra_args = json.loads(args.args)
    except json.JSONDecodeError as e:
        _error_exit("InvalidArgs", f"Failed to parse --args JSON: {e}")
    if not isinstance(extra_args, dict):
        _error_exit("InvalidArgs", "--args must be a JSON object")

    try:
        from .commands import dispatch
        result = dispatch(args.command, args.status_file, extra_args)
    except Exception as e:
        _error_exit(type(e).__name__, str(e))

    json.dump(result, sys.stdout)
    sys.stdout.write("\n")
    if "error" in result:
        sys.exit(1)


def _error_exit(error_type: str, message: str):
    """Write structured error to stderr and exit."""
    error = {
        "error": error_type,
        "message": message,
        "traceback": traceback.format_exc(),
    }
    json.dump(error, sys.stderr)
    sys.stderr.write("\n")
    sys.exit(1)


if __name__ == "__main__":
    main()
