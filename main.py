from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import Context, ExitRequest, ParseError, visualize

PROMPT = "$ "


def main() -> int:
    args = _parse_args()
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")

    context = Context(path=Path(args.cwd) if args.cwd else None)

    if args.command is not None:
        try:
            return _run_line(context, args.command, debug=args.debug)
        except ExitRequest as request:
            return request.code

    status = 0
    while True:
        try:
            line = input(PROMPT).strip()
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print()
            continue

        if not line:
            continue

        try:
            status = _run_line(context, line, debug=args.debug)
        except ExitRequest as request:
            return request.code
    return status


def _run_line(context: Context, line: str, *, debug: bool = False) -> int:
    engine = context.engine
    if debug:
        try:
            print(visualize(engine.parse(context, line)), file=sys.stderr)
        except ParseError:
            pass

    try:
        return engine.run(context, line)
    except ExitRequest:
        raise
    except Exception as exc:  # noqa: BLE001
        print(f"[execution error] {exc}", file=sys.stderr)
        return 1


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Minimal interactive command interpreter.")
    parser.add_argument(
        "-c",
        dest="command",
        type=str,
        default=None,
        help="Run a single command line and exit with its status.",
    )
    parser.add_argument(
        "--cwd",
        type=str,
        default=None,
        help="Starting working directory (defaults to the current directory).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log engine activity and print the parsed command tree before running it.",
    )
    return parser.parse_args()


if __name__ == "__main__":
    raise SystemExit(main())
