# src/taskwiki/cli.py

"""
Command-line interface for taskwiki.

Install as Taskwarrior hooks, e.g.:

    ~/.task/hooks/on-add.taskwiki     ->  exec taskwiki add "$@"
    ~/.task/hooks/on-modify.taskwiki  ->  exec taskwiki modify "$@"

Hook protocol:
- add reads one task JSON line from stdin, modify reads two (original, modified),
- the resulting task is printed as one JSON line, followed by feedback,
- a non-zero exit code rejects the change; the printed text is shown to the user.

This module only does I/O; decisions are made in engine.hooks.
"""

import argparse
import logging
import sys
from typing import TextIO

from taskwiki.config import Config
from taskwiki.engine.codec import DecodeError, EncodeError, decode_task, encode_task
from taskwiki.engine.hooks import Feedback, Hooks
from taskwiki.engine.model import Task
from taskwiki.logging_setup import setup_logging


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskwiki",
        description="Taskwarrior hooks keeping notes files in sync with tagged tasks",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging to stderr",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # subcommand copy of --debug must not reset a top-level `--debug add`
    debug = argparse.ArgumentParser(add_help=False)
    debug.add_argument(
        "-d",
        "--debug",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable debug logging to stderr",
    )

    p_add = sub.add_parser(
        "add",
        parents=[debug],
        help="Called by Taskwarrior's on-add hook",
    )
    p_add.set_defaults(func=cmd_add)

    p_modify = sub.add_parser(
        "modify",
        parents=[debug],
        help="Called by Taskwarrior's on-modify hook",
    )
    p_modify.set_defaults(func=cmd_modify)

    return parser


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------

def cmd_add(args: argparse.Namespace, hooks: Hooks) -> int:
    try:
        task = _read_task(sys.stdin)
        task, feedback = hooks.on_add(task)
        _emit(task, feedback)
    except (DecodeError, EncodeError, OSError) as e:
        return _fail(e)

    return 0


def cmd_modify(args: argparse.Namespace, hooks: Hooks) -> int:
    try:
        original = _read_task(sys.stdin)
        modified = _read_task(sys.stdin)
        task, feedback = hooks.on_modify(original, modified)
        _emit(task, feedback)
    except (DecodeError, EncodeError, OSError) as e:
        return _fail(e)

    return 0


# ---------------------------------------------------------------------
# I/O helpers
# ---------------------------------------------------------------------

def _read_task(stream: TextIO) -> Task:
    line = stream.readline()
    if not line.strip():
        raise DecodeError("Expected a task on stdin")
    return decode_task(line.strip())


def _emit(task: Task, feedback: Feedback) -> None:
    out = encode_task(task)
    print(out)
    if feedback:
        print(feedback)


def _fail(e: Exception) -> int:
    logger.error("Hook failed: %s", e)
    print(f"Error: {e}")
    return 1


# ---------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    # Taskwarrior appends api:, args:, command:, rc:, data:, version: arguments.
    args, extra = parser.parse_known_args(argv)

    try:
        config = Config.from_env()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    setup_logging(
        level=logging.DEBUG if args.debug else config.log_level,
        log_file=config.log_file,
    )
    if extra:
        logger.debug("Ignoring hook arguments: %s", extra)

    return args.func(args, Hooks(config))


if __name__ == "__main__":
    raise SystemExit(main())
