"""Columnmark CLI entry point.

Allows running via `python -m columnmark` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field, replace
from typing import Optional

from .version import get_version_string

USAGE = """\
usage: columnmark [options] FILE...

Show FILE with text past the column limit highlighted.

options:
  -l, --limit N     column limit (default: saved setting, else 80)
  --no-comments     do not flag overflow that starts inside a comment
  --report          print name:line:column diagnostics instead; exit 1 on overflow
  --force           highlight prose files too
  --remember        save --limit/--no-comments for each FILE
  --debug           log debug messages to stderr
  -V, --version     print version and exit
  -h, --help        print this help and exit
"""


class UsageError(Exception):
    pass


@dataclass
class CliOptions:
    files: list[str] = field(default_factory=list)
    limit: Optional[str] = None
    include_comments: Optional[bool] = None
    report: bool = False
    force: bool = False
    remember: bool = False
    debug: bool = False
    version: bool = False
    help: bool = False


def parse_args(args: list[str]) -> CliOptions:
    # Very small arg parser; flags may appear anywhere
    options = CliOptions()
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("-V", "--version"):
            options.version = True
        elif arg in ("-h", "--help"):
            options.help = True
        elif arg in ("-l", "--limit"):
            if i + 1 >= len(args):
                raise UsageError(f"{arg} needs a value")
            i += 1
            options.limit = args[i]
        elif arg.startswith("--limit="):
            options.limit = arg.split("=", 1)[1]
        elif arg == "--no-comments":
            options.include_comments = False
        elif arg == "--report":
            options.report = True
        elif arg == "--force":
            options.force = True
        elif arg == "--remember":
            options.remember = True
        elif arg == "--debug":
            options.debug = True
        elif arg == "--":
            options.files.extend(args[i + 1:])
            break
        elif arg.startswith("-") and arg != "-":
            raise UsageError(f"unknown option {arg}")
        else:
            options.files.append(arg)
        i += 1
    return options


def run(options: CliOptions, stdout=None, stderr=None) -> int:
    """Process the files named in `options`; return the exit status."""
    # Lazy imports keep --version free of pygments/blessed start-up cost
    from .errors import InvalidLimitError
    from .markers import MarkerSet
    from .mode import GlobalOverflowMode, ModeController
    from .model import Document
    from .policy import validate_limit
    from .settings_persistence import get_persistence
    from .view import TerminalOverflowView, report_lines
    from .workspace import Workspace

    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    limit = None
    if options.limit is not None:
        try:
            limit = validate_limit(options.limit)
        except InvalidLimitError as e:
            print(f"columnmark: {e}", file=stderr)
            return 2

    persistence = get_persistence()
    workspace = Workspace()
    global_mode = GlobalOverflowMode(workspace)
    global_mode.enable()
    view = TerminalOverflowView()
    status = 0

    for path in options.files:
        settings = persistence.load_overflow_settings(path)
        if limit is not None:
            settings = settings.with_limit(limit)
        if options.include_comments is not None:
            settings = replace(settings, include_comments=options.include_comments)
        if options.remember:
            to_save = {}
            if limit is not None:
                to_save["column_limit"] = limit
            if options.include_comments is not None:
                to_save["include_comments"] = options.include_comments
            if to_save and not persistence.save_settings(path, to_save):
                print(f"columnmark: could not save settings for {path}", file=stderr)

        try:
            document = Document.from_file(path)
        except (OSError, UnicodeDecodeError) as e:
            print(f"columnmark: {path}: {e}", file=stderr)
            status = 2
            continue
        # Create the controller first so the open hook picks up these settings
        controller = ModeController.for_document(document, settings)
        workspace.add_document(document)
        if options.force and not controller.enabled:
            controller.enable()

        marker_set: MarkerSet = controller.marker_set
        if options.report:
            lines = report_lines(document, marker_set)
            for line in lines:
                print(line, file=stdout)
            if lines and status == 0:
                status = 1
        else:
            view.default_style = settings.highlight_style
            view.draw(document, marker_set, stream=stdout)
    return status


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    try:
        options = parse_args(args)
    except UsageError as e:
        print(f"columnmark: {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr, end="")
        return 2
    if options.version:
        print(get_version_string())
        return 0
    if options.help:
        print(USAGE, end="")
        return 0
    if not options.files:
        print(USAGE, file=sys.stderr, end="")
        return 2
    if options.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    return run(options)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
