"""Command-line front door for peek.

Parses flags on top of the persisted preferences, resolves the starting
directory, and runs the interactive browser. Fatal conditions surface as a
single ``peek: ...`` line on stderr with exit status 1, after the terminal
has been restored.
"""

from __future__ import annotations

import argparse
import logging
import sys
import termios

from .config import BrowserOptions, load_options
from .errors import PeekError
from .logs import configure_logging
from .navigation import BrowserSession
from .terminal import TerminalSession

logger = logging.getLogger(__name__)

PROG = "peek"
# Shell convention for termination by SIGINT.
INTERRUPTED_STATUS = 130
KEYS_HELP = """\
keys:
   E              Edit selected entry.
   O              Open selected entry.
   X              Execute selected entry.
   Q|Esc          Quit.
   K|Up           Go up a directory.
   J|Down|Enter   Open selected directory.
   H|Left         Move selection left.
   L|Right        Move selection right.
"""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\nTry '{self.prog} -h' for more information.\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        description="Interactive exploration of directories on the command line.",
        epilog=KEYS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("directory", nargs="?", default=None, help="Directory to start in. Defaults to the current directory.")
    parser.add_argument("-a", dest="show_dotfiles", action="store_true", help="Show files starting with . (hidden by default).")
    parser.add_argument("-B", dest="no_color", action="store_true", help="Don't output color.")
    parser.add_argument("-c", dest="clear_on_exit", action="store_true", help="Clear listing on exit.")
    parser.add_argument("-d", dest="show_path_header", action="store_true", help="Print current directory path before listing.")
    parser.add_argument("-F", dest="append_indicators", action="store_true", help="Append ls style indicators to the end of entries.")
    parser.add_argument(
        "-x",
        dest="hex_escape_unprintable",
        action="store_true",
        help="Print unprintable characters as hex. Carriage return would be /0D/.",
    )
    return parser


def options_from_args(args: argparse.Namespace, defaults: BrowserOptions) -> BrowserOptions:
    """Overlay command-line flags on preference defaults; flags only switch on."""
    changes: dict[str, bool] = {}
    for name in ("show_dotfiles", "clear_on_exit", "show_path_header", "append_indicators", "hex_escape_unprintable"):
        if getattr(args, name):
            changes[name] = True
    if args.no_color:
        changes["use_color"] = False
    return defaults.replace(**changes)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and browse the requested directory until quit."""
    args = build_parser().parse_args(argv)
    options = options_from_args(args, load_options())
    try:
        configure_logging(options.log_file)
    except OSError as exc:
        raise SystemExit(f"{PROG}: cannot open log file: {exc.strerror or exc}") from exc

    try:
        terminal = TerminalSession(sys.stdin.fileno(), sys.stdout.fileno())
    except termios.error as exc:
        raise SystemExit(f"{PROG}: stdin is not a terminal") from exc

    try:
        status = BrowserSession(options, terminal, args.directory or ".").run()
    except PeekError as exc:
        logger.error("fatal: %s", exc)
        raise SystemExit(f"{PROG}: {exc}") from exc
    except MemoryError as exc:
        raise SystemExit(f"{PROG}: Out of memory!") from exc
    except KeyboardInterrupt:
        logger.debug("interrupted")
        raise SystemExit(INTERRUPTED_STATUS) from None
    if status:
        raise SystemExit(status)


if __name__ == "__main__":
    main()
