from __future__ import annotations

import sys
from typing import Callable, Iterable, Mapping, Optional

from . import helpgen
from .cleanup import EXIT_ERROR, EXIT_OK, EXIT_USAGE, ProcError, exit_error, install_signal_handlers, with_cleanup
from .config import SEMVER_STRING
from .context import ProcContext, make_context
from .report import traced
from .table import Command, CommandTable


class Dispatcher:
    """Route ``<prog> <verb> [args...]`` to exactly one handler.

    The universal base verbs (help, ls/list, manual, info/version) are added in
    front of the tool's own commands; help output and routing both read the
    resulting table.
    """

    def __init__(
        self,
        prog: str,
        commands: Iterable[Command],
        manual_text: Optional[str] = None,
        version: str = SEMVER_STRING,
        settings_loader=None,
        tool_info: Optional[Callable[[ProcContext], str]] = None,
    ):
        self.prog = prog
        self.manual_text = manual_text
        self.version = version
        self.settings_loader = settings_loader
        self.tool_info = tool_info
        self.table = CommandTable([*self._base_commands(), *commands])

    def _base_commands(self) -> list[Command]:
        return [
            Command("help", self._help, "(base subcommand) Display this help message, supports single term filtering.", is_base=True),
            Command("ls", self._list, "(base subcommand) List non-base subcommands.", aliases=("list",), is_base=True),
            Command("manual", self._manual, "(base subcommand) Display full manual.", is_base=True),
            Command("info", self._info, "(base subcommand) Display configuration and version information.", aliases=("version",), is_base=True),
        ]

    def __repr__(self) -> str:
        return f"Dispatcher({self.prog!r})"

    def usage(self, term: Optional[str] = None) -> str:
        return helpgen.usage(self.table, self.prog, term)

    def list_subcommands(self) -> str:
        return helpgen.list_subcommands(self.table, self.prog)

    def manual(self) -> str:
        return helpgen.manual(self.manual_text)

    def _help(self, ctx: ProcContext, args: list[str]) -> int:
        usage(ctx, self, args[0] if args else None)
        return EXIT_OK

    def _list(self, ctx: ProcContext, args: list[str]) -> int:
        list_subcommands(ctx, self)
        return EXIT_OK

    def _manual(self, ctx: ProcContext, args: list[str]) -> int:
        manual(ctx, self)
        return EXIT_OK

    def _info(self, ctx: ProcContext, args: list[str]) -> int:
        version_info(ctx, self)
        return EXIT_OK

    def run(self, argv: Optional[list[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
        ctx = make_context(self.prog, environ, self.settings_loader)
        try:
            return with_cleanup(ctx, lambda: self._route(ctx, list(argv or [])))
        except SystemExit as e:
            if e.code is None:
                return EXIT_OK
            return e.code if isinstance(e.code, int) else EXIT_ERROR
        except KeyboardInterrupt:
            ctx.reporter.error("Interrupted")
            return 130
        except Exception as e:
            ctx.reporter.error(f"Unhandled failure: {e.__class__.__name__}: {e}")
            return EXIT_ERROR

    def _route(self, ctx: ProcContext, argv: list[str]) -> int:
        try:
            return route(ctx, self, argv)
        except ProcError as e:
            exit_error(ctx, e.message, e.status)


@traced
def route(ctx: ProcContext, dispatcher: Dispatcher, argv: list[str]) -> int:
    verb = argv[0] if argv else ""
    args = argv[1:]
    if not verb.strip():
        usage(ctx, dispatcher)
        return EXIT_OK
    cmd = dispatcher.table.lookup(verb)
    if cmd is None:
        usage(ctx, dispatcher)
        exit_error(ctx, f"Unknown subcommand: {verb}", EXIT_USAGE)
    status = cmd.handler(ctx, args)
    return EXIT_OK if status is None else int(status)


@traced
def usage(ctx: ProcContext, dispatcher: Dispatcher, term: Optional[str] = None) -> None:
    print(dispatcher.usage(term))


@traced
def list_subcommands(ctx: ProcContext, dispatcher: Dispatcher) -> None:
    print(dispatcher.list_subcommands())


@traced
def manual(ctx: ProcContext, dispatcher: Dispatcher) -> None:
    print(dispatcher.manual())


@traced
def version_info(ctx: ProcContext, dispatcher: Dispatcher) -> None:
    print(dispatcher.prog, dispatcher.version)
    if dispatcher.tool_info is not None:
        try:
            print(dispatcher.tool_info(ctx))
        except ProcError as e:
            ctx.reporter.warning(e.message)


def main(dispatcher: Dispatcher, argv: Optional[list[str]] = None) -> None:
    install_signal_handlers()
    raise SystemExit(dispatcher.run(sys.argv[1:] if argv is None else argv))
