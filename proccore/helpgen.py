"""Usage, subcommand listing and manual text derived from the command table.

Entries are sorted lexicographically by their rendered label (``verb | alias``),
which keeps the output stable regardless of declaration order. Entries with an
empty synopsis are routable but not listed.
"""

from __future__ import annotations

import inspect
from typing import Optional

from .table import Command, CommandTable

LABEL_WIDTH = 22


def render_entry(cmd: Command) -> str:
    return f"  {cmd.label.ljust(LABEL_WIDTH)}{cmd.synopsis}"


def _render(header: str, commands: list[Command], term: Optional[str] = None) -> str:
    lines = sorted(render_entry(c) for c in commands if c.synopsis)
    if term:
        needle = term.lower()
        lines = [line for line in lines if needle in line.lower()]
    return "\n".join([header, *lines])


def usage(table: CommandTable, prog: str, term: Optional[str] = None) -> str:
    return _render(f"{prog} Usage:", list(table), term)


def list_subcommands(table: CommandTable, prog: str) -> str:
    return _render(f"{prog} Subcommands:", table.non_base())


def manual(text: Optional[str]) -> str:
    return inspect.cleandoc(text or "").rstrip()
