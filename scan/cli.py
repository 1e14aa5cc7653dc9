"""
NAME
    nmapproc  Common nmap use cases.

SYNOPSIS
    nmapproc help [term]
    nmapproc info

DESCRIPTION
    Wrapper around the nmap network scanner.

    Subcommands:

    help  (base subcommand) Display help message, supports single term filtering.

    ls, list  (base subcommand) Display non-base subcommands.

    manual  (base subcommand) Display this manual.

    info, version  (base subcommand) Display config and version information.

EXPERT
    reportError, reportWarning, reportCaution, reportInformation, reportTelemetry,
    reportDebug and TMPDIR behave as for kismetproc and tsharkproc.

EXIT STATUS
    0  : (normal) On success
    1+ : ERROR
    2  : ERROR: Invalid usage

DEPENDENCIES
    nmap(1)
"""

from __future__ import annotations

from typing import Optional

from proccore.dispatch import Dispatcher, main as run_main
from proccore.tools import tool_version


def build_dispatcher() -> Dispatcher:
    return Dispatcher(
        "nmapproc",
        [],
        manual_text=__doc__,
        tool_info=lambda ctx: tool_version(["nmap", "--version"]),
    )


def main(argv: Optional[list[str]] = None):
    run_main(build_dispatcher(), argv)


if __name__ == "__main__":
    main()
