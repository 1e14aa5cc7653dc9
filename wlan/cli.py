"""
NAME
    tsharkproc  Process PCAPs using TShark.

SYNOPSIS
    tsharkproc help [term]
    tsharkproc wps-csv <pcap>
    tsharkproc wps-csv-bulk [directory]

DESCRIPTION
    Extract Wi-Fi Protected Setup (WPS) device details from 802.11 captures.
    Each capture <name>.pcapng produces <name>-wps_fields.csv next to it: a header
    row followed by the sorted, de-duplicated rows that carry at least one value.

    Subcommands:

    help  (base subcommand) Display help message, supports single term filtering.

    ls, list  (base subcommand) Display non-base subcommands.

    manual  (base subcommand) Display this manual.

    info, version  (base subcommand) Display version information.

    wps-csv  Extract select WPS fields from one capture.

    wps-csv-bulk  Recursively, from the current directory or the given one, extract
                  WPS fields from every *.pcap?? capture. A capture that fails is
                  reported as a warning and skipped.

EXPERT
    The following environment variables (or .env / .env.local entries) affect execution:

    - reportError       : Defaults to "echo", command used to report error messages
    - reportWarning     : Defaults to "echo", command used to report warning messages
    - reportCaution     : Defaults to ":" (discard), command used to report caution messages
    - reportInformation : Defaults to ":", command used to report information and completion messages
    - reportTelemetry   : Defaults to ":", command used to report telemetry trace events
    - reportDebug       : Defaults to ":", command used to report debug trace events
    - REPORT_TRACE_FILE : Optional JSONL file receiving every trace event
    - TMPDIR            : Defaults to /tmp, location of transient files

EXIT STATUS
    0  : (normal) On success
    1+ : ERROR
    2  : ERROR: Invalid usage

DEPENDENCIES
    tshark(1)
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from proccore.cleanup import EXIT_OK, EXIT_USAGE, exit_error
from proccore.context import ProcContext
from proccore.dispatch import Dispatcher, main as run_main
from proccore.table import Command
from proccore.tools import tool_version

from .wps import bulk_extract_wps, extract_wps_from_pcap


def cmd_wps_csv(ctx: ProcContext, args: list[str]) -> int:
    if not args:
        exit_error(ctx, "wps-csv needs a capture file", EXIT_USAGE)
    extract_wps_from_pcap(ctx, Path(args[0]))
    return EXIT_OK


def cmd_wps_csv_bulk(ctx: ProcContext, args: list[str]) -> int:
    start = Path(args[0]) if args else Path.cwd()
    bulk_extract_wps(ctx, start)
    return EXIT_OK


COMMANDS = [
    Command("wps-csv", cmd_wps_csv, "Extract select WPS fields from <pcap>."),
    Command("wps-csv-bulk", cmd_wps_csv_bulk, "Recursively, from cwd or [directory], bulk extract select WPS fields from PCAPs."),
]


def build_dispatcher() -> Dispatcher:
    return Dispatcher(
        "tsharkproc",
        COMMANDS,
        manual_text=__doc__,
        tool_info=lambda ctx: tool_version(["tshark", "--version"]).partition("\n")[0],
    )


def main(argv: Optional[list[str]] = None):
    run_main(build_dispatcher(), argv)


if __name__ == "__main__":
    main()
