"""
NAME
    kismetproc  Common Kismet use cases.

SYNOPSIS
    kismetproc help [term]
    kismetproc info
    kismetproc cap [hint...]
    kismetproc stream
    kismetproc stop

DESCRIPTION
    Launch and stop the kismet wireless-survey daemon, resolving short interface
    hints into capture sources, and record its live packet stream into
    fixed-duration pcapng segments.

    Subcommands:

    help  (base subcommand) Display help message, supports single term filtering.

    ls, list  (base subcommand) Display non-base subcommands.

    manual  (base subcommand) Display this manual.

    info, version  (base subcommand) Display version information.

    cap  Start kismet in the background. Each hint found in the hint map becomes
         "-c <device><suffix>"; any other argument is passed to kismet verbatim.

    stream  Fetch the live pcapng stream from a running kismet and segment it with
            tshark. Runs until kismet stops or Ctrl+C.

    stop  Ask running kismet processes to exit gracefully (SIGTERM).

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
    - KISMET_HINT_MAP   : Hint map JSON, defaults to ~/.config/kismetproc/hints.json
    - KISMET_HOST       : Defaults to localhost:2501
    - KISMET_STREAM_PATH: Defaults to /pcap/all_packets.pcapng
    - KISMET_HTTPD_CONF : Credentials file, defaults to ~/.kismet/kismet_httpd.conf
    - KISMET_SEGMENT_SEC: Segment length in seconds, defaults to 3600
    - KISMET_SEGMENT_PREFIX / KISMET_OUTPUT_DIR : Segment file naming, defaults kismet / cwd

EXIT STATUS
    0  : (normal) On success
    1+ : ERROR
    2  : ERROR: Invalid usage

DEPENDENCIES
    kismet(1), tshark(1), pkill(1)
"""

from __future__ import annotations

from typing import Optional

from proccore.cleanup import EXIT_OK
from proccore.context import ProcContext
from proccore.dispatch import Dispatcher, main as run_main
from proccore.table import Command

from .config import load_settings
from .daemon import KismetDaemon, capture, shutdown
from .hints import resolve_capture_args
from .stream import start_stream_capture


def cmd_cap(ctx: ProcContext, args: list[str]) -> int:
    capture_args = resolve_capture_args(ctx, args)
    proc = capture(ctx, capture_args)
    ctx.reporter.complete(f"kismet started (pid {proc.pid})")
    return EXIT_OK


def cmd_stream(ctx: ProcContext, args: list[str]) -> int:
    pipeline = start_stream_capture(ctx, ctx.settings)
    try:
        return pipeline.wait()
    except KeyboardInterrupt:
        ctx.reporter.information("Interrupted, stopping stream")
        return EXIT_OK
    finally:
        if pipeline.running:
            pipeline.cancel()


def cmd_stop(ctx: ProcContext, args: list[str]) -> int:
    shutdown(ctx)
    return EXIT_OK


COMMANDS = [
    Command("cap", cmd_cap, "Capture based on interface hints, unknown hints are passed to kismet verbatim."),
    Command("stream", cmd_stream, "Record the live kismet packet stream into time-segmented pcapng files."),
    Command("stop", cmd_stop, "Gracefully stop running kismet processes."),
]


def build_dispatcher() -> Dispatcher:
    return Dispatcher(
        "kismetproc",
        COMMANDS,
        manual_text=__doc__,
        settings_loader=load_settings,
        tool_info=lambda ctx: KismetDaemon(ctx).version(),
    )


def main(argv: Optional[list[str]] = None):
    run_main(build_dispatcher(), argv)


if __name__ == "__main__":
    main()
