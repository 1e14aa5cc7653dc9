from __future__ import annotations

import subprocess
from typing import Optional

from proccore.context import ProcContext
from proccore.report import traced
from proccore.tools import require_tool, tool_version

KISMET = "kismet"
BASE_ARGS = ["--no-ncurses"]
SHUTDOWN_SIGNAL = "TERM"


class KismetDaemon:
    """Handle on the external wireless-survey daemon.

    Launching returns immediately; the daemon outlives this process. Stopping is
    a signal sent by process name, not to any child we hold.
    """

    def __init__(self, ctx: ProcContext, binary: str = KISMET):
        self.ctx = ctx
        self.binary = binary

    def argv(self, capture_args: str = "") -> list[str]:
        return [self.binary, *BASE_ARGS, *capture_args.split()]

    def version(self) -> str:
        return tool_version([self.binary, "--version"])

    def launch(self, capture_args: str = "") -> subprocess.Popen:
        require_tool(self.binary)
        if not capture_args.strip():
            self.ctx.reporter.warning("No capture sources resolved; starting kismet without capturing on an interface")
        cmd = self.argv(capture_args)
        self.ctx.reporter.information(f"Launching: {' '.join(cmd)}")
        return subprocess.Popen(cmd, stdin=subprocess.DEVNULL, start_new_session=True)

    def shutdown(self) -> bool:
        """Ask every running daemon to exit gracefully; does not wait for it."""
        cmd = ["pkill", "--signal", SHUTDOWN_SIGNAL, "--exact", self.binary]
        require_tool("pkill")
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode == 1:
            self.ctx.reporter.warning(f"No running {self.binary} process to stop")
            return False
        if result.returncode != 0:
            self.ctx.reporter.warning(f"pkill failed ({result.returncode}): {result.stderr.strip()}")
            return False
        self.ctx.reporter.complete(f"Sent SIG{SHUTDOWN_SIGNAL} to {self.binary}")
        return True


@traced
def capture(ctx: ProcContext, capture_args: str, daemon: Optional[KismetDaemon] = None) -> subprocess.Popen:
    return (daemon or KismetDaemon(ctx)).launch(capture_args)


@traced
def shutdown(ctx: ProcContext, daemon: Optional[KismetDaemon] = None) -> bool:
    return (daemon or KismetDaemon(ctx)).shutdown()
