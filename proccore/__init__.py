"""Self-describing subcommand framework shared by the capture-tool wrappers.

Provides a declarative command table, help/manual generation from that table,
a six-channel reporting registry with pluggable sinks, and a cleanup guarantee
for transient artifacts on every exit path.
"""

from .cleanup import EXIT_ERROR, EXIT_OK, EXIT_USAGE, ArtifactScope, ProcError, exit_error, with_cleanup
from .config import ProcConfig, load_config
from .context import ProcContext, make_context
from .dispatch import Dispatcher, main
from .report import Channel, Reporter, TraceEvent, traced
from .table import Command, CommandTable

__all__ = [
    "EXIT_OK",
    "EXIT_ERROR",
    "EXIT_USAGE",
    "ArtifactScope",
    "ProcError",
    "exit_error",
    "with_cleanup",
    "ProcConfig",
    "load_config",
    "ProcContext",
    "make_context",
    "Dispatcher",
    "main",
    "Channel",
    "Reporter",
    "TraceEvent",
    "traced",
    "Command",
    "CommandTable",
]
