"""Six-channel diagnostic reporting.

Each channel is bound once, at startup, to a sink built from its setting:

- ``echo``: write ``<prefix> <message>`` to stderr
- ``:`` (or empty, ``none``, ``true``): discard
- anything else: run it as an external command with the prefix and message as arguments

Reporting is fire-and-forget. A failing sink never propagates into the caller.
"""

from __future__ import annotations

import functools
import json
import shlex
import subprocess
import sys
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from .config import REPORT_DEFAULTS

Sink = Callable[[str, str], None]

NOOP_SETTINGS = {"", ":", "none", "true"}


class Channel(Enum):
    ERROR = ("reportError", "[!] ERROR:")
    WARNING = ("reportWarning", "[!] WARNING:")
    CAUTION = ("reportCaution", "[^] CAUTION:")
    INFORMATION = ("reportInformation", "[-] INFO:")
    TELEMETRY = ("reportTelemetry", "[.] TELEMETRY:")
    DEBUG = ("reportDebug", "[.] DEBUG:")

    @property
    def env_key(self) -> str:
        return self.value[0]

    @property
    def prefix(self) -> str:
        return self.value[1]


COMPLETE_PREFIX = "[+] INFO:"


def null_sink(prefix: str, message: str) -> None:
    return None


def echo_sink(prefix: str, message: str) -> None:
    print(prefix, message, file=sys.stderr)


class CommandSink:
    """Hand each report to an external command, e.g. ``logger -t kismetproc``."""

    def __init__(self, command: str):
        self.argv = shlex.split(command)

    def __call__(self, prefix: str, message: str) -> None:
        subprocess.run([*self.argv, prefix, message], stdout=sys.stderr, check=True)

    def __repr__(self) -> str:
        return f"CommandSink({' '.join(self.argv)!r})"


def sink_from_setting(setting: Optional[str]) -> Sink:
    value = (setting or "").strip()
    if value.lower() in NOOP_SETTINGS:
        return null_sink
    if value == "echo":
        return echo_sink
    return CommandSink(value)


@dataclass
class TraceEvent:
    op: str
    phase: str  # enter | return
    args: list[str] = field(default_factory=list)
    ts: float = field(default_factory=time.time)

    def to_json(self, with_args: bool = True) -> str:
        payload = asdict(self)
        if not with_args:
            payload.pop("args")
        return json.dumps(payload, separators=(",", ":"))


class Reporter:
    def __init__(
        self,
        sinks: Optional[Mapping[Channel, Sink]] = None,
        prog: str = "",
        trace_file: Optional[Path] = None,
        keep_events: int = 1000,
    ):
        self.prog = prog
        self.trace_file = trace_file
        self._sinks: dict[Channel, Sink] = {ch: null_sink for ch in Channel}
        self._sinks.update(sinks or {})
        self.events: deque[TraceEvent] = deque(maxlen=keep_events)

    @classmethod
    def from_settings(cls, settings: Mapping[str, str], prog: str = "", trace_file: Optional[Path] = None) -> "Reporter":
        sinks = {ch: sink_from_setting(settings.get(ch.env_key, REPORT_DEFAULTS[ch.env_key])) for ch in Channel}
        return cls(sinks, prog=prog, trace_file=trace_file)

    def sink(self, channel: Channel) -> Sink:
        return self._sinks[channel]

    def _emit(self, channel: Channel, prefix: str, message: str) -> None:
        try:
            self._sinks[channel](prefix, message)
        except Exception as exc:
            # Best effort only: the caller's control flow must not see sink failures
            try:
                print(f"[?] REPORT SINK FAILED ({channel.name}: {exc}):", prefix, message, file=sys.stderr)
            except OSError:
                pass

    def report(self, channel: Channel, message: str) -> None:
        self._emit(channel, channel.prefix, message)

    def error(self, message: str) -> None:
        self.report(Channel.ERROR, message)

    def warning(self, message: str) -> None:
        self.report(Channel.WARNING, message)

    def caution(self, message: str) -> None:
        self.report(Channel.CAUTION, message)

    def information(self, message: str) -> None:
        self.report(Channel.INFORMATION, message)

    def complete(self, message: str) -> None:
        self._emit(Channel.INFORMATION, COMPLETE_PREFIX, message)

    def telemetry(self, message: str) -> None:
        self.report(Channel.TELEMETRY, f"{self.prog}::{message}" if self.prog else message)

    def debug(self, message: str) -> None:
        self.report(Channel.DEBUG, message)

    def trace(self, op: str, phase: str, args: tuple = ()) -> TraceEvent:
        event = TraceEvent(op=op, phase=phase, args=[str(a) for a in args])
        self.events.append(event)
        self.report(Channel.TELEMETRY, event.to_json(with_args=False))
        self.report(Channel.DEBUG, event.to_json())
        if self.trace_file is not None:
            try:
                with self.trace_file.open("ab") as f:
                    f.write(event.to_json().encode("utf-8") + b"\n")
            except OSError as exc:
                self._emit(Channel.WARNING, Channel.WARNING.prefix, f"trace file unavailable: {exc}")
                self.trace_file = None
        return event


def traced(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Emit enter/return trace events around an operation whose first argument is the context."""

    @functools.wraps(fn)
    def wrapper(ctx, *args, **kwargs):
        op = f"{ctx.prog}::{fn.__name__}" if getattr(ctx, "prog", "") else fn.__name__
        call_args = [repr(a) for a in args] + [f"{k}={v!r}" for k, v in kwargs.items()]
        ctx.reporter.trace(op, "enter", tuple(call_args))
        try:
            return fn(ctx, *args, **kwargs)
        finally:
            ctx.reporter.trace(op, "return")

    return wrapper
