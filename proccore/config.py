from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv


SEMVER_STRING = "0.1.0"

# Environment keys for the six reporting channels and their default sink settings
REPORT_DEFAULTS: dict[str, str] = {
    "reportError": "echo",
    "reportWarning": "echo",
    "reportCaution": ":",
    "reportInformation": ":",
    "reportTelemetry": ":",
    "reportDebug": ":",
}


@dataclass(frozen=True)
class ProcConfig:
    sinks: dict[str, str] = field(default_factory=lambda: dict(REPORT_DEFAULTS))
    tmpdir: Path = Path("/tmp")
    trace_file: Optional[Path] = None
    env: dict[str, str] = field(default_factory=dict)

    def get(self, key: str, default: str = "") -> str:
        value = self.env.get(key)
        return value if value else default


def _environment() -> dict[str, str]:
    # Local env files first, then the system environment; neither overrides what is already set
    load_dotenv(dotenv_path=".env.local", override=False)
    load_dotenv(find_dotenv(usecwd=True), override=False)
    return dict(os.environ)


def load_config(environ: Optional[Mapping[str, str]] = None) -> ProcConfig:
    """Build the process configuration once, at startup.

    When ``environ`` is given it is used as-is and no dotenv files are read.
    """
    env = dict(environ) if environ is not None else _environment()
    sinks = {key: env.get(key) or default for key, default in REPORT_DEFAULTS.items()}
    trace = env.get("REPORT_TRACE_FILE")
    return ProcConfig(
        sinks=sinks,
        tmpdir=Path(env.get("TMPDIR") or "/tmp"),
        trace_file=Path(trace) if trace else None,
        env=env,
    )
