from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .cleanup import ArtifactScope
from .config import ProcConfig, load_config
from .report import Reporter


@dataclass
class ProcContext:
    prog: str
    config: ProcConfig
    reporter: Reporter
    artifacts: ArtifactScope
    settings: Any = None


def make_context(prog: str, environ: Optional[Mapping[str, str]] = None, settings_loader=None) -> ProcContext:
    config = load_config(environ)
    reporter = Reporter.from_settings(config.sinks, prog=prog, trace_file=config.trace_file)
    ctx = ProcContext(prog=prog, config=config, reporter=reporter, artifacts=ArtifactScope(config.tmpdir))
    if settings_loader is not None:
        ctx.settings = settings_loader(config)
    return ctx
