from __future__ import annotations

import os
import signal
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Callable, NoReturn, Optional, TypeVar

from .report import traced

if TYPE_CHECKING:
    from .context import ProcContext

T = TypeVar("T")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


class ProcError(Exception):
    """Operational failure: an external tool failed or a required file is missing."""

    def __init__(self, message: str, status: int = EXIT_ERROR):
        super().__init__(message)
        self.message = message
        self.status = status


class ArtifactScope:
    """Owns the transient files created during one invocation and removes them once."""

    def __init__(self, tmpdir: Path):
        self.tmpdir = Path(tmpdir)
        self._paths: list[Path] = []
        self._closed = False

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    @property
    def closed(self) -> bool:
        return self._closed

    def track(self, path: Path) -> Path:
        path = Path(path)
        self._paths.append(path)
        return path

    def mktemp(self, suffix: str = "", prefix: str = "proc-") -> Path:
        self.tmpdir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=self.tmpdir)
        os.close(fd)
        return self.track(Path(name))

    def mkfifo(self, name: str = "stream.fifo") -> Path:
        self.tmpdir.mkdir(parents=True, exist_ok=True)
        holder = Path(tempfile.mkdtemp(prefix="proc-", dir=self.tmpdir))
        fifo = holder / name
        os.mkfifo(fifo, 0o600)
        # Removed in reverse order: the FIFO first, then its directory
        self.track(holder)
        return self.track(fifo)

    def release(self, path: Path) -> None:
        path = Path(path)
        _remove(path)
        if path in self._paths:
            self._paths.remove(path)

    def cleanup(self) -> list[Path]:
        if self._closed:
            return []
        self._closed = True
        removed = []
        for path in reversed(self._paths):
            if _remove(path):
                removed.append(path)
        self._paths.clear()
        return removed


def _remove(path: Path) -> bool:
    try:
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink()
    except OSError:
        return False
    return True


@traced
def clean_up_artifacts(ctx: "ProcContext") -> list[Path]:
    removed = ctx.artifacts.cleanup()
    if removed:
        ctx.reporter.debug(f"removed transient artifacts: {', '.join(str(p) for p in removed)}")
    return removed


def with_cleanup(ctx: "ProcContext", body: Callable[[], T]) -> T:
    try:
        return body()
    finally:
        clean_up_artifacts(ctx)


def exit_error(ctx: "ProcContext", message: str, status: Optional[int] = None) -> NoReturn:
    """Report ``message`` on the Error channel, clean up, and terminate with ``status``."""
    ctx.reporter.error(message)
    clean_up_artifacts(ctx)
    raise SystemExit(EXIT_ERROR if status is None else status)


def _raise_exit(signum, frame):
    raise SystemExit(128 + signum)


def install_signal_handlers() -> None:
    for sig in (signal.SIGTERM, signal.SIGHUP):
        signal.signal(sig, _raise_exit)
