"""Live pcapng stream from kismet, segmented into fixed-duration files.

Two tasks share one named pipe:

- fetch: streams ``http://<host>/pcap/all_packets.pcapng`` into the pipe
- convert: ``tshark -i <pipe> -b duration:N -w <prefix>.pcapng``

The pipe is the only thing they share; a slow reader blocks the writer. Both end
when kismet stops (stream EOF), when tshark exits (broken pipe), or on cancel().
"""

from __future__ import annotations

import os
import subprocess
import threading
from pathlib import Path
from typing import Callable, Optional

import requests

from proccore.cleanup import EXIT_ERROR, EXIT_OK, ProcError
from proccore.context import ProcContext
from proccore.report import traced
from proccore.tools import require_tool

from .config import SurveySettings
from .daemon import shutdown

CHUNK_SIZE = 64 * 1024
TERMINATE_GRACE_SEC = 5.0


def read_credentials(path: Path) -> tuple[str, str]:
    """Return (username, password) from a kismet_httpd.conf style key=value file."""
    try:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise ProcError(f"Cannot read credentials file {path}: {e}")
    values: dict[str, str] = {}
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip()
    user = values.get("httpd_username")
    password = values.get("httpd_password")
    if not user or password is None:
        raise ProcError(f"Credentials file {path} needs httpd_username and httpd_password")
    return user, password


def tshark_segment_argv(fifo: Path, out_dir: Path, prefix: str, duration_sec: int) -> list[str]:
    return [
        "tshark",
        "-q",
        "-i",
        str(fifo),
        "-b",
        f"duration:{int(duration_sec)}",
        "-w",
        str(out_dir / f"{prefix}.pcapng"),
    ]


def _unblock_writer(fifo: Path) -> None:
    # A writer blocked in open() waits for a reader; open and drop one so it proceeds
    try:
        fd = os.open(fifo, os.O_RDONLY | os.O_NONBLOCK)
    except OSError:
        return
    os.close(fd)


class FetchTask:
    def __init__(self, url: str, auth: tuple[str, str], fifo: Path, chunk_size: int = CHUNK_SIZE):
        self.url = url
        self.auth = auth
        self.fifo = fifo
        self.chunk_size = chunk_size
        self.bytes_written = 0
        self.error: Optional[BaseException] = None
        self._response = None
        self._stop = threading.Event()
        self._thr = threading.Thread(target=self._run, name="kismet-fetch", daemon=True)

    def start(self):
        self._thr.start()

    @property
    def alive(self) -> bool:
        return self._thr.is_alive()

    def join(self, timeout: Optional[float] = None):
        self._thr.join(timeout)

    def stop(self):
        self._stop.set()
        resp = self._response
        if resp is not None:
            resp.close()
        _unblock_writer(self.fifo)

    def _run(self):
        try:
            # Blocks until the consumer has the pipe open for reading
            with open(self.fifo, "wb") as out:
                if self._stop.is_set():
                    return
                with requests.get(self.url, auth=self.auth, stream=True) as r:
                    self._response = r
                    r.raise_for_status()
                    for chunk in r.iter_content(chunk_size=self.chunk_size):
                        if self._stop.is_set():
                            break
                        if chunk:
                            out.write(chunk)
                            self.bytes_written += len(chunk)
        except BrokenPipeError:
            # Consumer closed the channel
            pass
        except (requests.RequestException, OSError) as e:
            if not self._stop.is_set():
                self.error = e


class ConvertTask:
    def __init__(self, argv: list[str]):
        self.argv = argv
        self.proc: Optional[subprocess.Popen] = None
        self.terminated = False

    def start(self):
        try:
            self.proc = subprocess.Popen(self.argv, stdin=subprocess.DEVNULL)
        except OSError as e:
            raise ProcError(f"Cannot start stream converter {self.argv[0]}: {e}")

    @property
    def alive(self) -> bool:
        return self.proc is not None and self.proc.poll() is None

    def wait(self) -> int:
        if self.proc is None:
            return EXIT_OK
        return self.proc.wait()

    def terminate(self):
        if not self.alive:
            return
        self.terminated = True
        self.proc.terminate()
        try:
            self.proc.wait(timeout=TERMINATE_GRACE_SEC)
        except subprocess.TimeoutExpired:
            self.proc.kill()
            self.proc.wait()


class StreamPipeline:
    """Supervisor for the fetch and convert tasks."""

    def __init__(
        self,
        ctx: ProcContext,
        settings: SurveySettings,
        convert_argv: Optional[Callable[[Path], list[str]]] = None,
    ):
        self.ctx = ctx
        self.settings = settings
        self._convert_argv = convert_argv
        self.fifo: Optional[Path] = None
        self.fetch: Optional[FetchTask] = None
        self.convert: Optional[ConvertTask] = None

    @property
    def running(self) -> bool:
        return bool((self.fetch and self.fetch.alive) or (self.convert and self.convert.alive))

    def _argv(self, fifo: Path) -> list[str]:
        if self._convert_argv is not None:
            return self._convert_argv(fifo)
        require_tool("tshark")
        s = self.settings
        return tshark_segment_argv(fifo, s.output_dir, s.segment_prefix, s.segment_sec)

    def start(self) -> "StreamPipeline":
        s = self.settings
        auth = read_credentials(s.httpd_conf)
        s.output_dir.mkdir(parents=True, exist_ok=True)
        self.fifo = self.ctx.artifacts.mkfifo("kismet.pcapng.fifo")
        self.convert = ConvertTask(self._argv(self.fifo))
        self.fetch = FetchTask(s.stream_url, auth, self.fifo)
        # Reader first, so the writer's open() has a partner
        self.convert.start()
        self.fetch.start()
        self.ctx.reporter.information(f"Streaming {s.stream_url} -> {s.output_dir / s.segment_prefix}*.pcapng ({s.segment_sec}s segments)")
        return self

    def cancel(self):
        if self.convert is not None:
            self.convert.terminate()
        if self.fetch is not None:
            self.fetch.stop()
            self.fetch.join(TERMINATE_GRACE_SEC)

    def wait(self) -> int:
        if self.convert is None or self.fetch is None:
            return EXIT_OK
        rc = self.convert.wait()
        # Converter is gone; nobody reads the pipe any more
        self.fetch.stop()
        self.fetch.join()
        if self.fetch.error is not None:
            self.ctx.reporter.error(f"Stream fetch failed: {self.fetch.error}")
            return EXIT_ERROR
        if rc != 0 and not self.convert.terminated:
            self.ctx.reporter.error(f"Stream converter exited with status {rc}")
            return EXIT_ERROR
        self.ctx.reporter.complete(f"Stream ended after {self.fetch.bytes_written} bytes")
        return EXIT_OK


@traced
def start_stream_capture(ctx: ProcContext, settings: SurveySettings, convert_argv=None) -> StreamPipeline:
    """Launch both tasks and return without waiting for them."""
    return StreamPipeline(ctx, settings, convert_argv).start()


__all__ = [
    "FetchTask",
    "ConvertTask",
    "StreamPipeline",
    "read_credentials",
    "tshark_segment_argv",
    "start_stream_capture",
    "shutdown",
]
