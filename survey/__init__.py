"""kismetproc: kismet launch/stop with interface hints, and live stream segmentation."""

from .config import SurveySettings, load_settings
from .daemon import KismetDaemon
from .hints import HintMapping, HintTarget, resolve_capture_args, resolve_hint, resolve_hints
from .stream import StreamPipeline, read_credentials, start_stream_capture

__all__ = [
    "SurveySettings",
    "load_settings",
    "KismetDaemon",
    "HintMapping",
    "HintTarget",
    "resolve_hint",
    "resolve_hints",
    "resolve_capture_args",
    "StreamPipeline",
    "read_credentials",
    "start_stream_capture",
]
