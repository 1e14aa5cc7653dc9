"""Interface hints -> kismet capture arguments.

A hint is a short token (``alfa``, ``left-usb``) looked up in a JSON table::

    {"alfa": {"device": "00:c0:ca:11:22:33", "suffix": ":name=alfa"}}

A mapped hint becomes ``-c <device><suffix>``. A hint missing from the table is
passed through verbatim, so raw kismet arguments can be mixed with hints.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from proccore.cleanup import ProcError
from proccore.context import ProcContext
from proccore.report import Reporter, traced


@dataclass(frozen=True)
class HintTarget:
    device: str
    suffix: str = ""

    @property
    def fragment(self) -> str:
        return f"-c {self.device}{self.suffix}"


class HintMapping:
    """Read-only hint table, loaded on first lookup."""

    def __init__(self, path: Optional[Path] = None, entries: Optional[dict[str, HintTarget]] = None, reporter: Optional[Reporter] = None):
        self.path = path
        self.reporter = reporter
        self._entries = dict(entries) if entries is not None else None

    @classmethod
    def from_dict(cls, data: dict) -> "HintMapping":
        return cls(entries=_parse(data, "<dict>"))

    @property
    def entries(self) -> dict[str, HintTarget]:
        if self._entries is None:
            self._entries = self._load()
        return self._entries

    def _load(self) -> dict[str, HintTarget]:
        if self.path is None or not self.path.exists():
            if self.reporter is not None:
                self.reporter.caution(f"No hint map at {self.path}; all hints pass through unchanged")
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ProcError(f"Unreadable hint map {self.path}: {e}")
        return _parse(data, str(self.path))

    def get(self, hint: str) -> Optional[HintTarget]:
        return self.entries.get(hint)

    def __contains__(self, hint: str) -> bool:
        return hint in self.entries


def _parse(data, source: str) -> dict[str, HintTarget]:
    if not isinstance(data, dict):
        raise ProcError(f"Hint map {source} must be a JSON object")
    out: dict[str, HintTarget] = {}
    for hint, value in data.items():
        if isinstance(value, str):
            out[hint] = HintTarget(device=value)
        elif isinstance(value, dict) and value.get("device"):
            out[hint] = HintTarget(device=str(value["device"]), suffix=str(value.get("suffix") or ""))
        else:
            raise ProcError(f"Hint map {source}: entry {hint!r} needs a device")
    return out


def resolve_hint(mapping: HintMapping, hint: str) -> str:
    target = mapping.get(hint)
    return target.fragment if target is not None else hint


def resolve_hints(mapping: HintMapping, hints: Iterable[str]) -> str:
    """Resolve hints in order; duplicates are kept, empty fragments skipped."""
    fragments = (resolve_hint(mapping, h) for h in hints)
    return " ".join(f for f in fragments if f)


@traced
def resolve_capture_args(ctx: ProcContext, hints: Iterable[str]) -> str:
    """Resolve hints against the configured map, e.g. ``["alfa", "wlan0"]`` -> ``"-c 00:c0:ca:11:22:33 wlan0"``."""
    mapping = HintMapping(ctx.settings.hint_map, reporter=ctx.reporter)
    return resolve_hints(mapping, hints)
