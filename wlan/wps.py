from __future__ import annotations

import csv
import fnmatch
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from proccore.cleanup import ProcError
from proccore.context import ProcContext
from proccore.report import traced
from proccore.tools import require_tool

# WPS vendor-specific IE: Microsoft OUI 00:50:f2 (20722), OUI type 4
WPS_DISPLAY_FILTER = "(wlan.tag.number == 221) and (wlan.tag.oui == 20722) and (wlan.tag.vendor.oui.type == 4)"
WPS_FIELDS = [
    "wlan.sa",
    "wps.mac_address",
    "wps.manufacturer",
    "wps.model_name",
    "wps.model_number",
    "wps.serial_number",
    "wps.device_name",
    "wps.uuid_e",
    "wps.primary_device_type.category",
    "wps.primary_device_type",
]
PCAP_PATTERN = "*.pcap??"
OUTPUT_SUFFIX = "-wps_fields.csv"


def tshark_fields_argv(pcap: Path, display_filter: str = WPS_DISPLAY_FILTER, fields: Iterable[str] = WPS_FIELDS) -> list[str]:
    cmd = [
        "tshark",
        "-r",
        str(pcap),
        "-Y",
        display_filter,
        "-T",
        "fields",
        "-E",
        "header=y",
        "-E",
        "separator=,",
        "-E",
        "quote=d",
    ]
    for f in fields:
        cmd += ["-e", f]
    return cmd


def _is_empty_row(line: str) -> bool:
    row = next(csv.reader([line]), [])
    return all(not cell.strip() for cell in row)


def clean_rows(lines: Iterable[str]) -> tuple[list[str], int]:
    """Header once, then the sorted unique data rows; rows with no values are dropped.

    Returns (lines, dropped_empty). Running it on its own output changes nothing.
    """
    it = iter(lines)
    header = next(it, None)
    if header is None:
        return [], 0
    body: set[str] = set()
    dropped = 0
    for line in it:
        line = line.rstrip("\r\n")
        if _is_empty_row(line):
            dropped += 1
            continue
        body.add(line)
    return [header.rstrip("\r\n"), *sorted(body)], dropped


def output_path_for(pcap: Path) -> Path:
    pcap = Path(pcap)
    name = pcap.name
    stem = name[: -len(".pcap??")] if fnmatch.fnmatch(name.lower(), PCAP_PATTERN) else pcap.stem
    return pcap.with_name(f"{stem}{OUTPUT_SUFFIX}")


def _run_tshark(pcap: Path, out_csv: Path) -> None:
    require_tool("tshark")
    with open(out_csv, "w", encoding="utf-8", newline="") as f:
        try:
            subprocess.run(tshark_fields_argv(pcap), stdout=f, stderr=subprocess.PIPE, text=True, check=True)
        except subprocess.CalledProcessError as e:
            raise ProcError(f"tshark failed on {pcap} ({e.returncode}): {(e.stderr or '').strip()}")


@traced
def extract_wps_from_pcap(ctx: ProcContext, pcap: Path) -> Path:
    """Extract select WPS fields from a pcap into a sibling ``<stem>-wps_fields.csv``."""
    pcap = Path(pcap)
    if not pcap.is_file():
        raise ProcError(f"No such capture file: {pcap}")
    destination = output_path_for(pcap)
    ctx.reporter.information(f"Processing: {pcap}")
    raw = ctx.artifacts.mktemp(suffix=".csv", prefix="tshark-wps-")
    try:
        _run_tshark(pcap, raw)
        with open(raw, "r", encoding="utf-8", errors="replace", newline="") as f:
            lines, dropped = clean_rows(f)
    finally:
        ctx.artifacts.release(raw)
    if dropped:
        ctx.reporter.caution(f"{pcap}: dropped {dropped} rows with no WPS field values")
    with open(destination, "w", encoding="utf-8", newline="") as f:
        for line in lines:
            f.write(line + "\n")
    ctx.reporter.complete(f"Created: {destination}")
    return destination


@traced
def find_pcaps(ctx: ProcContext, root: Path) -> list[Path]:
    found: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            if fnmatch.fnmatch(name.lower(), PCAP_PATTERN):
                found.append(Path(dirpath) / name)
    return sorted(found)


@dataclass
class BulkResult:
    processed: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)


@traced
def bulk_extract_wps(ctx: ProcContext, root: Path) -> BulkResult:
    """Recursively extract WPS fields from every capture under ``root``, one file at a time."""
    root = Path(root)
    if not root.is_dir():
        raise ProcError(f"No such directory: {root}")
    result = BulkResult()
    # Snapshot: captures appearing during the run are not picked up
    for pcap in find_pcaps(ctx, root):
        try:
            result.processed.append(extract_wps_from_pcap(ctx, pcap))
        except (ProcError, OSError) as e:
            ctx.reporter.warning(f"Skipping {pcap}: {getattr(e, 'message', e)}")
            result.failed.append(pcap)
    ctx.reporter.complete(f"Bulk extraction: {len(result.processed)} created, {len(result.failed)} skipped")
    return result
