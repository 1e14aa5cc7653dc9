from __future__ import annotations

import shutil
import subprocess
from typing import Sequence

from .cleanup import ProcError


def has_tool(name: str) -> bool:
    return shutil.which(name) is not None


def require_tool(name: str) -> None:
    if not has_tool(name):
        raise ProcError(f"{name} not found in PATH. Install {name} and retry.")


def tool_version(argv: Sequence[str]) -> str:
    """Run a version query such as ``nmap --version`` and return its output."""
    require_tool(argv[0])
    try:
        out = subprocess.run(list(argv), capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        raise ProcError(f"{' '.join(argv)} failed with status {e.returncode}")
    return (out.stdout or out.stderr).strip()
