from __future__ import annotations

import os
from pathlib import Path

from routewire.config import Config
from routewire.domain.models import BindingKind
from routewire.reconcile.gate import ROUTE_BUILDER_BASES
from routewire.repo.ignore import should_ignore_dir

# short names of known bases and binding annotations, plus the lifecycle method
_ROUTE_NEEDLES = sorted(
    {b.rsplit(".", 1)[-1] for b in ROUTE_BUILDER_BASES}
    | {k.value.rsplit(".", 1)[-1] for k in BindingKind}
    | {"def configure"}
)


def scan_python_files(repo_path: Path, max_files: int | None = None) -> list[str]:
    """
    Return a sorted list of absolute file paths (as strings) for .py files under repo_path.
    """
    out: list[str] = []
    for root, dirs, files in os.walk(repo_path):
        root_p = Path(root)

        # prune ignored dirs
        dirs[:] = sorted(d for d in dirs if not should_ignore_dir(root_p / d))

        for f in sorted(files):
            if f.endswith(".py"):
                out.append(str((root_p / f).resolve()))
                if max_files is not None and len(out) >= max_files:
                    return out
    return out


def _file_contains_any(path: str, needles: list[str], max_bytes: int | None = None) -> bool:
    if max_bytes is None:
        max_bytes = Config.MAX_FILE_BYTES
    try:
        with open(path, "rb") as f:
            data = f.read(max_bytes)
    except OSError:
        return False
    text = data.decode("utf-8", errors="ignore")
    return any(n in text for n in needles)


def _is_oversized(path: str) -> bool:
    try:
        return os.path.getsize(path) > Config.MAX_FILE_BYTES
    except OSError:
        return False


def select_candidate_route_files(py_files: list[str]) -> list[str]:
    """
    Keep files that mention a route-builder base or a configure method.
    Files over the read limit are kept too, so the pipeline can report them.
    """
    return [p for p in py_files if _is_oversized(p) or _file_contains_any(p, _ROUTE_NEEDLES)]
