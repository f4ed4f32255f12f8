from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from routewire.config import Config
from routewire.domain.models import EndpointDescriptor
from routewire.parser.python_source import route_sources_from_source
from routewire.reconcile.gate import is_route_builder
from routewire.reconcile.reconciler import parse_route_builder
from routewire.repo.scanner import scan_python_files, select_candidate_route_files
from routewire.store.sqlite_store import RouteWireSQLiteStore
from routewire.utils.exceptions import SourceParseError, SourceTooLargeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyzeResult:
    files_scanned: int
    candidate_files: list[str]
    route_classes: int
    skipped_classes: int
    unparsable_files: list[str]
    oversized_files: list[str]
    endpoints: list[EndpointDescriptor]
    stored_endpoints: int
    db_path: str


def read_source(path: Path, max_bytes: int | None = None) -> str:
    """
    Read a whole source file. Raises SourceTooLargeError instead of parsing a
    truncated file, which would silently lose every call-site after the cut.
    """
    limit = Config.MAX_FILE_BYTES if max_bytes is None else max_bytes
    size = path.stat().st_size
    if size > limit:
        raise SourceTooLargeError(str(path), size, limit)

    data = path.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning("%s is not valid utf-8 (%s); undecodable bytes replaced", path, e.reason)
        return data.decode("utf-8", errors="replace")


def analyze_source(
    source: str,
    base_dir: str,
    file_name: str,
    endpoints: list[EndpointDescriptor],
) -> tuple[int, int]:
    """
    Reconcile every top-level class of one module into `endpoints`.

    Returns (route_classes, skipped_classes). Raises SourceParseError.
    """
    route_classes = 0
    skipped = 0
    for route_source in route_sources_from_source(source, file_name=file_name):
        # checked here for the skip count; parse_route_builder keeps its own gate for direct callers
        if not is_route_builder(route_source.super_type_name()):
            logger.debug("skipping %s in %s: base %s", route_source.name, file_name, route_source.super_type_name())
            skipped += 1
            continue
        route_classes += 1
        parse_route_builder(route_source, base_dir, file_name, endpoints)
    return route_classes, skipped


def run_analyze(repo_path: Path, max_files: int | None = None) -> AnalyzeResult:
    repo_path = repo_path.resolve()
    base_dir = str(repo_path)
    store = RouteWireSQLiteStore(RouteWireSQLiteStore.db_path_for_repo(repo_path), repo_root=repo_path)

    py_files = scan_python_files(repo_path, max_files=max_files)
    candidates = select_candidate_route_files(py_files)
    logger.info("scanned %d python files, %d candidates", len(py_files), len(candidates))

    # one accumulator per run, shared by every class in the repo
    endpoints: list[EndpointDescriptor] = []
    route_classes = 0
    skipped_classes = 0
    unparsable: list[str] = []
    oversized: list[str] = []

    for p in candidates:
        fpath = Path(p)
        try:
            source = read_source(fpath)
            found, skipped = analyze_source(source, base_dir, str(fpath), endpoints)
        except SourceTooLargeError as e:
            logger.warning("skipping %s", e)
            oversized.append(p)
            continue
        except SourceParseError as e:
            logger.warning("cannot parse %s", e)
            unparsable.append(p)
            continue
        except OSError as e:
            logger.warning("cannot read %s: %s", p, e)
            unparsable.append(p)
            continue
        route_classes += found
        skipped_classes += skipped

    stored = store.replace_all_endpoints(endpoints)
    logger.info("%d route classes, %d endpoints", route_classes, stored)

    return AnalyzeResult(
        files_scanned=len(py_files),
        candidate_files=[os.path.relpath(p, base_dir) for p in candidates],
        route_classes=route_classes,
        skipped_classes=skipped_classes,
        unparsable_files=[os.path.relpath(p, base_dir) for p in unparsable],
        oversized_files=[os.path.relpath(p, base_dir) for p in oversized],
        endpoints=endpoints,
        stored_endpoints=stored,
        db_path=str(store.db_path),
    )
