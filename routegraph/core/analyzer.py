import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from routegraph import config
from routegraph.core.aggregator import aggregate_routes
from routegraph.core.mount_graph import build_edges
from routegraph.core.resolver import ResolutionContext
from routegraph.errors import RouteGraphError
from routegraph.models.route import ModuleKey, MountEdge, ResolvedRoute, StructuralRecord
from routegraph.scanner.elysia_parser import extract_structure
from routegraph.scanner.file_scanner import find_source_files, read_sources

logger = logging.getLogger("routegraph.core")


@dataclass
class ScanResult:
    routes: Dict[str, List[ResolvedRoute]] = field(default_factory=dict)
    records: Dict[str, StructuralRecord] = field(default_factory=dict)
    edges: List[MountEdge] = field(default_factory=list)
    prefixes: Dict[ModuleKey, FrozenSet[str]] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def route_count(self):
        return sum(len(items) for items in self.routes.values())

    def sorted_files(self):
        return sorted(self.routes, key=lambda path: (os.path.basename(path), path))

    def to_dict(self):
        return {
            path: [route.to_dict(listing_file=path) for route in self.routes[path]]
            for path in self.sorted_files()
        }


class ExtractionCache:
    """Structural records keyed by file and modification time."""

    def __init__(self):
        self._entries: Dict[str, Tuple[float, StructuralRecord]] = {}
        self._lock = threading.Lock()

    def get(self, path, mtime) -> Optional[StructuralRecord]:
        with self._lock:
            entry = self._entries.get(path)
        if entry is not None and entry[0] == mtime:
            return entry[1]
        return None

    def put(self, path, mtime, record):
        with self._lock:
            self._entries[path] = (mtime, record)

    def prune(self, root, live):
        """Drop entries under ``root`` that are not in ``live``; returns how many went."""
        root = os.path.join(os.path.abspath(root), "")
        live = set(live)
        with self._lock:
            gone = [path for path in self._entries
                    if os.path.abspath(path).startswith(root) and path not in live]
            for path in gone:
                del self._entries[path]
        return len(gone)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        return len(self._entries)


def extract_all(sources: Dict[str, str], workers=None) -> Tuple[Dict[str, StructuralRecord], Dict[str, str]]:
    """Extract every file in parallel; a failing file only costs its own record."""
    records: Dict[str, StructuralRecord] = {}
    failures: Dict[str, str] = {}
    if not sources:
        return records, failures

    max_workers = max(1, int(workers or config.WORKERS))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(extract_structure, text, filename): filename
            for filename, text in sources.items()
        }
        for future in as_completed(futures):
            filename = futures[future]
            try:
                records[filename] = future.result()
            except RouteGraphError as e:
                logger.error("Failed to parse %s: %s", filename, e)
                failures[filename] = str(e)

    # keep input order; completion order is arbitrary
    ordered = {name: records[name] for name in sources if name in records}
    return ordered, failures


def resolve_records(records: Dict[str, StructuralRecord]) -> ScanResult:
    edges = build_edges(records)
    ctx = ResolutionContext(edges)
    routes = aggregate_routes(records, ctx)
    logger.info("Resolved %d mount edges, %d routes in %d files",
                len(edges), sum(len(v) for v in routes.values()), len(routes))
    return ScanResult(routes=routes, records=records, edges=list(ctx.edges), prefixes=dict(ctx.memo))


def analyze_sources(sources: Dict[str, str], workers=None) -> ScanResult:
    records, failures = extract_all(sources, workers=workers)
    result = resolve_records(records)
    result.failures = failures
    return result


def analyze_project(path, workers=None, cache: Optional[ExtractionCache] = None) -> ScanResult:
    logger.info("Scanning %s for TypeScript files...", path)
    files = find_source_files(path)
    logger.info("Found %d TypeScript files.", len(files))

    if cache is not None:
        dropped = cache.prune(path, files)
        if dropped:
            logger.debug("Dropped %d cached records for deleted files", dropped)

    records: Dict[str, StructuralRecord] = {}
    stale: List[str] = []
    mtimes: Dict[str, float] = {}
    for file in files:
        try:
            mtimes[file] = os.path.getmtime(file)
        except OSError as e:
            logger.error("Failed to stat %s: %s", file, e)
            continue
        cached = cache.get(file, mtimes[file]) if cache is not None else None
        if cached is not None:
            records[file] = cached
        else:
            stale.append(file)

    sources = read_sources(stale)
    fresh, failures = extract_all(sources, workers=workers)
    for file in stale:
        if file not in sources:
            failures[file] = "unreadable file"
    if cache is not None:
        for file, record in fresh.items():
            cache.put(file, mtimes[file], record)
    records.update(fresh)

    ordered = {file: records[file] for file in files if file in records}
    result = resolve_records(ordered)
    result.failures = failures
    return result
