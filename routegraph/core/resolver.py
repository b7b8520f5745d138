"""Mount prefix resolution over the edge list built by ``build_edges``.

A module's prefixes are every path under which it is reachable from an
unmounted context. Each edge contributes ``join(ancestor, edge.prefix)``
for every prefix of the mounting module; edges mounted from the root
contribute ``join("", edge.prefix)``. Results are memoized per context.
"""

from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple

from routegraph.core.paths import join_paths
from routegraph.models.route import ModuleKey, MountEdge

ROOT_PREFIXES: FrozenSet[str] = frozenset({""})


class ResolutionContext:
    """Edges and memo for one resolution pass. Build a new one per scan."""

    def __init__(self, edges: Iterable[MountEdge]):
        self.edges: Tuple[MountEdge, ...] = tuple(edges)
        self.memo: Dict[ModuleKey, FrozenSet[str]] = {}
        self._incoming: Dict[ModuleKey, List[MountEdge]] = defaultdict(list)
        for edge in self.edges:
            self._incoming[edge.target].append(edge)

    def incoming(self, key: ModuleKey) -> List[MountEdge]:
        return self._incoming.get(key, [])


class _Frame:
    __slots__ = ("key", "edges", "index", "results")

    def __init__(self, key: ModuleKey, edges: List[MountEdge]):
        self.key = key
        self.edges = edges
        self.index = 0
        self.results: Set[str] = set()

    def absorb(self, ancestors: Iterable[str]) -> None:
        prefix = self.edges[self.index].prefix
        for ancestor in ancestors:
            self.results.add(join_paths(ancestor, prefix))
        self.index += 1


def resolve_prefixes(ctx: ResolutionContext, key: ModuleKey, stack: Tuple[ModuleKey, ...] = ()) -> FrozenSet[str]:
    """
    All prefixes of ``key``. ``stack`` holds the modules whose resolution is
    in progress; meeting one of them again is a cycle and yields {""}
    without memoizing. Mount chains are followed with explicit frames, so
    chain length is not limited by the interpreter's recursion limit.
    """
    if key in ctx.memo:
        return ctx.memo[key]
    if key in stack:
        return ROOT_PREFIXES

    in_progress = set(stack)
    in_progress.add(key)
    frames = [_Frame(key, ctx.incoming(key))]
    returned = None

    while frames:
        frame = frames[-1]
        if returned is not None:
            frame.absorb(returned)
            returned = None

        descended = False
        while frame.index < len(frame.edges):
            source = frame.edges[frame.index].source
            if source is None:
                frame.absorb(ROOT_PREFIXES)
            elif source in ctx.memo:
                frame.absorb(ctx.memo[source])
            elif source in in_progress:
                # cycle: the frame that owns `source` memoizes once it unwinds
                frame.absorb(ROOT_PREFIXES)
            else:
                in_progress.add(source)
                frames.append(_Frame(source, ctx.incoming(source)))
                descended = True
                break
        if descended:
            continue

        frames.pop()
        in_progress.discard(frame.key)
        prefixes = frozenset(frame.results) if frame.edges else ROOT_PREFIXES
        ctx.memo[frame.key] = prefixes
        returned = prefixes

    return returned
