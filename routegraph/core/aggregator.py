from typing import Dict, List

from routegraph.core.paths import join_paths
from routegraph.core.resolver import ResolutionContext, resolve_prefixes
from routegraph.models.route import ModuleKey, ResolvedRoute, StructuralRecord


def aggregate_routes(records: Dict[str, StructuralRecord], ctx: ResolutionContext) -> Dict[str, List[ResolvedRoute]]:
    """
    Expand every owned route by its module's prefixes and list it under the
    file that defines it. Orphan routes (no owner) pass through untouched.
    Each file keeps the first route per (method, path).
    """
    output: Dict[str, List[ResolvedRoute]] = {}

    for filename, record in records.items():
        generated: List[ResolvedRoute] = []
        for route in record.routes:
            if not route.owner:
                generated.append(ResolvedRoute(route.method, route.path, route.line, filename,
                                               None, route.path))
                continue
            prefixes = resolve_prefixes(ctx, ModuleKey(filename, route.owner))
            for prefix in sorted(prefixes):
                generated.append(ResolvedRoute(route.method, join_paths(prefix, route.path), route.line,
                                               filename, route.owner, route.path))

        seen = set()
        unique: List[ResolvedRoute] = []
        for item in generated:
            if item.signature in seen:
                continue
            seen.add(item.signature)
            unique.append(item)

        if unique:
            output[filename] = unique

    return output
