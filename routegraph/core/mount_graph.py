import logging
from typing import Dict, List

from routegraph.models.route import ModuleKey, MountEdge, StructuralRecord

logger = logging.getLogger("routegraph.core")


def build_edges(records: Dict[str, StructuralRecord]) -> List[MountEdge]:
    """
    Turn every `.use(x)` of every file into edges mounting module -> mounted
    module. Imports are matched against the exports of every *other* file;
    a name exported from several files yields one edge per file.
    """
    edges: List[MountEdge] = []

    for filename, record in records.items():
        local_owners = record.owners()

        for usage in record.usages:
            source = ModuleKey(filename, usage.owner) if usage.owner else None
            original = record.imports.get(usage.target)

            if original:
                matched = False
                for other_name, other in records.items():
                    if other_name == filename or original not in other.exports:
                        continue
                    local = other.export_locals.get(original, original)
                    edges.append(MountEdge(source, ModuleKey(other_name, local), usage.prefix, usage.line, filename))
                    matched = True
                if not matched:
                    logger.debug("%s:%d: import %r is not exported by any scanned file",
                                 filename, usage.line, original)
            elif usage.target in record.exports or usage.target in local_owners:
                local = record.export_locals.get(usage.target, usage.target)
                edges.append(MountEdge(source, ModuleKey(filename, local), usage.prefix, usage.line, filename))
            else:
                logger.debug("%s:%d: nothing to mount for %r", filename, usage.line, usage.target)

    return edges
