from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Set

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "head", "options", "all")


@dataclass(frozen=True)
class RouteItem:
    method: str
    path: str
    line: int
    owner: Optional[str] = None

    def to_dict(self):
        return {
            "method": self.method,
            "path": self.path,
            "line": self.line,
            "owner": self.owner,
        }


@dataclass(frozen=True)
class MountUsage:
    target: str
    prefix: str
    line: int
    owner: Optional[str] = None

    def to_dict(self):
        return {
            "target": self.target,
            "prefix": self.prefix,
            "line": self.line,
            "owner": self.owner,
        }


@dataclass
class StructuralRecord:
    """Everything the extractor learned about one file."""

    routes: List[RouteItem] = field(default_factory=list)
    exports: Dict[str, List[RouteItem]] = field(default_factory=dict)
    export_locals: Dict[str, str] = field(default_factory=dict)
    usages: List[MountUsage] = field(default_factory=list)
    imports: Dict[str, str] = field(default_factory=dict)

    def owners(self) -> Set[str]:
        names = {r.owner for r in self.routes if r.owner}
        names.update(u.owner for u in self.usages if u.owner)
        return names

    def to_dict(self):
        return {
            "routes": [r.to_dict() for r in self.routes],
            "exports": {k: [r.to_dict() for r in v] for k, v in self.exports.items()},
            "export_locals": dict(self.export_locals),
            "usages": [u.to_dict() for u in self.usages],
            "imports": dict(self.imports),
        }


class ModuleKey(NamedTuple):
    file: str
    variable: str

    def __str__(self):
        return f"{self.file}::{self.variable}"


@dataclass(frozen=True)
class MountEdge:
    # source None means the mount happens outside any variable (root)
    source: Optional[ModuleKey]
    target: ModuleKey
    prefix: str
    line: int = 0
    # file holding the `.use()` call; needed for root mounts, which have no source
    origin_file: str = field(default="", compare=False)


@dataclass(frozen=True)
class ResolvedRoute:
    method: str
    path: str
    line: int
    source_file: str
    owner: Optional[str] = None
    raw_path: str = ""

    @property
    def signature(self):
        return (self.method, self.path)

    def to_dict(self, listing_file: Optional[str] = None):
        data = {"method": self.method, "path": self.path, "line": self.line}
        if listing_file is None or self.source_file != listing_file:
            data["sourceFile"] = self.source_file
        return data
