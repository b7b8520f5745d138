"""Tests for routegraph.core.mount_graph — usage → edge resolution."""

from conftest import make_record

from routegraph.core.mount_graph import build_edges
from routegraph.models.route import ModuleKey, MountEdge, MountUsage, RouteItem


class TestBuildEdges:
    def test_import_edge_from_root(self, login_scenario) -> None:
        edges = build_edges(login_scenario)
        assert edges == [
            MountEdge(None, ModuleKey("/src/user.routes.ts", "userRoutes"), "/users", 50),
        ]
        assert edges[0].origin_file == "/src/index.ts"

    def test_import_edge_with_owner(self) -> None:
        records = {
            "a.ts": make_record(exported=["api"], routes=[RouteItem("GET", "/x", 1, "api")]),
            "b.ts": make_record(
                usages=[MountUsage("api", "/v1", 3, "app")],
                imports={"api": "api"},
            ),
        }
        edges = build_edges(records)
        assert edges == [MountEdge(ModuleKey("b.ts", "app"), ModuleKey("a.ts", "api"), "/v1", 3)]

    def test_aliased_import_and_export(self) -> None:
        records = {
            "posts.ts": make_record(
                routes=[RouteItem("GET", "/", 1, "router")],
                export_locals={"postRoutes": "router"},
            ),
            "index.ts": make_record(
                usages=[MountUsage("posts", "/posts", 4, None)],
                imports={"posts": "postRoutes"},
            ),
        }
        edges = build_edges(records)
        assert [e.target for e in edges] == [ModuleKey("posts.ts", "router")]

    def test_exported_with_no_routes_still_matches(self) -> None:
        records = {
            "api.ts": make_record(exported=["api"], usages=[MountUsage("users", "", 1, "api")]),
            "index.ts": make_record(usages=[MountUsage("api", "/api", 2, None)], imports={"api": "api"}),
        }
        edges = build_edges(records)
        assert MountEdge(None, ModuleKey("api.ts", "api"), "/api", 2) in edges

    def test_ambiguous_export_keeps_every_match(self) -> None:
        records = {
            "one.ts": make_record(exported=["routes"]),
            "two.ts": make_record(exported=["routes"]),
            "index.ts": make_record(usages=[MountUsage("routes", "/r", 1, None)], imports={"routes": "routes"}),
        }
        targets = sorted(e.target.file for e in build_edges(records))
        assert targets == ["one.ts", "two.ts"]

    def test_import_never_matches_own_file(self) -> None:
        records = {
            "index.ts": make_record(
                exported=["routes"],
                usages=[MountUsage("routes", "/r", 1, None)],
                imports={"routes": "routes"},
            ),
        }
        assert build_edges(records) == []

    def test_same_file_route_owner(self) -> None:
        records = {
            "index.ts": make_record(
                routes=[RouteItem("GET", "/a", 1, "admin")],
                usages=[MountUsage("admin", "/admin", 5, "app")],
            ),
        }
        assert build_edges(records) == [
            MountEdge(ModuleKey("index.ts", "app"), ModuleKey("index.ts", "admin"), "/admin", 5),
        ]

    def test_same_file_mount_owner(self) -> None:
        records = {
            "index.ts": make_record(
                usages=[
                    MountUsage("users", "/users", 2, "v1"),
                    MountUsage("v1", "/v1", 3, None),
                ],
            ),
        }
        edges = build_edges(records)
        assert edges == [MountEdge(None, ModuleKey("index.ts", "v1"), "/v1", 3)]

    def test_dangling_reference_is_dropped(self) -> None:
        records = {
            "index.ts": make_record(
                usages=[MountUsage("swagger", "", 1, None), MountUsage("missing", "", 2, None)],
                imports={"missing": "missing"},
            ),
        }
        assert build_edges(records) == []
