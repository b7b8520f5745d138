"""Tests for routegraph.core.analyzer — the scan pipeline end to end."""

import os
from textwrap import dedent

from routegraph.core.analyzer import ExtractionCache, analyze_project, analyze_sources, extract_all
from routegraph.models.route import ModuleKey


def _sigs(routes):
    return [(r.method, r.path) for r in routes]


class TestAnalyzeSources:
    def test_cross_file_mounts(self) -> None:
        sources = {
            "user.routes.ts": dedent("""\
                export const userRoutes = new Elysia()
                  .post('/login', h)
            """),
            "index.ts": dedent("""\
                import { userRoutes } from './user.routes'
                new Elysia().use(userRoutes).group('/v1', (app) => app.use(userRoutes))
            """),
        }
        result = analyze_sources(sources, workers=2)
        assert _sigs(result.routes["user.routes.ts"]) == [("POST", "/login"), ("POST", "/v1/login")]
        assert "index.ts" not in result.routes
        assert len(result.edges) == 2
        assert result.failures == {}

    def test_local_module_mounted_in_same_file(self) -> None:
        sources = {
            "index.ts": dedent("""\
                const admin = new Elysia().get('/stats', h)
                const app = new Elysia({ prefix: '/api' }).use(admin)
                new Elysia().group('/v2', (app2) => app2.use(app))
            """),
        }
        result = analyze_sources(sources, workers=1)
        assert _sigs(result.routes["index.ts"]) == [("GET", "/v2/api/stats")]

    def test_mount_cycle_terminates(self) -> None:
        sources = {
            "a.ts": "import { b } from './b'\nexport const a = new Elysia().get('/a', h).use(b)\n",
            "b.ts": "import { a } from './a'\nexport const b = new Elysia({ prefix: '/b' }).get('/x', h).use(a)\n",
        }
        result = analyze_sources(sources)
        # a is resolved first, so b meets it on the stack and starts from the root
        assert _sigs(result.routes["a.ts"]) == [("GET", "/b/a")]
        assert _sigs(result.routes["b.ts"]) == [("GET", "/b/x")]
        assert result.prefixes == {
            ModuleKey("a.ts", "a"): frozenset({"/b"}),
            ModuleKey("b.ts", "b"): frozenset({"/"}),
        }

    def test_failure_is_isolated(self) -> None:
        sources = {
            "good.ts": "new Elysia().get('/ok', h)\n",
            "bad.ts": None,
        }
        result = analyze_sources(sources)
        assert _sigs(result.routes["good.ts"]) == [("GET", "/ok")]
        assert "bad.ts" in result.failures

    def test_extract_all_keeps_input_order(self) -> None:
        sources = {f"f{i}.ts": f"new Elysia().get('/r{i}', h)\n" for i in range(20)}
        records, failures = extract_all(sources, workers=4)
        assert list(records) == list(sources)
        assert failures == {}


class TestAnalyzeProject:
    def test_project(self, elysia_project) -> None:
        result = analyze_project(str(elysia_project), workers=2)
        index = os.path.join(str(elysia_project), "src", "index.ts")
        user = os.path.join(str(elysia_project), "src", "user.routes.ts")

        assert result.sorted_files() == [index, user]
        assert _sigs(result.routes[index]) == [("GET", "/")]
        assert _sigs(result.routes[user]) == [
            ("POST", "/login"),
            ("POST", "/v1/login"),
            ("GET", "/me"),
            ("GET", "/v1/me"),
        ]
        assert all("node_modules" not in path for path in result.records)

    def test_cache_reuses_unchanged_files(self, elysia_project) -> None:
        cache = ExtractionCache()
        first = analyze_project(str(elysia_project), cache=cache)
        assert len(cache) == 2
        second = analyze_project(str(elysia_project), cache=cache)
        for path, record in first.records.items():
            assert second.records[path] is record

    def test_cache_misses_on_modification(self, elysia_project) -> None:
        cache = ExtractionCache()
        analyze_project(str(elysia_project), cache=cache)
        user = elysia_project / "src" / "user.routes.ts"
        user.write_text("export const userRoutes = new Elysia().get('/changed', h)\n")
        stat = user.stat()
        os.utime(user, (stat.st_atime, stat.st_mtime + 10))

        result = analyze_project(str(elysia_project), cache=cache)
        assert _sigs(result.routes[str(user)]) == [("GET", "/changed"), ("GET", "/v1/changed")]

    def test_cache_forgets_deleted_files(self, elysia_project) -> None:
        cache = ExtractionCache()
        analyze_project(str(elysia_project), cache=cache)
        assert len(cache) == 2

        user = elysia_project / "src" / "user.routes.ts"
        user.unlink()
        result = analyze_project(str(elysia_project), cache=cache)

        assert len(cache) == 1
        assert str(user) not in result.records
        assert cache.get(str(user), 0) is None

    def test_prune_keeps_other_roots(self, tmp_path) -> None:
        cache = ExtractionCache()
        kept = str(tmp_path / "other" / "a.ts")
        gone = str(tmp_path / "proj" / "b.ts")
        cache.put(kept, 1.0, None)
        cache.put(gone, 1.0, None)

        assert cache.prune(str(tmp_path / "proj"), []) == 1
        assert len(cache) == 1
