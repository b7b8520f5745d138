from textwrap import dedent

import pytest

from routegraph.models.route import MountUsage, RouteItem, StructuralRecord


def make_record(routes=(), exported=(), usages=(), imports=None, export_locals=None):
    routes = list(routes)
    export_locals = dict(export_locals or {name: name for name in exported})
    exports = {
        public: [r for r in routes if r.owner == local]
        for public, local in export_locals.items()
    }
    return StructuralRecord(
        routes=routes,
        exports=exports,
        export_locals=export_locals,
        usages=list(usages),
        imports=dict(imports or {}),
    )


@pytest.fixture
def login_scenario():
    """user.routes exports userRoutes; index mounts it under /users at top level."""
    user = make_record(
        routes=[RouteItem("POST", "/login", 10, "userRoutes")],
        exported=["userRoutes"],
    )
    index = make_record(
        routes=[RouteItem("GET", "/", 100, None)],
        usages=[MountUsage("userRoutes", "/users", 50, None)],
        imports={"userRoutes": "userRoutes"},
    )
    return {"/src/user.routes.ts": user, "/src/index.ts": index}


@pytest.fixture
def elysia_project(tmp_path):
    (tmp_path / "package.json").write_text('{"dependencies": {"elysia": "^1.0.0"}}')
    src = tmp_path / "src"
    src.mkdir()
    (src / "user.routes.ts").write_text(dedent("""\
        import { Elysia } from 'elysia'

        export const userRoutes = new Elysia()
          .post('/login', ({ body }) => body)
          .get('/me', () => 'me')
    """))
    (src / "index.ts").write_text(dedent("""\
        import { Elysia } from 'elysia'
        import { userRoutes } from './user.routes'

        new Elysia()
          .get('/', () => 'hello')
          .use(userRoutes)
          .group('/v1', (app) => app.use(userRoutes))
          .listen(3000)
    """))
    modules = tmp_path / "node_modules" / "elysia"
    modules.mkdir(parents=True)
    (modules / "index.ts").write_text("export const ignored = new Elysia().get('/nope', h)\n")
    return tmp_path
