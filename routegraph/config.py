import os


def _csv_env(name, default):
    raw = os.getenv(name, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _bool_env(name, default="0"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ====== Scanner ======
WORKERS = int(os.getenv("ROUTEGRAPH_WORKERS", "8"))
EXTENSIONS = _csv_env("ROUTEGRAPH_EXTENSIONS", ".ts,.tsx")
EXCLUDE_DIRS = _csv_env("ROUTEGRAPH_EXCLUDE_DIRS", "node_modules,.git,dist,build")
FRAMEWORK_PACKAGE = os.getenv("ROUTEGRAPH_FRAMEWORK_PACKAGE", "elysia")

# ====== Neo4j (optional) ======
NEO4J_BOLT = os.getenv("NEO4J_BOLT", "bolt://localhost:7687")
NEO4J_USER = os.getenv("NEO4J_USER", "neo4j")
NEO4J_PASS = os.getenv("NEO4J_PASS", "neo4j")
NEO4J_ENABLED = _bool_env("NEO4J_ENABLED")

# ====== Web ======
UPLOAD_DIR = os.getenv("ROUTEGRAPH_UPLOAD_DIR", "")
