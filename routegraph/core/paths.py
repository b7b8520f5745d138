def _normalize(path: str) -> str:
    if not path:
        return "/"
    if not path.startswith("/"):
        return "/" + path
    return path


def join_paths(prefix: str, subpath: str) -> str:
    """Join a mount/group prefix and a sub-path into one absolute path.

    join_paths("/api/", "/x") -> "/api/x"
    join_paths("/api", "")    -> "/api"
    join_paths("", "")        -> "/"
    """
    prefix = _normalize(prefix)
    subpath = _normalize(subpath)

    if subpath == "/":
        return prefix.rstrip("/") or "/"
    if prefix == "/":
        return subpath
    return prefix.rstrip("/") + subpath
