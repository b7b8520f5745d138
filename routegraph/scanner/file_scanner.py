import json
import logging
import os
from typing import Dict, List

from routegraph import config
from routegraph.errors import ProjectError

logger = logging.getLogger("routegraph.scanner")


def find_source_files(directory, extensions=None, exclude_dirs=None) -> List[str]:
    if not os.path.isdir(directory):
        raise ProjectError(f"not a directory: {directory}")
    extensions = tuple(extensions or config.EXTENSIONS)
    exclude_dirs = set(exclude_dirs or config.EXCLUDE_DIRS)

    source_files = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if d not in exclude_dirs)
        for file in sorted(files):
            if file.endswith(".d.ts"):
                continue
            if file.endswith(extensions):
                source_files.append(os.path.join(root, file))
    return source_files


def read_sources(paths) -> Dict[str, str]:
    """Unreadable files are logged and left out."""
    sources = {}
    for path in paths:
        try:
            with open(path, "r", encoding="utf-8") as f:
                sources[path] = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read %s: %s", path, e)
    return sources


def is_elysia_project(directory, package=None) -> bool:
    """True when any package.json outside node_modules depends on the framework."""
    package = package or config.FRAMEWORK_PACKAGE
    for root, dirs, files in os.walk(directory):
        dirs[:] = [d for d in dirs if d not in config.EXCLUDE_DIRS]
        if "package.json" not in files:
            continue
        manifest = os.path.join(root, "package.json")
        try:
            with open(manifest, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to parse package.json at %s: %s", manifest, e)
            continue
        if not isinstance(data, dict):
            continue
        dependencies = data.get("dependencies") or {}
        dev_dependencies = data.get("devDependencies") or {}
        if package in dependencies or package in dev_dependencies:
            return True
    return False
