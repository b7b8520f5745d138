import csv
import json
import os

HEADERS = ["file", "line", "method", "path", "raw_path", "owner", "source_file"]


def _rows(result):
    for path in result.sorted_files():
        for route in result.routes[path]:
            yield {
                "file": path,
                "line": route.line,
                "method": route.method,
                "path": route.path,
                "raw_path": route.raw_path,
                "owner": route.owner or "",
                "source_file": route.source_file,
            }


def _ensure_parent(out_path):
    parent = os.path.dirname(out_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def export_to_csv(result, out_path):
    _ensure_parent(out_path)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=HEADERS)
        writer.writeheader()
        for row in _rows(result):
            writer.writerow(row)
    return out_path


def export_to_json(result, out_path):
    _ensure_parent(out_path)
    payload = {
        "routes": result.to_dict(),
        "mounts": [
            {
                "from": str(edge.source) if edge.source else None,
                "to": str(edge.target),
                "prefix": edge.prefix,
                "line": edge.line,
                "file": edge.origin_file,
            }
            for edge in result.edges
        ],
        "failures": dict(result.failures),
    }
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    return out_path
