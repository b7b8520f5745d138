import argparse
import logging
import os
import sys

from routegraph import config
from routegraph.core.analyzer import analyze_project
from routegraph.errors import RouteGraphError
from routegraph.exporter.csv_exporter import export_to_csv, export_to_json
from routegraph.scanner.file_scanner import is_elysia_project


def build_parser():
    parser = argparse.ArgumentParser(prog="routegraph", description="List Elysia routes with their mount prefixes resolved.")
    parser.add_argument("project", help="project folder to scan")
    parser.add_argument("--csv", metavar="PATH", help="write the routes to a CSV file")
    parser.add_argument("--json", metavar="PATH", help="write routes, mounts and failures to a JSON file")
    parser.add_argument("--neo4j", action="store_true", help="push the mount graph to Neo4j")
    parser.add_argument("--workers", type=int, default=config.WORKERS)
    parser.add_argument("--force", action="store_true", help="scan even without an elysia dependency")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def print_routes(result, out=None):
    out = out or sys.stdout
    for path in result.sorted_files():
        routes = result.routes[path]
        print(f"{path} ({len(routes)} routes)", file=out)
        for route in routes:
            print(f"  {route.method} {route.path}  (Line {route.line})", file=out)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if not os.path.isdir(args.project):
        print(f"Error: not a directory: {args.project}", file=sys.stderr)
        return 1

    if not args.force and not is_elysia_project(args.project):
        print(f"No '{config.FRAMEWORK_PACKAGE}' dependency found under {args.project} (use --force to scan anyway)",
              file=sys.stderr)
        return 2

    try:
        result = analyze_project(args.project, workers=args.workers)
    except RouteGraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_routes(result)
    for path, reason in sorted(result.failures.items()):
        print(f"Failed to parse {path}: {reason}", file=sys.stderr)

    if args.csv:
        export_to_csv(result, args.csv)
        print(f"CSV written: {args.csv}")
    if args.json:
        export_to_json(result, args.json)
        print(f"JSON written: {args.json}")
    if args.neo4j:
        from routegraph.core.neo4j_writer import push_to_neo4j

        print(push_to_neo4j(result))

    print("Total routes:", result.route_count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
