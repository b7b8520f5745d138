# playground.py
import json
import os
import tempfile
from typing import Dict, List

import gradio as gr
import pandas as pd

from routegraph.core.analyzer import analyze_project
from routegraph.core.neo4j_writer import push_to_neo4j
from routegraph.errors import RouteGraphError
from routegraph.exporter.csv_exporter import export_to_csv
from routegraph.scanner.elysia_parser import extract_structure

ROUTE_COLUMNS = ["file", "line", "method", "path", "owner"]


# ======================= TABLE HELPERS =======================

def record_frame(record) -> pd.DataFrame:
    rows = [
        {"line": r.line, "method": r.method, "path": r.path, "owner": r.owner or ""}
        for r in record.routes
    ]
    return pd.DataFrame(rows, columns=["line", "method", "path", "owner"])


def routes_frame(result) -> pd.DataFrame:
    rows: List[Dict] = []
    for path in result.sorted_files():
        for route in result.routes[path]:
            rows.append({
                "file": path,
                "line": route.line,
                "method": route.method,
                "path": route.path,
                "owner": route.owner or "",
            })
    return pd.DataFrame(rows, columns=ROUTE_COLUMNS)


def mounts_view(result) -> str:
    mounts = [
        {"from": str(e.source) if e.source else "<root>", "to": str(e.target), "prefix": e.prefix}
        for e in result.edges
    ]
    return json.dumps({"mounts": mounts, "failures": result.failures}, ensure_ascii=False, indent=2)


# ======================= ACTIONS =======================

def do_extract(code_text: str, filename_hint: str):
    if not code_text.strip():
        return "⚠️ Code is empty.", pd.DataFrame(columns=["line", "method", "path", "owner"])
    try:
        record = extract_structure(code_text, filename=filename_hint or "<memory>.ts")
    except RouteGraphError as e:
        return f"❌ Parse error: {e}", pd.DataFrame(columns=["line", "method", "path", "owner"])
    return json.dumps(record.to_dict(), ensure_ascii=False, indent=2), record_frame(record)


def _scan(folder: str):
    """Like ``do_scan`` but also hands back the ScanResult (None on failure)."""
    if not folder or not os.path.isdir(folder):
        return "⚠️ Folder not found.", pd.DataFrame(columns=ROUTE_COLUMNS), None, None
    try:
        result = analyze_project(folder)
    except RouteGraphError as e:
        return f"❌ Scan error: {e}", pd.DataFrame(columns=ROUTE_COLUMNS), None, None

    fd, tmp_path = tempfile.mkstemp(prefix="routegraph_", suffix=".csv")
    os.close(fd)
    export_to_csv(result, tmp_path)
    return mounts_view(result), routes_frame(result), tmp_path, result


def do_scan(folder: str):
    summary, df, csv_file, _ = _scan(folder)
    return summary, df, csv_file


def do_scan_and_push(folder: str):
    summary, df, csv_file, result = _scan(folder)
    if result is None:
        return summary, df, csv_file
    try:
        msg = push_to_neo4j(result)
    except Exception as e:
        msg = f"Neo4j push ERROR: {e}"
    return summary + f"\n\n# {msg}", df, csv_file


# ======================= GRADIO UI =======================

def build_demo():
    with gr.Blocks(title="routegraph playground") as demo:
        gr.Markdown("## 🛣️ routegraph playground\nPaste one file to see what the extractor finds, or scan a folder to resolve mount prefixes.")

        with gr.Tab("Single file"):
            with gr.Row():
                code_in = gr.Code(label="Elysia code (TS)", language="typescript", lines=20)
                file_hint = gr.Textbox(label="File name", placeholder="index.ts")
            btn_extract = gr.Button("🧩 Extract")
            record_out = gr.Textbox(label="Structural record (JSON)", lines=18)
            record_df = gr.Dataframe(label="line / method / path / owner", wrap=True)
            btn_extract.click(do_extract, inputs=[code_in, file_hint], outputs=[record_out, record_df])

        with gr.Tab("Project"):
            folder_in = gr.Textbox(label="Project folder", placeholder="/path/to/project")
            with gr.Row():
                btn_scan = gr.Button("🔎 Scan")
                btn_push = gr.Button("🚀 Scan & Push to Neo4j")
            mounts_out = gr.Textbox(label="Mounts (JSON)", lines=12)
            routes_df = gr.Dataframe(label="Resolved routes", wrap=True)
            file_out = gr.File(label="routes.csv")
            btn_scan.click(do_scan, inputs=[folder_in], outputs=[mounts_out, routes_df, file_out])
            btn_push.click(do_scan_and_push, inputs=[folder_in], outputs=[mounts_out, routes_df, file_out])
    return demo


if __name__ == "__main__":
    build_demo().launch(share=False, server_name="127.0.0.1", server_port=7863)
