import logging
import os
import shutil
import tempfile

from flask import Flask, abort, render_template, request, send_file

from routegraph import config
from routegraph.core.analyzer import analyze_project
from routegraph.errors import RouteGraphError
from routegraph.exporter.csv_exporter import export_to_csv

logger = logging.getLogger("routegraph.web")

app = Flask(__name__)
app.config["UPLOAD_FOLDER"] = config.UPLOAD_DIR or tempfile.mkdtemp(prefix="routegraph_")
app.config["NEO4J_ENABLED"] = config.NEO4J_ENABLED


def _safe_relpath(filename):
    parts = [p for p in filename.replace("\\", "/").split("/") if p not in ("", ".")]
    if not parts or ".." in parts:
        return None
    return os.path.join(*parts)


def _save_upload(files, target_dir):
    shutil.rmtree(target_dir, ignore_errors=True)
    os.makedirs(target_dir, exist_ok=True)
    saved = 0
    for file in files:
        rel = _safe_relpath(file.filename or "")
        if rel is None:
            continue
        path = os.path.join(target_dir, rel)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file.save(path)
        saved += 1
    return saved


@app.route("/", methods=["GET", "POST"])
def index():
    result = None
    error = None
    message = None
    if request.method == "POST":
        temp_dir = os.path.join(app.config["UPLOAD_FOLDER"], "session")
        _save_upload(request.files.getlist("folder"), temp_dir)

        try:
            result = analyze_project(temp_dir)
        except RouteGraphError as e:
            error = str(e)
        else:
            export_to_csv(result, os.path.join(app.config["UPLOAD_FOLDER"], "routes.csv"))
            if app.config["NEO4J_ENABLED"]:
                from routegraph.core.neo4j_writer import push_to_neo4j

                message = push_to_neo4j(result)

    return render_template("index.html", result=result, error=error, message=message,
                           root=os.path.join(app.config["UPLOAD_FOLDER"], "session"))


@app.route("/download")
def download():
    path = os.path.join(app.config["UPLOAD_FOLDER"], "routes.csv")
    if not os.path.exists(path):
        abort(404)
    return send_file(path, as_attachment=True, download_name="routes.csv")


if __name__ == "__main__":
    app.run(debug=True)
