"""Flask API for struktogramm.

This provides REST endpoints for:
- Structuring flow text or graph JSON into a block tree
- Laying out a block tree
- Exporting a block tree as graph JSON or flow text
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request
from flask_cors import CORS

from ..config.settings import Settings
from ..core.exceptions import StruktogrammError
from ..core.tree import RootBlock, load_tree
from ..pipeline import DiagramPipeline
from ..utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

settings = Settings()
configure_logging(level=settings.log_level, json_logs=settings.json_logs)

app = Flask(__name__)
CORS(app)
pipeline = DiagramPipeline(settings)


def _error(message: str, status: int, context: Optional[Dict[str, Any]] = None):
    body: Dict[str, Any] = {"error": message}
    if context:
        body["context"] = context
    return jsonify(body), status


def _json_body() -> Tuple[Optional[Dict[str, Any]], Optional[Any]]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, _error("Request body must be a JSON object", 400)
    return data, None


def _tree_from_payload(data: Dict[str, Any]) -> Optional[RootBlock]:
    if "text" in data:
        return pipeline.structure_text(str(data["text"] or ""))
    if "tree" in data:
        return load_tree(data["tree"])
    return pipeline.load_document(data)


@app.errorhandler(StruktogrammError)
def handle_struktogramm_error(exc: StruktogrammError):
    logger.info("Rejected request", extra={"path": request.path, "error": exc.message})
    return _error(exc.message, 400, exc.context)


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@app.route("/api/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@app.route("/api/structure", methods=["POST"])
def structure():
    """Structure flow text (`{"text": ...}`) or a graph document."""
    data, error = _json_body()
    if error:
        return error
    tree = _tree_from_payload(data)
    if tree is None:
        return _error("Nothing to structure: no start node", 422)
    return jsonify(tree.to_dict())


@app.route("/api/layout", methods=["POST"])
def layout():
    """Lay out `{"tree": ..., "width": n}` or any structurable payload."""
    data, error = _json_body()
    if error:
        return error
    width = data.pop("width", None)
    if width is not None and (
        isinstance(width, bool) or not isinstance(width, (int, float)) or not math.isfinite(width)
    ):
        return _error("width must be a number", 400)
    tree = _tree_from_payload(data)
    if tree is None:
        return _error("Nothing to structure: no start node", 422)
    return jsonify(pipeline.layout(tree, width).to_dict())


@app.route("/api/export", methods=["POST"])
def export():
    """Export a tree document as graph JSON, or as flow text with ?format=text."""
    data, error = _json_body()
    if error:
        return error
    tree = load_tree(data.get("tree", data))
    if request.args.get("format", "json") == "text":
        return jsonify({"text": pipeline.export_text(tree)})
    return jsonify(pipeline.export_graph(tree))


if __name__ == "__main__":
    app.run(debug=True, port=5001)
