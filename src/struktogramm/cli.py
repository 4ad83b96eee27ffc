"""CLI entrypoint: structure, lay out and export diagrams."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from .config.settings import Settings
from .core.exceptions import NothingToStructureError, StruktogrammError
from .core.tree import RootBlock
from .pipeline import DiagramPipeline
from .utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def load_input(pipeline: DiagramPipeline, source: str) -> RootBlock:
    """Structure flow text or load a JSON document (graph or tree)."""
    content = read_input(source)
    stripped = content.lstrip()
    if stripped.startswith("{"):
        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            data = None
        if data is not None:
            tree = pipeline.load_document(data)
            if tree is None:
                raise NothingToStructureError("Graph document has no start node", context={"input": source})
            return tree

    tree = pipeline.structure_text(content)
    if tree is None:
        raise NothingToStructureError("Flow text has no nodes", context={"input": source})
    return tree


def write_output(payload: Any, output: Optional[str]) -> None:
    text = payload if isinstance(payload, str) else json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    if output:
        Path(output).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="struktogramm",
        description="Convert flow graphs to structured diagrams and back",
    )
    parser.add_argument("--log-level", default=None, help="Log level (default from settings)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    sub = parser.add_subparsers(dest="command", required=True)

    structure = sub.add_parser("structure", help="Print the structured tree as JSON")
    structure.add_argument("input", help="Flow text or JSON document ('-' for stdin)")
    structure.add_argument("-o", "--output", help="Write to a file instead of stdout")

    layout = sub.add_parser("layout", help="Print the diagram geometry as JSON")
    layout.add_argument("input", help="Flow text or JSON document ('-' for stdin)")
    layout.add_argument("--width", type=float, default=None, help="Requested diagram width")
    layout.add_argument("-o", "--output", help="Write to a file instead of stdout")

    export = sub.add_parser("export", help="Export the structured tree as a flow graph")
    export.add_argument("input", help="Flow text or JSON document ('-' for stdin)")
    export.add_argument("--format", choices=("json", "text"), default="json")
    export.add_argument("-o", "--output", help="Write to a file instead of stdout")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(level=args.log_level or settings.log_level, json_logs=args.json_logs or settings.json_logs)
    pipeline = DiagramPipeline(settings)

    try:
        tree = load_input(pipeline, args.input)
        if args.command == "structure":
            write_output(tree.to_dict(), args.output)
        elif args.command == "layout":
            write_output(pipeline.layout(tree, args.width).to_dict(), args.output)
        elif args.command == "export":
            if args.format == "text":
                write_output(pipeline.export_text(tree), args.output)
            else:
                write_output(pipeline.export_graph(tree), args.output)
    except StruktogrammError as exc:
        logger.error("Conversion failed", extra={"error": str(exc)})
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
