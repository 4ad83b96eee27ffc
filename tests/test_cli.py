"""Tests for the struktogramm command line."""

import io
import json

import pytest

from struktogramm.cli import build_parser, main


@pytest.fixture
def flow_file(tmp_path, scenario_a):
    path = tmp_path / "flow.mmd"
    path.write_text(scenario_a, encoding="utf-8")
    return path


def test_structure_prints_tree(flow_file, capsys):
    assert main(["structure", str(flow_file)]) == 0

    tree = json.loads(capsys.readouterr().out)
    assert tree["type"] == "root"
    assert tree["children"][1]["label"] == "x>0"


def test_structure_reads_stdin(monkeypatch, capsys, scenario_b):
    monkeypatch.setattr("sys.stdin", io.StringIO(scenario_b))

    assert main(["structure", "-"]) == 0
    tree = json.loads(capsys.readouterr().out)
    assert tree["children"][0]["type"] == "loop"


def test_layout_with_width(flow_file, capsys):
    assert main(["layout", str(flow_file), "--width", "1000"]) == 0

    geometry = json.loads(capsys.readouterr().out)
    assert geometry["width"] == 1000
    assert len(geometry["root"]["blocks"]) == 3


def test_export_text_to_file(flow_file, tmp_path):
    out = tmp_path / "out.mmd"
    assert main(["export", str(flow_file), "--format", "text", "-o", str(out)]) == 0

    text = out.read_text(encoding="utf-8")
    assert text.startswith("graph TD\n")
    assert "-->|Ja|" in text


def test_export_tree_document_as_graph(tmp_path, capsys, mixed_tree):
    path = tmp_path / "tree.json"
    path.write_text(json.dumps(mixed_tree.to_dict()), encoding="utf-8")

    assert main(["export", str(path)]) == 0
    graph = json.loads(capsys.readouterr().out)
    assert {"nodes", "edges"} == set(graph)


def test_empty_input_fails(tmp_path, capsys):
    path = tmp_path / "empty.mmd"
    path.write_text("graph TD\n", encoding="utf-8")

    assert main(["structure", str(path)]) == 1
    assert "error: Flow text has no nodes" in capsys.readouterr().err


def test_missing_file_fails(tmp_path, capsys):
    assert main(["structure", str(tmp_path / "nope.mmd")]) == 1
    assert "error:" in capsys.readouterr().err


def test_invalid_tree_document_fails(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"type": "root", "children": [{"type": "goto"}]}), encoding="utf-8")

    assert main(["structure", str(path)]) == 1
    assert "Invalid structured tree document" in capsys.readouterr().err


def test_subcommand_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_layout_non_finite_width_uses_minimum(flow_file, capsys):
    assert main(["layout", str(flow_file), "--width", "nan"]) == 0

    geometry = json.loads(capsys.readouterr().out)
    assert geometry["width"] == 800
