"""CLI tests driven through Typer's test runner."""

from __future__ import annotations

import json
from pathlib import Path

from openpyxl import Workbook, load_workbook
from typer.testing import CliRunner

from sheetschema.cli import app

runner = CliRunner()


def _template(path: Path) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = "Invoice"
    ws["A1"] = "[name]"
    ws["A2"] = "[items.*.sku]"
    ws["B2"] = "[items.*.qty]"
    wb.save(path)
    return path


def _data(path: Path) -> Path:
    path.write_text(
        "name: Bob\nitems:\n  - sku: X1\n    qty: 2\n  - sku: X2\n    qty: 5\n",
        encoding="utf-8",
    )
    return path


def test_schema_command_prints_summary(tmp_path: Path) -> None:
    template = _template(tmp_path / "t.xlsx")
    data = _data(tmp_path / "data.yaml")

    result = runner.invoke(app, ["schema", str(template), "--data", str(data)])

    assert result.exit_code == 0, result.output
    assert "Row actions: add@3" in result.output
    assert "Resolved 5 cells" in result.output


def test_schema_command_json(tmp_path: Path) -> None:
    template = _template(tmp_path / "t.xlsx")
    data = tmp_path / "data.json"
    data.write_text(json.dumps({"name": "Bob", "items": [{"sku": "X1", "qty": 2}]}), encoding="utf-8")

    result = runner.invoke(app, ["schema", str(template), "--data", str(data), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["rows"] == []
    assert payload["cells"] == {"A1": "Bob", "A2": "X1", "B2": 2}


def test_render_command_writes_workbook(tmp_path: Path) -> None:
    template = _template(tmp_path / "t.xlsx")
    data = _data(tmp_path / "data.yaml")
    out = tmp_path / "out.xlsx"

    result = runner.invoke(app, ["render", str(template), "--data", str(data), "--out", str(out)])

    assert result.exit_code == 0, result.output
    assert "Written:" in result.output
    assert load_workbook(out)["Invoice"]["A3"].value == "X2"


def test_render_command_rejects_unknown_sheet(tmp_path: Path) -> None:
    template = _template(tmp_path / "t.xlsx")
    data = _data(tmp_path / "data.yaml")

    result = runner.invoke(
        app,
        ["render", str(template), "--data", str(data), "--out", str(tmp_path / "o.xlsx"), "--sheet", "Nope"],
    )

    assert result.exit_code != 0


def test_run_command_uses_job_file(tmp_path: Path) -> None:
    _template(tmp_path / "t.xlsx")
    _data(tmp_path / "data.yaml")
    job = tmp_path / "job.yaml"
    job.write_text("template: t.xlsx\noutput: build/out.xlsx\ndata_file: data.yaml\n", encoding="utf-8")

    result = runner.invoke(app, ["run", str(job)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "build" / "out.xlsx").exists()
