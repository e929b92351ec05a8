"""Unit tests for the openpyxl template reader and renderer."""

# Module responsibilities:
# - Validate rendering of expanded tables with styles, formulas and merges.
# - Assert failures for missing templates and sheets.

from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

from sheetschema import (
    ConfigError,
    RowAction,
    RowActionKind,
    Schema,
    apply_schema,
    read_template,
    render_template,
)
from sheetschema.excel_writer import _shift_bounds


def _build_invoice_template(path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws.title = "Invoice"
    ws["A1"] = "[name]"
    ws["A2"] = "[items.*.sku]"
    ws["A2"].font = Font(bold=True)
    ws["B2"] = "[items.*.qty]"
    ws["B2"].number_format = "0.00"
    ws["A3"] = "Total"
    ws["B3"] = "=SUM(B2:B2)"
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)


def _invoice_data() -> dict:
    return {"name": "Bob", "items": [{"sku": "X1", "qty": 2}, {"sku": "X2", "qty": 5}]}


def test_read_template_returns_values_and_merges(tmp_path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "[title]"
    ws["B3"] = 7
    ws.merge_cells("A1:C1")

    values, merges = read_template(ws)

    assert values == {1: {"A": "[title]"}, 3: {"B": 7}}
    assert merges == ["A1:C1"]


def test_render_template_expands_rows(tmp_path: Path) -> None:
    template_path = tmp_path / "template.xlsx"
    _build_invoice_template(template_path)

    output = render_template(template_path, _invoice_data(), tmp_path / "out" / "invoice.xlsx")

    assert output.exists()
    ws = load_workbook(output)["Invoice"]
    assert ws["A1"].value == "Bob"
    assert [ws["A2"].value, ws["B2"].value] == ["X1", 2]
    assert [ws["A3"].value, ws["B3"].value] == ["X2", 5]
    assert ws["A4"].value == "Total"
    assert ws["B4"].value == "=SUM(B2:B3)"
    assert ws["A3"].font.bold
    assert ws["B3"].number_format == "0.00"


def test_render_template_keeps_merges_aligned(tmp_path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "[title]"
    ws["A2"] = "[items.*.sku]"
    ws["B2"] = "[items.*.qty]"
    ws.merge_cells("B2:C2")
    ws["A4"] = "Footer"
    ws.merge_cells("A4:C4")
    template_path = tmp_path / "merged.xlsx"
    wb.save(template_path)

    data = {"title": "T", "items": [{"sku": "a", "qty": 1}, {"sku": "b", "qty": 2}]}
    output = render_template(template_path, data, tmp_path / "merged_out.xlsx")

    ws_out = load_workbook(output).active
    assert {str(r.coord) for r in ws_out.merged_cells.ranges} == {"B2:C2", "B3:C3", "A5:C5"}
    assert ws_out["B3"].value == 2
    assert ws_out["A5"].value == "Footer"


def test_render_template_deletes_conditional_rows(tmp_path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "[=discount]Discount applied"
    ws["A2"] = "[name]"
    template_path = tmp_path / "conditional.xlsx"
    wb.save(template_path)

    output = render_template(template_path, {"name": "Bob", "discount": 0}, tmp_path / "out.xlsx")

    ws_out = load_workbook(output).active
    assert ws_out["A1"].value == "Bob"
    assert ws_out["A2"].value is None


def test_dry_run_does_not_write(tmp_path: Path) -> None:
    template_path = tmp_path / "template.xlsx"
    _build_invoice_template(template_path)
    out_path = tmp_path / "dry.xlsx"

    result = render_template(template_path, _invoice_data(), out_path, dry_run=True)

    assert result == out_path
    assert not out_path.exists()


def test_missing_template_or_sheet_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        render_template(tmp_path / "absent.xlsx", {}, tmp_path / "out.xlsx")

    template_path = tmp_path / "template.xlsx"
    _build_invoice_template(template_path)
    with pytest.raises(ConfigError, match="Nope"):
        render_template(template_path, _invoice_data(), tmp_path / "out.xlsx", sheet="Nope")


def test_apply_schema_calls_callable_values() -> None:
    wb = Workbook()
    ws = wb.active
    schema = Schema()
    seen = []

    def _writer(sheet, cell):
        seen.append(cell.coordinate)
        return "called"

    schema.add_data(2, "B", _writer)
    apply_schema(ws, schema)

    assert seen == ["B2"]
    assert ws["B2"].value == "called"


def test_shift_bounds_drops_merges_collapsing_to_one_cell() -> None:
    delete_second = RowAction(RowActionKind.DELETE, 2)

    assert _shift_bounds((1, 1, 1, 2), delete_second) is None
    assert _shift_bounds((1, 1, 2, 2), delete_second) == (1, 1, 2, 1)
    assert _shift_bounds((1, 3, 1, 4), delete_second) == (1, 2, 1, 3)
