"""Unit tests for marker scanning and index arithmetic."""

from __future__ import annotations

from sheetschema.markers import (
    Modifier,
    fill_wildcards,
    increment_markers,
    increment_path,
    is_repeatable,
    normalize_wildcards,
    rewrite_markers,
    scan_markers,
    wildcard_indices,
)


def test_scan_reads_modifiers_and_paths() -> None:
    markers = scan_markers("[name] [=flag] [$! paid] [$=note.text]")

    assert [m.modifier for m in markers] == [
        Modifier.NONE,
        Modifier.EQ,
        Modifier.CELL_NOT,
        Modifier.CELL_EQ,
    ]
    assert [m.path for m in markers] == ["name", "flag", "paid", "note.text"]
    assert markers[2].prefix == "$! "
    assert markers[2].text == "[$! paid]"


def test_scan_skips_malformed_brackets() -> None:
    assert scan_markers("[ name] [$name] [1abc] [a-b] [open") == []
    assert [m.path for m in scan_markers("[[items.*.sku]]")] == ["items.*.sku"]
    assert scan_markers(42) == []


def test_rewrite_keeps_markers_when_replacement_is_none() -> None:
    text = "A [x] B [y]"

    assert rewrite_markers(text, lambda m: "1" if m.path == "x" else None) == "A 1 B [y]"


def test_wildcard_helpers() -> None:
    assert normalize_wildcards("items.*.rows.*.v") == "items.0.rows.0.v"
    assert wildcard_indices("items.0.rows.0.v") == "items.*.rows.*.v"
    assert fill_wildcards("[items.*.sku] / [$=items.*.flag]") == "[items.0.sku] / [$=items.0.flag]"


def test_increment_path_first_and_last_segments() -> None:
    assert increment_path("items.0.sku", first=True) == "items.1.sku"
    assert increment_path("items.0.sku", first=False) is None
    assert increment_path("grid.0.3.v", first=False) == "grid.0.4.v"
    assert increment_path("grid.0.3.v", first=True, step=2) == "grid.2.3.v"
    assert increment_path("name", first=True) is None


def test_increment_markers_touches_every_marker() -> None:
    value = "[items.0.sku] x [$!items.0.paid] [name]"

    assert increment_markers(value, first=True) == "[items.1.sku] x [$!items.1.paid] [name]"
    assert increment_markers(7, first=True) == 7


def test_is_repeatable_accepts_wildcards_and_zero_indices() -> None:
    assert is_repeatable("items.*.sku")
    assert is_repeatable("items.0.sku")
    assert is_repeatable("grid.0.0.v")
    assert not is_repeatable("items.1.sku")
    assert not is_repeatable("grid.0.2.v")
    assert not is_repeatable("name")
