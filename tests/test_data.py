"""Unit tests for payload canonicalization and flattening."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import pandas as pd
from pydantic import BaseModel

from sheetschema.data import canonize_data, flatten, is_set, path_is_set


class Line(BaseModel):
    sku: str
    qty: int


class Order(BaseModel):
    number: str
    lines: List[Line]


@dataclass
class Customer:
    name: str
    tags: list


def test_flatten_indexes_lists_and_drops_empty_containers() -> None:
    data = {"a": [], "b": {}, "c": {"d": 1}, "items": [{"sku": "X"}, {"sku": None}]}

    assert flatten(data) == {"c.d": 1, "items.0.sku": "X", "items.1.sku": None}


def test_canonize_converts_models_dataclasses_and_converters() -> None:
    order = Order(number="A-1", lines=[Line(sku="X1", qty=2)])

    assert canonize_data(order) == {"number": "A-1", "lines": [{"sku": "X1", "qty": 2}]}
    assert canonize_data(Customer(name="Ann", tags=[])) == {"name": "Ann", "tags": []}
    assert canonize_data({"x": 1}, converter=lambda value: {"wrapped": value}) == {"wrapped": {"x": 1}}


def test_flatten_nested_objects_and_frames() -> None:
    frame = pd.DataFrame([{"a": 1}, {"a": None}])
    data = {"order": Order(number="A-1", lines=[Line(sku="X1", qty=2)]), "rows": frame}

    flat = flatten(data)

    assert flat["order.lines.0.sku"] == "X1"
    assert flat["rows.0.a"] == 1
    assert flat["rows.1.a"] is None


def test_is_set_follows_falsy_rules() -> None:
    assert not is_set(None)
    assert not is_set("")
    assert not is_set(0)
    assert not is_set([])
    assert not is_set(float("nan"))
    assert is_set("0")
    assert is_set("x")
    assert is_set(3)


def test_path_is_set_checks_descendants() -> None:
    data = {"items.0.sku": "", "items.1.sku": "X2", "flag": 0}

    assert path_is_set("items", data)
    assert not path_is_set("flag", data)
    assert not path_is_set("missing", data)
    assert not path_is_set("items.0", data)
