from __future__ import annotations

import faulthandler
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

faulthandler.enable()  # Ensure crashes emit tracebacks.


@pytest.fixture()
def invoice_data() -> Dict[str, Any]:
    return {
        "name": "Bob",
        "items": [
            {"sku": "X1", "qty": 2},
            {"sku": "X2", "qty": 5},
        ],
    }


@pytest.fixture()
def invoice_values() -> Dict[int, Dict[str, Any]]:
    return {
        1: {"A": "[name]"},
        2: {"A": "[items.0.sku]", "B": "[items.0.qty]"},
    }
