from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


import pytest


@pytest.fixture
def method_body():
    def _wrap(statements: str) -> str:
        return "class X { void m() { " + statements + " } }"

    return _wrap
