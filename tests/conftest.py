from __future__ import annotations

import pytest

from tilefactors import runtime


@pytest.fixture(autouse=True)
def fresh_runtime(monkeypatch):
    """Every test starts from built-in defaults (no settings file, no CFG leftovers)."""
    monkeypatch.delenv("TILEFACTORS_CONFIG", raising=False)
    runtime.reset()
    yield
    runtime.reset()
