from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(scope="session")
def fixture_dir() -> Path:
    return ROOT / "tests" / "fixtures"


@pytest.fixture(scope="session")
def fixture_text(fixture_dir: Path):
    def _load(name: str) -> str:
        return (fixture_dir / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture(scope="session")
def fixture_loader(fixture_text):
    def _load(name: str) -> Any:
        return json.loads(fixture_text(name))

    return _load
