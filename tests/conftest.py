from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_api(monkeypatch):
    """Make tests/fixtures/sample_api.py importable as ``sample_api``."""
    monkeypatch.syspath_prepend(str(FIXTURES))
    return "sample_api"
