"""Root test configuration: hermetic config environment for every test"""

import pytest

from mdbridge.config import ENV_PREFIX, Settings


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run each test in an empty directory with no MDBRIDGE_* variables set."""
    for name in Settings.model_fields:
        monkeypatch.delenv(f"{ENV_PREFIX}{name.upper()}", raising=False)
    monkeypatch.chdir(tmp_path)
