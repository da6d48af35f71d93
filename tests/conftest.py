import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from mm_e2e_cli.core import config  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temp dir and drop MM_E2E_* overrides."""
    path = tmp_path / ".mm-e2e.json"
    monkeypatch.setattr(config, "CONFIG_PATH", path)
    for env in ("MM_E2E_BASE_URL", "MM_E2E_TOKEN", "MM_E2E_ADMIN_USERNAME",
                "MM_E2E_ADMIN_PASSWORD", "MM_E2E_ADMIN_EMAIL"):
        monkeypatch.delenv(env, raising=False)
    return path
