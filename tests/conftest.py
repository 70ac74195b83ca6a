import os
import sys
import pytest

from vsixforge.app.settings import SETTINGS_ENV_VAR, loadSettings
from vsixforge.core.console import TESTS_ENV_VAR
from vsixforge.core.logging import clearLogContext



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")

    mode = config.getini("asyncio_mode")
    if mode != "strict":
        raise pytest.UsageError("tests only support asyncio_mode='strict'")

    # Prompts answer "y" without touching the terminal
    os.environ[TESTS_ENV_VAR] = "1"
    config.addinivalue_line("markers", "asyncio: mark a test to run inside an event loop")



@pytest.fixture(autouse=True)
def isolatedSettings(tmp_path, monkeypatch):
    """Shipped defaults only; a developer's ~/.vsixforge/settings.json5 never leaks in."""
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(tmp_path / "no-user-settings.json5"))
    loadSettings.cache_clear()
    yield
    loadSettings.cache_clear()
    clearLogContext()
