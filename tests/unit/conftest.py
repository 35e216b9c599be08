"""
Unit test configuration for tmm.

Every unit test runs against an empty config location and without tmux
related environment variables, so the user's setup never leaks in.
"""

import pytest

from tmm.mocks import MockTmux

from fixtures import FakeClock


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_path = tmp_path / "tmm" / "config.yaml"
    monkeypatch.setenv("TMM_CONFIG", str(config_path))
    for var in ("TMM_TMUX_SOCKET", "TMM_LOG_LEVEL", "TMM_LOG_FILE", "TMUX", "TMUX_PANE"):
        monkeypatch.delenv(var, raising=False)
    yield config_path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_tmux():
    return MockTmux()
