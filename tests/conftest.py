from __future__ import annotations

from importlib import resources
from pathlib import Path

import pytest

from redgearctl.core.model import DeviceProfile
from redgearctl.core.profile_loader import load_profiles


@pytest.fixture(autouse=True)
def isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


@pytest.fixture
def profile() -> DeviceProfile:
    return load_profiles().profiles["redgear_a15"]


@pytest.fixture
def packaged_profile_text() -> str:
    return resources.files("redgearctl.profiles").joinpath("redgear_a15.yaml").read_text(encoding="utf-8")
