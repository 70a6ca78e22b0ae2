import pytest

from helpers import FakeScheduler, Notifications
from pharmacy_pos import config


@pytest.fixture(autouse=True)
def _debug_log_in_tmp(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DEBUG_LOG_PATH", str(tmp_path / "debug.log"))


@pytest.fixture
def notifications():
    return Notifications()


@pytest.fixture
def scheduler():
    return FakeScheduler()
