import pytest

from tzpayroll.core.config import settings

@pytest.fixture(autouse=True)
def log_to_tmp(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "LOG_PATH", str(tmp_path / "logs"))
