from __future__ import annotations

import pytest

from cloudstore.common import config
from cloudstore.infra.observability.metrics import set_metrics_enabled


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests independent of the developer's .env and environment."""
    monkeypatch.setattr(config, "ENV_FILE", tmp_path / ".env")
    for name in list(vars(config.Settings)):
        if name.isupper():
            monkeypatch.delenv(name, raising=False)
    config.get_settings.cache_clear()
    set_metrics_enabled(True)
    yield
    config.get_settings.cache_clear()
    set_metrics_enabled(True)
