import json
import logging

import pytest

from hn_fetch import config
from hn_fetch.constants import HN_API_BASE, HN_REQUEST_TIMEOUT
from hn_fetch.logging_config import configure_logging


def test_missing_config_uses_defaults(tmp_path):
    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(config, "CONFIG_FILE", tmp_path / "missing.json")
        assert config.load_config() == {}
        settings = config.get_settings()

    assert settings.base_url == HN_API_BASE
    assert settings.timeout == HN_REQUEST_TIMEOUT


def test_config_file_overrides(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {"base_url": "http://mirror.test/v0/", "timeout": 3, "user_agent": "bot/1.0"}
        )
    )
    settings = config.get_settings(path)

    assert settings.base_url == "http://mirror.test/v0"
    assert settings.timeout == 3.0
    assert settings.user_agent == "bot/1.0"


def test_load_corrupt_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("invalid json{")
    assert config.load_config(path) == {}
    assert config.get_settings(path) == config.Settings()


def test_non_object_config_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]")
    assert config.load_config(path) == {}


def test_bad_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"timeout": "soon"}))
    assert config.get_settings(path) == config.Settings()


def test_configure_logging_quiets_transport_loggers():
    configure_logging("DEBUG", json_logs=True)
    assert logging.getLogger("httpx").level == logging.WARNING
    configure_logging("ERROR", json_logs=True)
    assert logging.getLogger("httpcore").level == logging.ERROR
