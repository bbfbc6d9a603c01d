import json
import logging

import pytest

from ytx.config import config_path, get_default_config, load_config, merge_overrides
from ytx.defaults import CONFIG_FILE, DEFAULT_CONFIG
from ytx.error_handler import InvalidInput


def write_config(path, data):
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    monkeypatch.delenv("YTX_CONFIG", raising=False)


def test_defaults_when_no_file(monkeypatch, tmp_path):
    monkeypatch.setenv("YTX_CONFIG", str(tmp_path / "missing.json"))
    assert load_config() == DEFAULT_CONFIG


def test_default_config_is_a_copy():
    config = get_default_config()
    config["format"] = "srt"
    assert DEFAULT_CONFIG["format"] == "txt"


def test_path_resolution_order(monkeypatch, tmp_path):
    assert config_path() == CONFIG_FILE
    monkeypatch.setenv("YTX_CONFIG", str(tmp_path / "env.json"))
    assert config_path() == tmp_path / "env.json"
    assert config_path(tmp_path / "explicit.json") == tmp_path / "explicit.json"


def test_file_values_merge_over_defaults(tmp_path):
    path = write_config(tmp_path / "c.json", {"format": "srt", "keep_audio": True, "locale": "de-DE"})
    config = load_config(path)
    assert config["format"] == "srt"
    assert config["keep_audio"] is True
    assert config["locale"] == "de-DE"
    assert config["model"] == DEFAULT_CONFIG["model"]


def test_env_var_is_used(monkeypatch, tmp_path):
    path = write_config(tmp_path / "env.json", {"model": "tiny"})
    monkeypatch.setenv("YTX_CONFIG", str(path))
    assert load_config()["model"] == "tiny"


def test_unknown_keys_warn_and_are_dropped(tmp_path, caplog):
    path = write_config(tmp_path / "c.json", {"colour": "blue"})
    with caplog.at_level(logging.WARNING, logger="ytx.config"):
        config = load_config(path)
    assert "colour" not in config
    assert "colour" in caplog.text


@pytest.mark.parametrize("data", [
    "{not json",
    "[1, 2, 3]",
    {"keep_audio": "yes"},
    {"max_line_length": True},
    {"max_line_length": 0},
    {"format": None},
])
def test_invalid_config_raises(tmp_path, data):
    path = write_config(tmp_path / "c.json", data)
    with pytest.raises(InvalidInput):
        load_config(path)


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(InvalidInput):
        load_config(tmp_path / "nope.json")


def test_merge_overrides_skips_none():
    merged = merge_overrides({"format": "txt", "locale": "en-US"}, format="srt", locale=None)
    assert merged == {"format": "srt", "locale": "en-US"}
