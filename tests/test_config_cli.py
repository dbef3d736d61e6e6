"""Tests for settings loading and the console entry points."""

import logging
import os
import pathlib

import pytest

from mangapdf import cli
from mangapdf.config import CONTENT_SELECTOR, Settings, load_settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("MANGAPDF_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_defaults_without_environment(clean_env):
    settings = load_settings()

    assert settings == Settings()
    assert settings.chapter_list_path == pathlib.Path("chapters.txt")
    assert settings.max_attempts == 2
    assert settings.ready_timeout_s == 30.0
    assert settings.content_selector == CONTENT_SELECTOR


def test_environment_overrides(clean_env):
    clean_env.setenv("MANGAPDF_MAX_ATTEMPTS", "4")
    clean_env.setenv("MANGAPDF_HEADLESS", "false")
    clean_env.setenv("MANGAPDF_NAMING_POLICY", "title")
    clean_env.setenv("MANGAPDF_PDF_DIR", "out/pdfs")

    settings = load_settings()

    assert settings.max_attempts == 4
    assert settings.headless is False
    assert settings.naming_policy == "title"
    assert settings.pdf_dir == pathlib.Path("out/pdfs")


def test_invalid_values_fall_back_to_defaults(clean_env):
    clean_env.setenv("MANGAPDF_SCROLL_STEP_PX", "lots")
    clean_env.setenv("MANGAPDF_NAMING_POLICY", "emoji")

    settings = load_settings()

    assert settings.scroll_step_px == 200
    assert settings.naming_policy == "positional"


def test_env_file_is_read(clean_env, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("MANGAPDF_LISTING_PARAM=style=list\n", encoding="utf-8")

    try:
        assert load_settings(env_file).listing_param == "style=list"
    finally:
        os.environ.pop("MANGAPDF_LISTING_PARAM", None)


@pytest.mark.parametrize("entry", [cli.discover_main, cli.chapter_main])
def test_missing_url_prints_usage_and_fails(entry, capsys):
    with pytest.raises(SystemExit) as excinfo:
        entry([])

    assert excinfo.value.code != 0
    assert "usage:" in capsys.readouterr().err


def test_run_without_chapter_list_exits_nonzero(clean_env, tmp_path, restore_logging):
    clean_env.setenv("MANGAPDF_CHAPTER_LIST", str(tmp_path / "missing.txt"))
    clean_env.setenv("MANGAPDF_LOG_DIR", str(tmp_path / "logs"))

    assert cli.run_main([]) == 1
    assert (tmp_path / "logs" / "mangapdf.log").exists()
