"""Tests for loading render settings from the shared .env file."""

from __future__ import annotations

import os

import pytest

from motion_studio_mcp.config import get_config
from motion_studio_mcp.dotenv import load_dotenv, read_settings


@pytest.fixture()
def env_file(tmp_path, monkeypatch):
    """Point the default .env path at a temp file the test fills in."""
    path = tmp_path / ".env"
    monkeypatch.setattr("motion_studio_mcp.dotenv.DEFAULT_ENV_PATH", path)
    return path


class TestReadSettings:
    def test_reads_render_settings_only(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text(
            "# render defaults\n"
            "MOTION_FPS = 24\n"
            'MLFLOW_TRACKING_URI="http://127.0.0.1:5001"\n'
            "LOCAL_FILE_ACCESS_ROOT='/srv/storyboards'\n"
            "GEMINI_API_KEY=unrelated\n"
            "not an assignment\n"
        )
        assert read_settings(path) == {
            "MOTION_FPS": "24",
            "MLFLOW_TRACKING_URI": "http://127.0.0.1:5001",
            "LOCAL_FILE_ACCESS_ROOT": "/srv/storyboards",
        }

    def test_later_line_wins(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("MOTION_FPS=24\nMOTION_FPS=60\n")
        assert read_settings(path) == {"MOTION_FPS": "60"}

    def test_missing_file(self, tmp_path):
        assert read_settings(tmp_path / "missing.env") == {}


class TestLoadDotenv:
    @pytest.mark.parametrize(
        "current",
        ["", "  ", '""', "$MOTION_FPS", "${MOTION_FPS}", "${MOTION_FPS:-30}"],
    )
    def test_unset_values_are_filled(self, env_file, monkeypatch, current):
        monkeypatch.setenv("MOTION_FPS", current)
        env_file.write_text("MOTION_FPS=48\n")
        assert load_dotenv() == {"MOTION_FPS": "48"}
        assert os.environ["MOTION_FPS"] == "48"

    def test_real_value_wins(self, env_file, monkeypatch):
        monkeypatch.setenv("MOTION_FPS", "25")
        env_file.write_text("MOTION_FPS=48\n")
        assert load_dotenv() == {}
        assert os.environ["MOTION_FPS"] == "25"

    def test_other_placeholder_is_a_real_value(self, env_file, monkeypatch):
        monkeypatch.setenv("MOTION_FPS", "${OTHER_FPS}")
        env_file.write_text("MOTION_FPS=48\n")
        assert load_dotenv() == {}

    def test_unrelated_keys_not_injected(self, env_file, monkeypatch):
        monkeypatch.delenv("UNRELATED_TOKEN", raising=False)
        env_file.write_text("UNRELATED_TOKEN=abc\n")
        assert load_dotenv() == {}
        assert "UNRELATED_TOKEN" not in os.environ


class TestConfigIntegration:
    def test_config_reads_timing_from_file(self, env_file, monkeypatch, clean_config):
        env_file.write_text("MOTION_SCENE_FRAMES=120\nMOTION_TRANSITION_FRAMES=0\n")
        monkeypatch.setenv("MOTION_SCENE_FRAMES", "")
        monkeypatch.setenv("MOTION_TRANSITION_FRAMES", "${MOTION_TRANSITION_FRAMES}")
        cfg = get_config()
        assert cfg.scene_duration_frames == 120
        assert cfg.transition_frames == 0

    def test_env_var_takes_precedence(self, env_file, monkeypatch, clean_config):
        env_file.write_text("MOTION_SCENE_FRAMES=120\n")
        monkeypatch.setenv("MOTION_SCENE_FRAMES", "60")
        assert get_config().scene_duration_frames == 60
