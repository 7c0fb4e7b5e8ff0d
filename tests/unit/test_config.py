"""Unit tests for configuration loading."""

import sys
import tomllib
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from affirmloop.config import (
    DEFAULT_CONFIG,
    DEFAULT_DATA_DIR,
    default_config,
    generate_config,
    load_config,
    parse_config,
)


def _defaults() -> dict:
    return tomllib.loads(DEFAULT_CONFIG)


class TestParseConfig:
    """Test validation and env var overrides."""

    def test_bundled_defaults(self) -> None:
        """Test the values shipped in the default config."""
        config = default_config()

        assert config.engine.line_count == 6
        assert config.engine.exact_threshold == 0.75
        assert config.engine.pooled_threshold == 0.65
        assert config.engine.min_pool_lines == 3
        assert config.costs.pooled == 0.10
        assert config.costs.generated == 0.21
        assert config.generation.model == "gpt-4o-mini"
        assert config.speech.provider == "elevenlabs"
        assert config.speech.pace == "slow"
        assert config.storage.data_dir == DEFAULT_DATA_DIR
        assert config.storage.db_path == DEFAULT_DATA_DIR / "affirmloop.db"
        assert config.telemetry.buffer_size == 1000

    def test_missing_values_reported(self) -> None:
        """Test that every missing required key is listed."""
        data = _defaults()
        del data["engine"]["exact_threshold"]
        del data["speech"]["voice"]

        with pytest.raises(ValueError, match="engine.exact_threshold, speech.voice"):
            parse_config(data)

    def test_threshold_out_of_range(self) -> None:
        data = _defaults()
        data["engine"]["pooled_threshold"] = 1.5

        with pytest.raises(ValueError, match="pooled_threshold"):
            parse_config(data)

    def test_line_count_must_be_positive(self) -> None:
        data = _defaults()
        data["engine"]["line_count"] = 0

        with pytest.raises(ValueError, match="line_count"):
            parse_config(data)

    def test_env_overrides(self, monkeypatch, tmp_path) -> None:
        """Test that env vars win over file values."""
        monkeypatch.setenv("AFFIRMLOOP_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("AFFIRMLOOP_VOICE", "confident")
        monkeypatch.setenv("AFFIRMLOOP_PACE", "normal")
        monkeypatch.setenv("AFFIRMLOOP_GENERATION_MODEL", "gpt-4o")

        config = parse_config(_defaults())

        assert config.storage.data_dir == tmp_path
        assert config.storage.audio_dir == tmp_path / "audio"
        assert config.speech.voice == "confident"
        assert config.speech.pace == "normal"
        assert config.generation.model == "gpt-4o"

    def test_data_dir_from_file(self, tmp_path) -> None:
        data = _defaults()
        data["storage"]["data_dir"] = str(tmp_path / "lib")

        assert parse_config(data).storage.data_dir == tmp_path / "lib"


class TestLoadConfig:
    """Test config file loading."""

    def test_missing_file_generated_then_exit(self, tmp_path, capsys) -> None:
        """Test that a first run writes the defaults and exits."""
        path = tmp_path / "config.toml"

        with pytest.raises(SystemExit) as exc_info:
            load_config(path)

        assert exc_info.value.code == 1
        assert path.read_text() == DEFAULT_CONFIG
        assert "No config found" in capsys.readouterr().err

    def test_invalid_file_exits(self, tmp_path, capsys) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[engine]\nline_count = 6\n")

        with pytest.raises(SystemExit):
            load_config(path)

        assert "Missing required config values" in capsys.readouterr().err

    def test_loaded_config_cached(self, tmp_path) -> None:
        """Test that the same path yields the same object."""
        path = generate_config(tmp_path / "config.toml")

        assert load_config(path) is load_config(path)
