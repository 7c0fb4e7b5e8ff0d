"""Integration tests for the affirmloop command line."""

import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from affirmloop.cli import app
from affirmloop.config import generate_config
from test_helpers import FakeSpeechProvider, FakeTextGenerator

runner = CliRunner()


class FakeRegistry:
    """Stands in for ProviderRegistry so --speak never reaches ElevenLabs."""

    provider = FakeSpeechProvider()

    @classmethod
    def create(cls, name: str, **kwargs) -> FakeSpeechProvider:
        return cls.provider


@pytest.fixture
def config_path(tmp_path, monkeypatch) -> Path:
    """Generated config file with data under a temporary directory."""
    monkeypatch.setenv("AFFIRMLOOP_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr(
        "affirmloop.engine.OpenAITextGenerator", lambda **kwargs: FakeTextGenerator()
    )
    FakeRegistry.provider = FakeSpeechProvider()
    monkeypatch.setattr("affirmloop.engine.ProviderRegistry", FakeRegistry)
    return generate_config(tmp_path / "config.toml")


def invoke(config_path: Path, *args: str):
    return runner.invoke(app, ["--config", str(config_path), *args])


def record_id_from(output: str) -> str:
    for line in output.splitlines():
        if line.startswith("Record: "):
            return line.removeprefix("Record: ").strip()
    raise AssertionError(f"No record id in output:\n{output}")


class TestSeedCommand:
    def test_seed_is_idempotent(self, config_path) -> None:
        """Test that seeding twice reports nothing new the second time."""
        first = invoke(config_path, "seed")
        second = invoke(config_path, "seed")

        assert first.exit_code == 0
        assert "Seeded 24 new lines and 4 new templates" in first.output
        assert second.exit_code == 0
        assert "Seeded 0 new lines and 0 new templates" in second.output


class TestResolveCommand:
    def test_exact_resolution(self, config_path) -> None:
        """Test that a seed intent prints the exact tier and its lines."""
        invoke(config_path, "seed")

        result = invoke(config_path, "resolve", "help me sleep better", "--goal", "sleep")

        assert result.exit_code == 0
        assert "Tier: exact  Cost: $0.00  Confidence: 1.00" in result.output
        assert "  1. I let my body soften and release the day." in result.output
        assert record_id_from(result.output)

    def test_generated_resolution(self, config_path) -> None:
        result = invoke(
            config_path, "resolve", "learn quantum physics while meditating", "-g", "focus"
        )

        assert result.exit_code == 0
        assert "Tier: generated  Cost: $0.21" in result.output
        assert "  6. I welcome each equation as a quiet challenge" in result.output

    def test_resolve_with_speech(self, config_path) -> None:
        """Test that --speak prints one audio file per line."""
        invoke(config_path, "seed")

        result = invoke(
            config_path,
            "resolve",
            "help me focus and be productive",
            "-g",
            "focus",
            "--speak",
            "--pace",
            "normal",
        )

        assert result.exit_code == 0
        assert result.output.count("Audio: ") == 6
        assert all(call[2] == "normal" for call in FakeRegistry.provider.calls)

    def test_invalid_goal(self, config_path) -> None:
        result = invoke(config_path, "resolve", "anything", "--goal", "wealth")
        assert result.exit_code == 2


class TestFeedbackCommand:
    def test_feedback_recorded_once(self, config_path) -> None:
        """Test that a second submission is reported as ignored, not an error."""
        invoke(config_path, "seed")
        resolved = invoke(config_path, "resolve", "help me sleep better", "-g", "sleep")
        record_id = record_id_from(resolved.output)

        first = invoke(config_path, "feedback", record_id, "--rating", "5", "--replayed")
        second = invoke(config_path, "feedback", record_id, "--rating", "4")

        assert first.exit_code == 0
        assert f"Feedback recorded for {record_id}" in first.output
        assert "template promoted" in first.output
        assert second.exit_code == 0
        assert f"Feedback already recorded for {record_id}, ignored" in second.output

    def test_unknown_record(self, config_path) -> None:
        result = invoke(config_path, "feedback", "no-such-record", "-r", "5")

        assert result.exit_code == 1
        assert "Error: Resolution record not found: no-such-record" in result.output

    def test_rating_out_of_range(self, config_path) -> None:
        result = invoke(config_path, "feedback", "any-record", "--rating", "9")
        assert result.exit_code == 2

    def test_feedback_requires_something(self, config_path) -> None:
        invoke(config_path, "seed")
        resolved = invoke(config_path, "resolve", "help me sleep better", "-g", "sleep")

        result = invoke(config_path, "feedback", record_id_from(resolved.output))

        assert result.exit_code == 1
        assert "Error: Feedback needs a rating or a replay flag" in result.output


class TestStatsCommand:
    def test_stats_after_resolutions(self, config_path) -> None:
        """Test that costs are summed per tier."""
        invoke(config_path, "seed")
        invoke(config_path, "resolve", "help me sleep better", "-g", "sleep")
        invoke(config_path, "resolve", "learn quantum physics", "-g", "focus")

        result = invoke(config_path, "stats")

        assert result.exit_code == 0
        assert "=== Last 7 days ===" in result.output
        assert "Requests: 2  Total cost: $0.21" in result.output
        assert "exact" in result.output
        assert "generated" in result.output
        assert "Audio cache: 0 files" in result.output


class TestAdminCommands:
    def test_protected_template_not_deleted(self, config_path) -> None:
        invoke(config_path, "seed")

        result = invoke(config_path, "delete-template", "default-sleep-1")

        assert result.exit_code == 1
        assert "is protected and cannot be deleted" in result.output

    def test_missing_template(self, config_path) -> None:
        result = invoke(config_path, "delete-template", "nope")

        assert result.exit_code == 1
        assert "Error: Template not found: nope" in result.output

    def test_missing_line(self, config_path) -> None:
        result = invoke(config_path, "delete-line", "nope")

        assert result.exit_code == 1
        assert "Error: Line not found: nope" in result.output

    def test_promote_requires_rating(self, config_path) -> None:
        """Test that promoting an unrated record fails cleanly."""
        invoke(config_path, "seed")
        resolved = invoke(config_path, "resolve", "help me sleep better", "-g", "sleep")

        result = invoke(
            config_path, "promote", record_id_from(resolved.output), "--title", "Mine"
        )

        assert result.exit_code == 1
        assert "Error: Only pooled resolutions can be promoted" in result.output

    def test_voices(self, config_path) -> None:
        result = invoke(config_path, "voices")

        assert result.exit_code == 0
        assert "Fake: fake-voice" in result.output


class TestConfigHandling:
    def test_missing_config_generated(self, tmp_path) -> None:
        """Test that a first run writes a config and exits with status 1."""
        path = tmp_path / "fresh" / "config.toml"

        result = invoke(path, "seed")

        assert result.exit_code == 1
        assert path.exists()
