"""Pytest configuration and fixtures for affirmloop tests."""

import dataclasses
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from affirmloop import config as config_module
from affirmloop.config import AffirmloopConfig, StorageConfig, default_config
from affirmloop.engine import AffirmationEngine
from affirmloop.library.storage import LibraryStorage
from affirmloop.telemetry.storage import RecordStorage
from test_helpers import FakeSpeechProvider, FakeTextGenerator

ENV_OVERRIDES = (
    "AFFIRMLOOP_DATA_DIR",
    "AFFIRMLOOP_TTS_PROVIDER",
    "AFFIRMLOOP_VOICE",
    "AFFIRMLOOP_PACE",
    "AFFIRMLOOP_GENERATION_MODEL",
)


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch) -> None:
    """Keep the developer's environment and loaded configs out of every test."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "_cached_configs", {})


@pytest.fixture
def config(tmp_path: Path) -> AffirmloopConfig:
    """Default configuration with all data under a temporary directory."""
    return dataclasses.replace(
        default_config(), storage=StorageConfig(data_dir=tmp_path / "data")
    )


@pytest.fixture
def library(config: AffirmloopConfig) -> LibraryStorage:
    return LibraryStorage(config.storage.db_path)


@pytest.fixture
def records(config: AffirmloopConfig) -> RecordStorage:
    return RecordStorage(config.storage.db_path)


@pytest.fixture
def generator() -> FakeTextGenerator:
    return FakeTextGenerator()


@pytest.fixture
def provider() -> FakeSpeechProvider:
    return FakeSpeechProvider()


@pytest.fixture
def engine(
    config: AffirmloopConfig,
    generator: FakeTextGenerator,
    provider: FakeSpeechProvider,
) -> AffirmationEngine:
    return AffirmationEngine(config, generator, provider=provider)
