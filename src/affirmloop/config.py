"""Configuration management for affirmloop.

Loads configuration from ~/.config/affirmloop/config.toml.
Priority chain: CLI flags > env vars > config file.
"""

import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "affirmloop"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "affirmloop"

DEFAULT_CONFIG = """\
# affirmloop configuration

[engine]
# Lines per session
line_count = 6

# Tier 1 accepts a template at or above this keyword confidence
exact_threshold = 0.75

# Tier 2 accepts a pooled assembly at or above this theme confidence
pooled_threshold = 0.65

# Tier 2 needs at least this many eligible lines to propose anything
min_pool_lines = 3

[costs]
# Attributed cost in USD per resolution tier
exact = 0.0
pooled = 0.10
generated = 0.21
fallback = 0.0

[generation]
# OpenAI chat model used for new affirmations
model = "gpt-4o-mini"
temperature = 0.8
max_tokens = 300

# Seconds before generation gives up and static lines are used
timeout = 20.0

[speech]
# Provider: "elevenlabs"
provider = "elevenlabs"

# Voice: neutral, confident, premium1..premium8, or a raw ElevenLabs voice id
voice = "neutral"

# Pace: "slow" or "normal"
pace = "slow"

# Seconds before a synthesis call is abandoned
timeout = 30.0

[storage]
# Database and audio cache location (default: ~/.local/share/affirmloop)
# data_dir = "/var/lib/affirmloop"

[telemetry]
# In-memory mirror of recent resolutions (oldest evicted)
buffer_size = 1000

# API keys are read from environment variables, not this file:
#   OPENAI_API_KEY      - text generation
#   ELEVENLABS_API_KEY  - speech synthesis
"""


@dataclass(frozen=True)
class EngineConfig:
    """Resolution engine thresholds."""

    line_count: int
    exact_threshold: float
    pooled_threshold: float
    min_pool_lines: int


@dataclass(frozen=True)
class CostConfig:
    """Attributed cost per resolution tier."""

    exact: float
    pooled: float
    generated: float
    fallback: float


@dataclass(frozen=True)
class GenerationConfig:
    """Text generation configuration."""

    model: str
    temperature: float
    max_tokens: int
    timeout: float


@dataclass(frozen=True)
class SpeechConfig:
    """Speech synthesis configuration."""

    provider: str
    voice: str
    pace: str
    timeout: float


@dataclass(frozen=True)
class StorageConfig:
    """Persistence configuration."""

    data_dir: Path

    @property
    def db_path(self) -> Path:
        return self.data_dir / "affirmloop.db"

    @property
    def audio_dir(self) -> Path:
        return self.data_dir / "audio"


@dataclass(frozen=True)
class TelemetryConfig:
    """Telemetry mirror configuration."""

    buffer_size: int


@dataclass(frozen=True)
class AffirmloopConfig:
    """Top-level affirmloop configuration."""

    engine: EngineConfig
    costs: CostConfig
    generation: GenerationConfig
    speech: SpeechConfig
    storage: StorageConfig
    telemetry: TelemetryConfig


_cached_configs: dict[Path, AffirmloopConfig] = {}


def generate_config(path: Path = CONFIG_PATH) -> Path:
    """Generate default config file at the given path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def parse_config(data: dict) -> AffirmloopConfig:
    """Build a validated config from parsed TOML data with env var overrides.

    Raises:
        ValueError: If required values are missing or out of range.
    """
    engine = data.get("engine", {})
    costs = data.get("costs", {})
    generation = data.get("generation", {})
    speech = data.get("speech", {})
    storage = data.get("storage", {})
    telemetry = data.get("telemetry", {})

    # Validate required fields
    missing = []
    for section, table, keys in (
        ("engine", engine, ("line_count", "exact_threshold", "pooled_threshold")),
        ("costs", costs, ("exact", "pooled", "generated", "fallback")),
        ("generation", generation, ("model", "timeout")),
        ("speech", speech, ("provider", "voice", "pace", "timeout")),
    ):
        missing.extend(f"{section}.{key}" for key in keys if key not in table)

    if missing:
        raise ValueError(f"Missing required config values: {', '.join(missing)}")

    for key in ("exact_threshold", "pooled_threshold"):
        if not 0.0 <= engine[key] <= 1.0:
            raise ValueError(
                f"engine.{key} must be between 0.0 and 1.0, got {engine[key]}"
            )
    if engine["line_count"] < 1:
        raise ValueError(
            f"engine.line_count must be positive, got {engine['line_count']}"
        )

    # Env vars override config file values
    data_dir = os.getenv("AFFIRMLOOP_DATA_DIR", storage.get("data_dir"))

    return AffirmloopConfig(
        engine=EngineConfig(
            line_count=engine["line_count"],
            exact_threshold=engine["exact_threshold"],
            pooled_threshold=engine["pooled_threshold"],
            min_pool_lines=engine.get("min_pool_lines", 3),
        ),
        costs=CostConfig(
            exact=costs["exact"],
            pooled=costs["pooled"],
            generated=costs["generated"],
            fallback=costs["fallback"],
        ),
        generation=GenerationConfig(
            model=os.getenv("AFFIRMLOOP_GENERATION_MODEL", generation["model"]),
            temperature=generation.get("temperature", 0.8),
            max_tokens=generation.get("max_tokens", 300),
            timeout=generation["timeout"],
        ),
        speech=SpeechConfig(
            provider=os.getenv("AFFIRMLOOP_TTS_PROVIDER", speech["provider"]),
            voice=os.getenv("AFFIRMLOOP_VOICE", speech["voice"]),
            pace=os.getenv("AFFIRMLOOP_PACE", speech["pace"]),
            timeout=speech["timeout"],
        ),
        storage=StorageConfig(
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        ),
        telemetry=TelemetryConfig(
            buffer_size=telemetry.get("buffer_size", 1000),
        ),
    )


def default_config() -> AffirmloopConfig:
    """Config built from the bundled defaults (env vars still apply)."""
    return parse_config(tomllib.loads(DEFAULT_CONFIG))


def load_config(path: Path | None = None) -> AffirmloopConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and exits so the user
    can review it before proceeding.

    Args:
        path: Config file to load (defaults to ~/.config/affirmloop/config.toml)

    Returns:
        Loaded and validated AffirmloopConfig.

    Raises:
        SystemExit: If config is missing (after generating) or invalid.
    """
    config_path = path or CONFIG_PATH
    if config_path in _cached_configs:
        return _cached_configs[config_path]

    if not config_path.exists():
        generated = generate_config(config_path)
        print(
            f"No config found. Generated {generated}, review and run again.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    try:
        config = parse_config(data)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        print(f"Edit {config_path} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1) from e

    _cached_configs[config_path] = config
    return config
