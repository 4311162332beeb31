"""Configuration management for Glass Interpreter."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeviceConfig(BaseModel):
    """Device configuration."""

    name: str = "glassinterp"
    mode: Literal["production", "development"] = "development"
    log_level: str = "INFO"


class AudioConfig(BaseModel):
    """Microphone capture and level meter configuration."""

    device: str | None = None
    sample_rate: int = 16000
    channels: int = 1
    blocksize: int = 512
    # Short FFT window: the meter favors responsiveness over precision
    fft_size: int = 32
    frame_rate_hz: float = 60.0
    level_gain: float = 2.0
    min_decibels: float = -100.0
    max_decibels: float = -30.0


class RecognitionConfig(BaseModel):
    """Speech recognition configuration."""

    continuous: bool = True
    interim_results: bool = True


class TranslationConfig(BaseModel):
    """Translation provider configuration."""

    provider: Literal["mock", "openai", "gateway"] = "mock"
    openai_endpoint: str = "https://api.openai.com/v1"
    gateway_endpoint: str = "http://localhost:8080/api"
    api_key: str | None = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.3
    timeout_seconds: float = 30.0
    min_chars: int = 2
    error_marker: str = "[Error]"


class SynthesisConfig(BaseModel):
    """Speech synthesis configuration."""

    enabled: bool = True
    rate: float = 1.0
    volume: float = 1.0
    espeak_binary: str = "espeak-ng"


class PipelineConfig(BaseModel):
    """Simultaneous pipeline defaults."""

    default_source: str = "English"
    default_target: str = "Vietnamese"
    mock_script: list[str] = Field(
        default_factory=lambda: [
            "Hello there",
            "How are you doing today",
            "Where is the nearest train station",
        ]
    )
    mock_script_interval_seconds: float = 1.5


class Config(BaseSettings):
    """Main configuration for Glass Interpreter."""

    model_config = SettingsConfigDict(
        env_prefix="GLASSINTERP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    device: DeviceConfig = Field(default_factory=DeviceConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    recognition: RecognitionConfig = Field(default_factory=RecognitionConfig)
    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    # Mock mode for development
    mock_mode: bool = False

    @classmethod
    def from_yaml(cls, path: Path | str) -> Config:
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)


def load_config(
    config_path: Path | str | None = None,
    env_override: bool = True,
) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Path to config file. If None, searches standard locations.
        env_override: Whether to allow environment variables to override config.

    Returns:
        Loaded configuration.
    """
    search_paths = [
        Path("/etc/glassinterp/config.yaml"),
        Path.home() / ".config" / "glassinterp" / "config.yaml",
        Path("config.yaml"),
        Path("configs/glassinterp.yaml"),
    ]

    if config_path:
        search_paths.insert(0, Path(config_path))

    config_file: Path | None = None
    for path in search_paths:
        if path.exists():
            config_file = path
            break

    if config_file:
        config = Config.from_yaml(config_file)
    else:
        config = Config()

    if env_override:
        api_key = os.environ.get("GLASSINTERP_TRANSLATION_API_KEY")
        if api_key:
            config.translation.api_key = api_key

        if os.environ.get("GLASSINTERP_MOCK_MODE", "").lower() in ("1", "true", "yes"):
            config.mock_mode = True

    return config
