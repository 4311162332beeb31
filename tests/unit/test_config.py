"""Tests for configuration module."""

import os
import tempfile
from pathlib import Path

import pytest

from glassinterp.config import Config, DeviceConfig, TranslationConfig, load_config


class TestConfig:
    """Tests for Config class."""

    def test_default_config(self):
        """Test creating default configuration."""
        config = Config()

        assert config.device.name == "glassinterp"
        assert config.device.mode == "development"
        assert config.mock_mode is False
        assert config.translation.provider == "mock"
        assert config.translation.min_chars == 2
        assert config.audio.fft_size == 32
        assert config.audio.level_gain == 2.0
        assert config.pipeline.default_source == "English"
        assert config.pipeline.default_target == "Vietnamese"

    def test_config_from_dict(self):
        """Test creating config from dictionary."""
        config = Config(
            device=DeviceConfig(name="test-device", mode="production"),
            translation=TranslationConfig(provider="openai", model="gpt-4o"),
            mock_mode=True,
        )

        assert config.device.name == "test-device"
        assert config.device.mode == "production"
        assert config.translation.provider == "openai"
        assert config.translation.model == "gpt-4o"
        assert config.mock_mode is True

    def test_invalid_provider_rejected(self):
        """Test that unknown translation providers fail validation."""
        with pytest.raises(ValueError):
            TranslationConfig(provider="carrier-pigeon")

    def test_config_to_yaml(self):
        """Test saving config to YAML."""
        config = Config(device=DeviceConfig(name="yaml-test"))

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            config.to_yaml(path)

            assert path.exists()

            loaded = Config.from_yaml(path)
            assert loaded.device.name == "yaml-test"

    def test_config_from_yaml(self):
        """Test loading config from YAML."""
        yaml_content = """
device:
  name: yaml-device
  mode: production
translation:
  provider: gateway
  gateway_endpoint: http://glasses.local/api
pipeline:
  default_target: Japanese
"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text(yaml_content)

            config = Config.from_yaml(path)

            assert config.device.name == "yaml-device"
            assert config.device.mode == "production"
            assert config.translation.provider == "gateway"
            assert config.translation.gateway_endpoint == "http://glasses.local/api"
            assert config.pipeline.default_target == "Japanese"

    def test_nested_env_override(self, monkeypatch):
        """Test nested settings from environment variables."""
        monkeypatch.setenv("GLASSINTERP_AUDIO__SAMPLE_RATE", "48000")

        config = Config()
        assert config.audio.sample_rate == 48000


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_default(self, tmp_path, monkeypatch):
        """Test loading default config when no file exists."""
        monkeypatch.chdir(tmp_path)
        config = load_config(config_path="/nonexistent/path.yaml")
        assert config is not None
        assert config.device.name == "glassinterp"

    def test_load_with_env_override(self):
        """Test environment variable overrides."""
        os.environ["GLASSINTERP_MOCK_MODE"] = "1"
        os.environ["GLASSINTERP_TRANSLATION_API_KEY"] = "test-key"

        try:
            config = load_config()
            assert config.mock_mode is True
            assert config.translation.api_key == "test-key"
        finally:
            del os.environ["GLASSINTERP_MOCK_MODE"]
            del os.environ["GLASSINTERP_TRANSLATION_API_KEY"]

    def test_load_from_file(self):
        """Test loading config from file."""
        yaml_content = """
device:
  name: file-config
"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text(yaml_content)

            config = load_config(config_path=path)
            assert config.device.name == "file-config"
