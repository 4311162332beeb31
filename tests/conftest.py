"""Pytest configuration and fixtures for Glass Interpreter tests."""

from __future__ import annotations

import asyncio

import pytest

from glassinterp.audio import MockAudioCapture
from glassinterp.config import Config
from glassinterp.pipeline import create_pipeline
from glassinterp.speech import MockRecognitionEngine, MockSynthesisEngine
from glassinterp.translation import MockTranslationProvider, TranslationProvider


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom command line options."""
    parser.addoption(
        "--slow",
        action="store_true",
        default=False,
        help="Run slow tests",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Configure test markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip slow tests unless --slow flag is set."""
    if config.getoption("--slow"):
        return

    skip_slow = pytest.mark.skip(reason="Need --slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class ControlledTranslationProvider(TranslationProvider):
    """Provider whose translations complete only when the test says so."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self._pending: dict[str, asyncio.Future] = {}

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        self.calls.append((text, source_language, target_language))
        future = asyncio.get_running_loop().create_future()
        self._pending[text] = future
        return await future

    def resolve(self, text: str, translation: str) -> None:
        self._pending.pop(text).set_result(translation)

    def fail(self, text: str, error: Exception) -> None:
        self._pending.pop(text).set_exception(error)


class FailingTranslationProvider(TranslationProvider):
    """Provider that always raises."""

    def __init__(self) -> None:
        self.call_count = 0

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        self.call_count += 1
        raise ConnectionError("translation service unreachable")


@pytest.fixture
def config() -> Config:
    """Get test configuration."""
    cfg = Config()
    cfg.mock_mode = True
    cfg.device.mode = "development"
    cfg.device.log_level = "DEBUG"
    cfg.audio.frame_rate_hz = 200.0
    cfg.pipeline.mock_script_interval_seconds = 0.05
    return cfg


@pytest.fixture
def capture() -> MockAudioCapture:
    return MockAudioCapture()


@pytest.fixture
def recognition_engine() -> MockRecognitionEngine:
    return MockRecognitionEngine()


@pytest.fixture
def synthesis_engine() -> MockSynthesisEngine:
    return MockSynthesisEngine()


@pytest.fixture
def translation_provider() -> MockTranslationProvider:
    return MockTranslationProvider(latency_seconds=0)


@pytest.fixture
def controlled_provider() -> ControlledTranslationProvider:
    return ControlledTranslationProvider()


@pytest.fixture
def failing_provider() -> FailingTranslationProvider:
    return FailingTranslationProvider()


@pytest.fixture
async def pipeline(
    config: Config,
    capture: MockAudioCapture,
    recognition_engine: MockRecognitionEngine,
    translation_provider: MockTranslationProvider,
    synthesis_engine: MockSynthesisEngine,
):
    """Create a pipeline wired to mock components."""
    pipeline = await create_pipeline(
        config,
        capture=capture,
        recognition_engine=recognition_engine,
        translation_provider=translation_provider,
        synthesis_engine=synthesis_engine,
    )
    yield pipeline
    await pipeline.close()


@pytest.fixture
async def make_pipeline(
    config: Config,
    capture: MockAudioCapture,
    recognition_engine: MockRecognitionEngine,
    synthesis_engine: MockSynthesisEngine,
):
    """Factory building mock pipelines around a chosen translation provider."""
    created = []

    async def _make(provider: TranslationProvider, **overrides):
        components = {
            "capture": capture,
            "recognition_engine": recognition_engine,
            "synthesis_engine": synthesis_engine,
        }
        components.update(overrides)
        pipeline = await create_pipeline(config, translation_provider=provider, **components)
        created.append(pipeline)
        return pipeline

    yield _make

    for pipeline in created:
        await pipeline.stop()
