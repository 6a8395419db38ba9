"""Provide shared pytest fixtures.

'why': centralize translator construction and sleep stubbing across scenarios
"""
from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest

from deepl_client import Translator

from ._utils import MockTransportCapture


TEST_AUTH_KEY = "test-auth-key"
TEST_SERVER_URL = "https://api.test/v2"

TranslatorFactory = Callable[..., Translator]


@pytest.fixture
def make_translator() -> Iterator[TranslatorFactory]:
    """Return a factory building translators bound to a mock transport.

    'why': provide deterministic credentials and instant retries for every scenario
    """

    built: list[Translator] = []

    def factory(capture: MockTransportCapture, **overrides: object) -> Translator:
        options: dict[str, object] = {
            "server_url": TEST_SERVER_URL,
            "send_platform_info": False,
            "max_retries": 3,
            "retry_backoff": 0.0,
            "transport": capture.transport,
        }
        options.update(overrides)
        translator = Translator(TEST_AUTH_KEY, **options)  # type: ignore[arg-type]
        built.append(translator)
        return translator

    yield factory
    for translator in built:
        translator.close()


@pytest.fixture
def recorded_sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace the polling sleep with a recorder.

    'why': keep polling tests instant while asserting on the computed delays
    """

    sleeps: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    monkeypatch.setattr("deepl_client._document._sleep", fake_sleep)
    return sleeps


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials in the environment out of configuration tests."""

    monkeypatch.delenv("DEEPL_AUTH_KEY", raising=False)
    monkeypatch.delenv("DEEPL_SERVER_URL", raising=False)
