from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from typer.testing import CliRunner

from tubeflow.domain.interfaces.notifier import ErrorNotifier
from tubeflow.infrastructure.config import settings
from tubeflow.infrastructure.resilience.request_executor import ExecutorConfig, RequestExecutor

BASE_URL = "http://backoffice.test"


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keeps configuration overrides and TUBEFLOW_ env vars out of other tests."""
    settings.clear_test_config()
    monkeypatch.setattr(settings, "_config", {})
    monkeypatch.setattr(settings, "_loaded", False)
    for key in ("TUBEFLOW_API_URL", "TUBEFLOW_API_TOKEN", "TUBEFLOW_API_TIMEOUT_MS", "TUBEFLOW_API_MAX_RETRIES"):
        monkeypatch.delenv(key, raising=False)
    yield
    settings.clear_test_config()


@pytest.fixture
def mock_notifier():
    return MagicMock(spec=ErrorNotifier)


@pytest.fixture
def make_executor(mock_notifier):
    """Factory for executors backed by an httpx.MockTransport.

    Backoff sleeps are replaced with an AsyncMock so tests run instantly
    and can inspect the requested delays.
    """
    def _make(handler, executor_cls=RequestExecutor, **config_kwargs):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
        extra = config_kwargs.pop("executor_kwargs", {})
        executor = executor_cls(
            config=ExecutorConfig(**config_kwargs),
            client=client,
            notifier=mock_notifier,
            **extra,
        )
        executor._sleep = AsyncMock()
        return executor
    return _make
