import os

import pytest

from tubeflow.infrastructure.config import settings
from tubeflow.infrastructure.config.endpoints import API_ENDPOINTS, get_api_url
from tubeflow.infrastructure.resilience.request_executor import ExecutorConfig


def test_get_config_default_when_missing():
    assert settings.get_config("api.nothing", default="fallback") == "fallback"


def test_environment_variable_is_coerced(monkeypatch):
    monkeypatch.setenv("TUBEFLOW_API_TIMEOUT_MS", "2500")
    monkeypatch.setenv("TUBEFLOW_API_NOTIFY_ON_ERROR", "false")
    monkeypatch.setenv("TUBEFLOW_API_RETRY_DELAY_MULTIPLIER", "1.5")

    assert settings.get_config("api.timeout_ms") == 2500
    assert settings.get_config("api.notify_on_error") is False
    assert settings.get_config("api.retry_delay_multiplier") == 1.5


def test_priority_test_config_then_override_then_env(monkeypatch):
    monkeypatch.setenv("TUBEFLOW_API_MAX_RETRIES", "7")
    assert settings.get_config("api.max_retries") == 7

    settings.set_config("api.max_retries", 2)
    assert settings.get_config("api.max_retries") == 2

    settings.set_config_for_testing({"api.max_retries": 0})
    assert settings.get_config("api.max_retries") == 0

    settings.clear_test_config()
    assert settings.get_config("api.max_retries") == 7


def test_set_config_none_removes_override():
    settings.set_config("api.url", "http://override.test")
    settings.set_config("api.url", None)
    assert settings.get_config("api.url") is None


def test_yaml_file_is_loaded_and_flattened(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "api:\n"
        "  base_url: http://yaml.test/\n"
        "  max_retries: 1\n"
        "logging:\n"
        "  level: DEBUG\n"
    )

    settings.reload_configuration(config_file=config_file)

    assert settings.get_config("api.max_retries") == 1
    assert settings.get_config("logging.level") == "DEBUG"
    assert settings.get_api_base_url() == "http://yaml.test"


def test_environment_beats_yaml(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api:\n  url: http://yaml.test\n")
    monkeypatch.setenv("TUBEFLOW_API_URL", "http://env.test")

    settings.reload_configuration(config_file=config_file)

    assert settings.get_api_base_url() == "http://env.test"


def test_non_mapping_yaml_is_ignored(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n")

    settings.reload_configuration(config_file=config_file)

    assert settings.get_config("api.url") is None


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("TUBEFLOW_API_TOKEN=from-dotenv\n")
    try:
        assert settings.find_dotenv_path() == tmp_path / ".env"
        settings.reload_configuration(config_file=tmp_path / "missing.yaml")
        assert settings.get_api_token() == "from-dotenv"
    finally:
        os.environ.pop("TUBEFLOW_API_TOKEN", None)


def test_api_base_url_default():
    assert settings.get_api_base_url() == settings.DEFAULT_API_BASE_URL == "http://localhost:5001"


def test_executor_config_defaults():
    assert settings.get_executor_config() == ExecutorConfig()


def test_executor_config_from_settings():
    settings.set_config_for_testing({
        "api.timeout_ms": 3000,
        "api.max_retries": "5",
        "api.retry_delay_ms": 200,
        "api.retry_delay_multiplier": 3,
        "api.notify_on_error": "off",
    })

    assert settings.get_executor_config() == ExecutorConfig(
        timeout_ms=3000.0,
        max_retries=5,
        retry_delay_ms=200.0,
        retry_delay_multiplier=3.0,
        notify_on_error=False,
    )


def test_env_var_name():
    assert settings.env_var_name("api.timeout_ms") == "TUBEFLOW_API_TIMEOUT_MS"


# --- Endpoint registry ---

def test_registry_covers_back_office_resources():
    assert set(API_ENDPOINTS) == {
        "leads", "quotations", "pos", "do1", "do2", "inventory", "invoice",
        "invoices", "sms", "tally", "reports", "health",
    }
    assert API_ENDPOINTS["do2"] == "/api/do2"


@pytest.mark.parametrize(
    "endpoint, base_url, expected",
    [
        ("leads", "http://localhost:5001", "http://localhost:5001/api/leads"),
        ("/api/leads/42", "http://localhost:5001/", "http://localhost:5001/api/leads/42"),
        ("api/tally/push", "https://erp.example.com", "https://erp.example.com/api/tally/push"),
        ("health", None, "/api/health"),
        ("/custom/path", None, "/custom/path"),
    ]
)
def test_get_api_url(endpoint, base_url, expected):
    assert get_api_url(endpoint, base_url) == expected
