from unittest.mock import MagicMock

import httpx
import pytest
from typer.testing import CliRunner

from tubeflow import main
from tubeflow.core.command_handler import CommandHandler
from tubeflow.domain.interfaces.user_interface import UserInterface
from tubeflow.infrastructure.config import settings
from tubeflow.infrastructure.resilience.authenticated_executor import AuthenticatedRequestExecutor
from tubeflow.infrastructure.resilience.request_executor import RequestExecutor
from tubeflow.main import app

BASE_URL = "http://backoffice.test"


@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)


@pytest.fixture
def cli_handler(mocker, make_executor, mock_ui):
    """Real CommandHandler over a fake back office, patched into the CLI."""
    def backend(request: httpx.Request) -> httpx.Response:
        if request.url.path in ("/api/leads", "/api/health"):
            return httpx.Response(200, json={"ok": True, "echo": request.content.decode() or None})
        return httpx.Response(404, json={"message": "Not found"})

    handler = CommandHandler(
        executor_factory=lambda token=None: make_executor(backend, max_retries=0),
        ui=mock_ui,
        base_url=BASE_URL,
    )
    mocker.patch("tubeflow.main.get_command_handler", return_value=handler)
    return handler


def test_request_command_success(runner: CliRunner, cli_handler, mock_ui):
    result = runner.invoke(app, ["request", "GET", "leads"])

    assert result.exit_code == 0, result.output
    mock_ui.display_output.assert_called_once_with({"ok": True, "echo": None}, title="GET /api/leads")


def test_request_command_posts_json_body(runner: CliRunner, cli_handler, mock_ui):
    result = runner.invoke(app, ["request", "post", "leads", "--data", '{"company": "Acme Tubes"}'])

    assert result.exit_code == 0, result.output
    body = mock_ui.display_output.call_args.args[0]
    assert body["echo"] == '{"company": "Acme Tubes"}'


def test_request_command_failure_exits_non_zero(runner: CliRunner, cli_handler, mock_ui):
    result = runner.invoke(app, ["request", "GET", "/api/missing"])

    assert result.exit_code == 1
    mock_ui.display_output.assert_not_called()
    state = mock_ui.display_state.call_args.args[0]
    assert state.is_error
    assert state.error.http_status == 404


def test_request_command_rejects_invalid_json(runner: CliRunner, cli_handler):
    result = runner.invoke(app, ["request", "POST", "leads", "--data", "{not json"])

    assert result.exit_code == 2
    assert "invalid JSON" in result.output


def test_request_command_rejects_unknown_method(runner: CliRunner, cli_handler):
    result = runner.invoke(app, ["request", "PATCH", "leads"])

    assert result.exit_code == 2


def test_health_command(runner: CliRunner, cli_handler, mock_ui):
    result = runner.invoke(app, ["health"])

    assert result.exit_code == 0, result.output
    assert mock_ui.display_state.call_args.args[0].is_success


def test_endpoints_command(runner: CliRunner, cli_handler, mock_ui):
    result = runner.invoke(app, ["endpoints"])

    assert result.exit_code == 0, result.output
    rows = mock_ui.display_table.call_args.args[1]
    assert rows["quotations"] == f"{BASE_URL}/api/quotations"


def test_global_options_become_config_overrides(runner: CliRunner, cli_handler):
    result = runner.invoke(app, ["--timeout-ms", "1500", "--max-retries", "1", "--base-url", "http://erp.test", "endpoints"])

    assert result.exit_code == 0, result.output
    assert settings.get_config("api.timeout_ms") == 1500
    assert settings.get_config("api.max_retries") == 1
    assert settings.get_api_base_url() == "http://erp.test"


# --- Composition root ---

@pytest.fixture
def dependencies(mocker, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    mocker.patch("tubeflow.main.setup_logging")
    mocker.patch("tubeflow.main.load_configuration")
    settings.set_config("api.url", "http://erp.test/")
    settings.set_config("api.max_retries", 1)
    return main.create_dependencies()


def test_create_dependencies_wires_handler(dependencies):
    assert dependencies["base_url"] == "http://erp.test"
    assert dependencies["executor_config"].max_retries == 1
    assert isinstance(dependencies["command_handler"], CommandHandler)
    assert dependencies["notifier"].ui is dependencies["ui"]


def test_executor_factory_without_token(dependencies):
    executor = dependencies["executor_factory"](None)

    assert type(executor) is RequestExecutor
    assert executor.config.max_retries == 1


def test_executor_factory_with_token(dependencies):
    executor = dependencies["executor_factory"]("secret")

    assert isinstance(executor, AuthenticatedRequestExecutor)
    assert executor.is_authenticated


def test_executor_factory_uses_configured_token(dependencies):
    settings.set_config("api.token", "configured")

    executor = dependencies["executor_factory"](None)

    assert isinstance(executor, AuthenticatedRequestExecutor)


@pytest.mark.parametrize("args", [["--timeout-ms", "0"], ["--max-retries", "-1"]])
def test_out_of_range_global_options_are_rejected(runner: CliRunner, cli_handler, mock_ui, args):
    result = runner.invoke(app, [*args, "request", "GET", "leads"])

    assert result.exit_code == 2
    mock_ui.display_state.assert_not_called()
