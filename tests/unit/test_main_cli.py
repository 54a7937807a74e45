"""Unit tests for the asana_sync.main CLI module.

This module tests:
- ``run``: input collection, event parsing, outputs and exit codes
- ``extract``: reference printing
- ``execute_action``: client construction per action
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from structlog.testing import capture_logs

from asana_sync.config.inputs import ActionInputs
from asana_sync.config.settings import RunnerSettings
from asana_sync.engine.dispatcher import Dispatcher
from asana_sync.enums import ActionName
from asana_sync.exceptions import CollaboratorError, ConfigurationError
from asana_sync.main import cli, execute_action

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def keep_logging_config():
    """Leave the global structlog configuration alone during CLI runs."""
    with patch("asana_sync.main.configure_logging"):
        yield


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def pr_payload():
    return {
        "action": "closed",
        "pull_request": {
            "number": 7,
            "title": "Fix login redirect",
            "body": "Task/Issue URL: https://app.asana.com/0/111/201\nTask/Issue URL: https://app.asana.com/0/111/202",
            "html_url": "https://github.com/acme/app/pull/7",
            "user": {"login": "contributor"},
            "head": {"user": {"login": "contributor"}},
            "base": {"repo": {"owner": {"login": "acme"}}},
        },
    }


@pytest.fixture
def runner_env(tmp_path, pr_payload):
    """Environment of an Actions step triggered by ``pr_payload``."""
    event = tmp_path / "event.json"
    event.write_text(json.dumps(pr_payload))
    output = tmp_path / "github_output"
    output.write_text("")

    def _env(**inputs: str) -> dict[str, str | None]:
        env: dict[str, str | None] = {
            "GITHUB_EVENT_PATH": str(event),
            "GITHUB_OUTPUT": str(output),
            "GITHUB_EVENT_NAME": "pull_request",
        }
        env.update({f"INPUT_{name.upper()}": value for name, value in inputs.items()})
        return env

    _env.output = output
    return _env


def outputs(path) -> dict[str, str]:
    lines = [line for line in path.read_text().splitlines() if "=" in line]
    return dict(line.split("=", 1) for line in lines)


# =============================================================================
# run
# =============================================================================


class TestRunCommand:
    def test_help(self, cli_runner):
        result = cli_runner.invoke(cli, ["run", "--help"])

        assert result.exit_code == 0
        assert "--inputs-file" in result.output

    def test_check_pr_membership_needs_no_clients(self, cli_runner, runner_env):
        with (
            patch("asana_sync.main.create_work_tracker") as work_factory,
            patch("asana_sync.main.create_source_control") as scm_factory,
        ):
            result = cli_runner.invoke(cli, ["run"], env=runner_env(action="check-pr-membership"))

        assert result.exit_code == 0, result.output
        assert outputs(runner_env.output) == {"external": "true"}
        work_factory.assert_not_called()
        scm_factory.assert_not_called()

    def test_unknown_action(self, cli_runner, runner_env):
        result = cli_runner.invoke(cli, ["run"], env=runner_env(action="launch-rockets"))

        assert result.exit_code == 1
        assert "::error::unexpected action launch-rockets" in result.output

    def test_missing_action(self, cli_runner, runner_env):
        result = cli_runner.invoke(cli, ["run"], env=runner_env())

        assert result.exit_code == 1
        assert "::error::Input required and not supplied: action" in result.output

    def test_missing_token(self, cli_runner, runner_env):
        result = cli_runner.invoke(cli, ["run"], env=runner_env(action="notify-pr-approved"))

        assert result.exit_code == 1
        assert "Input required and not supplied: asana-pat" in result.output

    def test_unreadable_event(self, cli_runner, runner_env, tmp_path):
        env = runner_env(action="check-pr-membership")
        env["GITHUB_EVENT_PATH"] = str(tmp_path / "missing.json")

        result = cli_runner.invoke(cli, ["run"], env=env)

        assert result.exit_code == 1
        assert "::error::Cannot read event payload" in result.output

    def test_comments_linked_tasks(self, cli_runner, runner_env, mock_work):
        with patch("asana_sync.main.create_work_tracker", return_value=mock_work):
            result = cli_runner.invoke(
                cli,
                ["run"],
                env=runner_env(**{"action": "add-asana-pr-comment", "asana-pat": "pat", "is-pinned": "true"}),
            )

        assert result.exit_code == 0, result.output
        assert [c.args[0] for c in mock_work.add_note.await_args_list] == ["201", "202"]
        mock_work.connect.assert_awaited_once()
        mock_work.disconnect.assert_awaited_once()

    def test_trigger_phrase_keeps_trailing_space(self, cli_runner, runner_env, mock_work):
        env = runner_env(**{"action": "notify-pr-merged", "asana-pat": "pat", "is-complete": "true"})
        env["INPUT_TRIGGER-PHRASE"] = "Task/Issue URL: "

        with patch("asana_sync.main.create_work_tracker", return_value=mock_work):
            result = cli_runner.invoke(cli, ["run"], env=env)

        assert result.exit_code == 0, result.output
        assert [c.args for c in mock_work.set_completed.await_args_list] == [("201", True), ("202", True)]

    def test_partial_failure_still_succeeds(self, cli_runner, runner_env, mock_work):
        mock_work.add_note.side_effect = [CollaboratorError("boom", status_code=500), None]

        with patch("asana_sync.main.create_work_tracker", return_value=mock_work):
            result = cli_runner.invoke(
                cli, ["run"], env=runner_env(**{"action": "notify-pr-approved", "asana-pat": "pat"})
            )

        assert result.exit_code == 0, result.output
        assert mock_work.add_note.await_count == 2

    def test_create_failure_fails_step(self, cli_runner, runner_env, mock_work):
        mock_work.create_item.side_effect = CollaboratorError("Asana POST /tasks failed", status_code=403)

        with patch("asana_sync.main.create_work_tracker", return_value=mock_work):
            result = cli_runner.invoke(
                cli,
                ["run"],
                env=runner_env(**{"action": "create-asana-pr-task", "asana-pat": "pat", "asana-project": "111"}),
            )

        assert result.exit_code == 1
        assert "::error::Failed to create Asana task" in result.output
        assert outputs(runner_env.output) == {}
        mock_work.disconnect.assert_awaited_once()

    def test_create_publishes_task_id(self, cli_runner, runner_env, mock_work):
        with patch("asana_sync.main.create_work_tracker", return_value=mock_work):
            result = cli_runner.invoke(
                cli,
                ["run"],
                env=runner_env(**{"action": "create-asana-pr-task", "asana-pat": "pat", "asana-project": "111"}),
            )

        assert result.exit_code == 0, result.output
        assert outputs(runner_env.output) == {"taskId": "9001"}

    def test_inputs_file(self, cli_runner, runner_env, mock_work, tmp_path):
        inputs_file = tmp_path / "inputs.yaml"
        inputs_file.write_text("action: add-tag-to-task\nasana-pat: from-file\nasana-tag-id: '5'\n")

        with patch("asana_sync.main.create_work_tracker", return_value=mock_work) as factory:
            result = cli_runner.invoke(
                cli,
                ["run", "--inputs-file", str(inputs_file)],
                env=runner_env(**{"asana-tag-id": "6"}),
            )

        assert result.exit_code == 0, result.output
        inputs = factory.call_args.args[0]
        assert inputs.require("asana-pat") == "from-file"
        assert [c.args for c in mock_work.add_tag.await_args_list] == [("201", "6"), ("202", "6")]

    def test_unexpected_error(self, cli_runner, runner_env, mock_work):
        mock_work.connect.side_effect = RuntimeError("socket exploded")

        with patch("asana_sync.main.create_work_tracker", return_value=mock_work):
            result = cli_runner.invoke(
                cli, ["run"], env=runner_env(**{"action": "notify-pr-approved", "asana-pat": "pat"})
            )

        assert result.exit_code == 1
        assert "::error::Unexpected error: socket exploded" in result.output


# =============================================================================
# extract
# =============================================================================


class TestExtractCommand:
    @staticmethod
    def references(output: str) -> list[dict]:
        return [json.loads(line) for line in output.splitlines() if line.startswith("{")]

    def test_text_argument(self, cli_runner):
        result = cli_runner.invoke(
            cli,
            ["extract", "--trigger-phrase", "T ", "T https://app.asana.com/0/1/2 T https://app.asana.com/0/3/4"],
        )

        assert result.exit_code == 0
        assert self.references(result.output) == [
            {"container_id": "1", "item_id": "2"},
            {"container_id": "3", "item_id": "4"},
        ]

    def test_stdin(self, cli_runner):
        result = cli_runner.invoke(cli, ["extract"], input="see https://app.asana.com/0/5/6\n")

        assert result.exit_code == 0
        assert self.references(result.output) == [{"container_id": "5", "item_id": "6"}]

    def test_custom_host(self, cli_runner):
        result = cli_runner.invoke(
            cli, ["extract", "--host", "asana.example.org", "https://asana.example.org/0/7/8"]
        )

        assert self.references(result.output) == [{"container_id": "7", "item_id": "8"}]


# =============================================================================
# execute_action
# =============================================================================


class TestExecuteAction:
    @pytest.mark.asyncio
    async def test_release_requires_github_token(self):
        inputs = ActionInputs(values={"action": "get-latest-repo-release", "github-org": "acme"})

        with pytest.raises(ConfigurationError, match="github-pat"):
            await execute_action(RunnerSettings(), inputs, {})

    @pytest.mark.asyncio
    async def test_release(self, mock_scm):
        inputs = ActionInputs(
            values={
                "action": "get-latest-repo-release",
                "github-pat": "ghp",
                "github-org": "acme",
                "github-repository": "app",
            }
        )

        with (
            patch("asana_sync.main.create_source_control", return_value=mock_scm) as scm_factory,
            patch("asana_sync.main.create_work_tracker") as work_factory,
        ):
            result = await execute_action(RunnerSettings(), inputs, {})

        assert result.outputs == {"version": "v1.2.3"}
        assert scm_factory.call_args.kwargs["token_required"] is True
        work_factory.assert_not_called()
        mock_scm.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_pr_description_token_optional(self, mock_scm):
        inputs = ActionInputs(
            values={
                "action": "add-task-pr-description",
                "github-org": "acme",
                "github-repository": "app",
                "github-pr": "7",
                "asana-project": "111",
                "asana-task-id": "42",
            }
        )

        with patch("asana_sync.main.create_source_control", return_value=mock_scm) as scm_factory:
            result = await execute_action(RunnerSettings(), inputs, {})

        assert result.action is ActionName.ADD_TASK_PR_DESCRIPTION
        assert result.success
        assert scm_factory.call_args.kwargs["token_required"] is False
        mock_scm.update_pull_request.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_runs_through_dispatch_name(self, pr_payload):
        inputs = ActionInputs(values={"action": " check-pr-membership "})

        with patch(
            "asana_sync.main.Dispatcher.dispatch_name", autospec=True, side_effect=Dispatcher.dispatch_name
        ) as dispatch_name:
            result = await execute_action(RunnerSettings(), inputs, pr_payload)

        assert dispatch_name.call_args.args[1] == "check-pr-membership"
        assert result.outputs == {"external": "true"}

    @pytest.mark.asyncio
    async def test_logs_event_name(self, monkeypatch):
        monkeypatch.setenv("GITHUB_EVENT_NAME", "pull_request_review")
        inputs = ActionInputs(values={"action": "check-pr-membership"})

        with capture_logs() as logs:
            await execute_action(RunnerSettings(), inputs, {"pull_request": {"title": "t"}})

        calling = [entry for entry in logs if entry["event"] == "calling"]
        assert len(calling) == 1
        assert calling[0]["action"] == "check-pr-membership"
        assert calling[0]["event_name"] == "pull_request_review"
