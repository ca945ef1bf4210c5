import pytest
from typer.testing import CliRunner

from appsec_gym import __version__
from appsec_gym.cli import app
from appsec_gym.services.challenge_manager import ChallengeManager
from tests.conftest import FIXED_SQL

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_list() -> None:
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "sql-injection-basic" in result.output


def test_start_unknown() -> None:
    result = runner.invoke(app, ["start", "nope"])
    assert result.exit_code == 1
    assert "Challenge nope not found" in result.output


def test_check_without_attempt() -> None:
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 1
    assert "No active challenge" in result.output


def test_hint_without_attempt() -> None:
    result = runner.invoke(app, ["hint"])
    assert result.exit_code == 1


@pytest.mark.parametrize("command", [["status"], ["next"]])
def test_commands_without_attempt(command) -> None:
    result = runner.invoke(app, command)
    assert result.exit_code == 0
    assert "No active challenge" in result.output


def test_full_session(settings) -> None:
    started = runner.invoke(app, ["start", "sql-injection-basic"])
    assert started.exit_code == 0
    assert "Basic SQL Injection" in started.output

    hint = runner.invoke(app, ["hint", "2"])
    assert hint.exit_code == 0
    assert "Hint 2/3" in hint.output

    failed = runner.invoke(app, ["check"])
    assert failed.exit_code == 1
    assert "Status: FAILED" in failed.output

    ChallengeManager().get_current_attempt().file_paths[0].write_text(FIXED_SQL)

    passed = runner.invoke(app, ["check"])
    assert passed.exit_code == 0
    assert "Status: PASSED" in passed.output
    assert "Passed with 87.5/100 (A-)" in passed.output

    status = runner.invoke(app, ["status"])
    assert "Completed: 1/5" in status.output

    following = runner.invoke(app, ["next"])
    assert following.exit_code == 0
    assert "Stored XSS in Comments" in following.output
