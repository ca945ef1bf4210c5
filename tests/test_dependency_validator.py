import json

import pytest

from appsec_gym.services.tool_runner import ToolResult
from appsec_gym.validators.base import Submission
from appsec_gym.validators.dependency_validator import DependencyValidator, parse_audit_output
from tests.conftest import FakeRunner, write_submission

AUDIT_WITH_FINDINGS = {
    "auditReportVersion": 2,
    "vulnerabilities": {
        "lodash": {"severity": "critical", "via": [{"title": "Prototype Pollution in lodash"}]},
        "minimist": {"severity": "moderate", "via": ["lodash"]},
    },
}


@pytest.fixture
def submission(workspace) -> Submission:
    path = write_submission(workspace, "module.exports = {};\n")
    return Submission(challenge_id="sql-injection-basic", category="injection", file_paths=[path])


def _manifest(workspace) -> None:
    (workspace / "package.json").write_text(json.dumps({"name": "w", "dependencies": {"lodash": "4.17.4"}}))


@pytest.mark.asyncio
async def test_no_manifest_earns_full_credit(submission) -> None:
    runner = FakeRunner()
    outcome = await DependencyValidator(runner=runner, enabled=True).evaluate(submission)

    assert outcome.score == 15
    assert outcome.checks[0].name == "Dependency Security Scan"
    assert outcome.checks[0].passed is True
    assert runner.calls == []


@pytest.mark.asyncio
async def test_each_vulnerable_package_costs_three_points(submission, workspace) -> None:
    _manifest(workspace)
    runner = FakeRunner(ToolResult(exit_code=1, stdout=json.dumps(AUDIT_WITH_FINDINGS), stderr=""))

    outcome = await DependencyValidator(runner=runner, command="npm", enabled=True).evaluate(submission)

    assert outcome.score == 9
    assert outcome.checks[0].passed is False
    assert outcome.checks[0].message == "Found 2 vulnerable dependencies"
    lodash, minimist = outcome.issues
    assert lodash.package == "lodash"
    assert lodash.severity == "high"
    assert lodash.title == "Prototype Pollution in lodash"
    assert minimist.severity == "medium"
    assert minimist.title is None

    argv, cwd = runner.calls[0]
    assert argv == ["npm", "audit", "--json"]
    assert cwd == workspace


@pytest.mark.asyncio
async def test_clean_audit(submission, workspace) -> None:
    _manifest(workspace)
    runner = FakeRunner(ToolResult(exit_code=0, stdout=json.dumps({"vulnerabilities": {}}), stderr=""))

    outcome = await DependencyValidator(runner=runner, enabled=True).evaluate(submission)

    assert outcome.score == 15
    assert outcome.checks[0].message == "No known vulnerabilities in dependencies"


@pytest.mark.asyncio
async def test_many_vulnerabilities_clamp_to_zero(submission, workspace) -> None:
    _manifest(workspace)
    audit = {"vulnerabilities": {f"pkg{n}": {"severity": "low"} for n in range(6)}}
    runner = FakeRunner(ToolResult(exit_code=1, stdout=json.dumps(audit), stderr=""))

    outcome = await DependencyValidator(runner=runner, enabled=True).evaluate(submission)

    assert outcome.score == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "stdout",
    ["", "npm ERR!", json.dumps({"error": {"code": "ENOLOCK", "summary": "no lockfile"}})],
)
async def test_audit_failure_awards_partial_credit(submission, workspace, stdout) -> None:
    _manifest(workspace)
    runner = FakeRunner(ToolResult(exit_code=1, stdout=stdout, stderr=""))

    outcome = await DependencyValidator(runner=runner, enabled=True).evaluate(submission)

    assert outcome.score == 12
    check = outcome.checks[0]
    assert check.name == "Dependency Scan"
    assert check.passed is True
    assert check.partial is True


@pytest.mark.asyncio
async def test_missing_npm_awards_partial_credit(submission, workspace) -> None:
    _manifest(workspace)
    outcome = await DependencyValidator(runner=FakeRunner(), enabled=True).evaluate(submission)
    assert outcome.score == 12


def test_parse_audit_output_without_vulnerabilities_key() -> None:
    assert parse_audit_output(json.dumps({"auditReportVersion": 2})) == {}
