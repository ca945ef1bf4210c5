import pytest

from appsec_gym.challenges import get_challenge
from appsec_gym.services.tool_runner import ToolResult
from appsec_gym.validators.base import BaseValidator, Submission
from appsec_gym.validators.dependency_validator import DependencyValidator
from appsec_gym.validators.engine import ValidationEngine
from appsec_gym.validators.models import StageOutcome, ValidationCheck
from appsec_gym.validators.pattern_validator import PatternValidator
from appsec_gym.validators.static_analysis_validator import StaticAnalysisValidator
from tests.conftest import FIXED_SQL, VULNERABLE_SQL, FakeRunner, write_submission


class CrashingValidator(BaseValidator):
    max_score = 25

    @property
    def name(self) -> str:
        return "CrashingValidator"

    async def evaluate(self, submission: Submission) -> StageOutcome:
        raise RuntimeError("linter exploded")


class GenerousValidator(BaseValidator):
    max_score = 25

    @property
    def name(self) -> str:
        return "GenerousValidator"

    async def evaluate(self, submission: Submission) -> StageOutcome:
        return StageOutcome(score=500, checks=[self._check("Generous", True, "ok")])


@pytest.fixture
def engine() -> ValidationEngine:
    return ValidationEngine(runner=FakeRunner())


@pytest.mark.asyncio
async def test_fixed_solution_passes_without_tools(engine, workspace) -> None:
    path = write_submission(workspace, FIXED_SQL)

    result = await engine.validate(get_challenge("sql-injection-basic"), [path], FIXED_SQL)

    # 60 pattern + 12.5 static (unavailable) + 15 dependency (no package.json)
    assert result.score == 87.5
    assert result.grade == "A-"
    assert result.passed is True
    assert [c.name for c in result.checks] == [
        "SQL Injection Protection",
        "Static Analysis",
        "Dependency Security Scan",
    ]


@pytest.mark.asyncio
async def test_vulnerable_solution_fails(engine, workspace) -> None:
    path = write_submission(workspace, VULNERABLE_SQL)

    result = await engine.validate({"id": "sql-injection-basic", "category": "injection"}, [path], VULNERABLE_SQL)

    assert result.score == 67.5
    assert result.grade == "C+"
    assert result.passed is False
    assert len(result.security_issues) == 1
    assert result.recommendations


@pytest.mark.asyncio
async def test_validation_is_deterministic(engine, workspace) -> None:
    path = write_submission(workspace, VULNERABLE_SQL)
    challenge = get_challenge("sql-injection-basic")

    first = await engine.validate(challenge, [path], VULNERABLE_SQL)
    second = await engine.validate(challenge, [path], VULNERABLE_SQL)

    assert first.model_dump(exclude={"checked_at"}) == second.model_dump(exclude={"checked_at"})


@pytest.mark.asyncio
async def test_crashing_stage_stops_pipeline(workspace) -> None:
    path = write_submission(workspace, FIXED_SQL)
    dependency = DependencyValidator(runner=FakeRunner())
    engine = ValidationEngine(validators=[PatternValidator(), CrashingValidator(), dependency])

    result = await engine.validate(get_challenge("sql-injection-basic"), [path], FIXED_SQL)

    assert result.passed is False
    assert result.score == 60
    assert result.checks[-1].name == "Validation Error"
    assert result.checks[-1].message == "Validation failed: linter exploded"
    assert "Dependency Security Scan" not in [c.name for c in result.checks]


@pytest.mark.asyncio
async def test_stage_scores_are_clamped(workspace) -> None:
    engine = ValidationEngine(validators=[GenerousValidator()])

    result = await engine.validate({"id": "x", "category": "xss"}, [], "")

    assert result.score == 25
    assert result.passed is False


@pytest.mark.asyncio
async def test_unknown_category_still_produces_result(engine, workspace) -> None:
    path = write_submission(workspace, VULNERABLE_SQL)

    result = await engine.validate({"id": "csrf-token", "category": "csrf"}, [path], VULNERABLE_SQL)

    assert result.checks[0].name == "SQL Injection Protection"
    assert result.security_issues[0].rule == "sql-quote-concatenation"


def test_add_and_remove_validator() -> None:
    engine = ValidationEngine(validators=[PatternValidator()])
    engine.add_validator(StaticAnalysisValidator(runner=FakeRunner()))
    assert [v.name for v in engine.validators] == ["PatternValidator", "StaticAnalysisValidator"]

    engine.remove_validator("PatternValidator")
    assert [v.name for v in engine.validators] == ["StaticAnalysisValidator"]


def test_default_stage_order() -> None:
    engine = ValidationEngine(runner=FakeRunner())
    assert [v.max_score for v in engine.validators] == [60, 25, 15]


def test_checks_are_models() -> None:
    assert ValidationCheck(name="n", passed=True, message="m").partial is False


@pytest.mark.asyncio
async def test_malformed_lint_output_degrades_instead_of_failing(workspace) -> None:
    path = write_submission(workspace, FIXED_SQL)
    runner = FakeRunner(ToolResult(exit_code=1, stdout='[{"messages": ["oops"]}]', stderr=""))
    engine = ValidationEngine(validators=[
        PatternValidator(),
        StaticAnalysisValidator(runner=runner, enabled=True),
        DependencyValidator(runner=runner),
    ])

    result = await engine.validate(get_challenge("sql-injection-basic"), [path], FIXED_SQL)

    assert result.score == 87.5
    assert result.passed is True
    assert "Validation Error" not in [c.name for c in result.checks]
