import pytest

from appsec_gym.validators.legacy import LegacyValidator
from tests.conftest import FIXED_SQL, VULNERABLE_SQL


@pytest.fixture
def legacy() -> LegacyValidator:
    return LegacyValidator()


@pytest.mark.parametrize(
    "challenge_id,content,passed",
    [
        ("sql-injection-basic", FIXED_SQL, True),
        ("sql-injection-basic", "db.query('SELECT ' + x + ' WHERE a=?')", False),
        ("sql-injection-basic", "db.query('SELECT ' + connection.escape(x))", True),
        ("xss-stored", "el.textContent = c.text;", True),
        ("xss-stored", "el.innerHTML += c.text;", False),
        ("jwt-weak-secret", "const SECRET = process.env.JWT_SECRET;", True),
        ("jwt-weak-secret", "const SECRET = process.env.JWT_SECRET || 'secret123';", False),
        ("path-traversal", "if (!safe.startsWith(PUBLIC_DIR)) throw new Error();", True),
        ("path-traversal", "fs.readFileSync(path.join(dir, name));", False),
        ("xxe-parser", "libxmljs.parseXml(xml, { noent: false });", True),
        ("xxe-parser", "libxmljs.parseXml(xml, { noent: true });", False),
    ],
)
def test_legacy_checks(legacy, challenge_id, content, passed) -> None:
    assert legacy.check(challenge_id, content).passed is passed


def test_unknown_challenge_uses_sql_check(legacy) -> None:
    verdict = legacy.check("brand-new", VULNERABLE_SQL)
    assert verdict.passed is False
    assert "parameterized" in verdict.message
