"""Degraded-mode validator — plain substring checks per challenge.

Only used when the validation engine itself raises, so the user still gets a
verdict. Kept separate from the engine so both paths are testable alone.
"""

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class LegacyVerdict:
    passed: bool
    message: str


def _check_sql_injection(content: str) -> LegacyVerdict:
    if "?" in content and "' +" not in content:
        return LegacyVerdict(True, "Great! You fixed the SQL injection by using parameterized queries.")
    if "mysql.escape" in content or "connection.escape" in content:
        return LegacyVerdict(True, "Good! You fixed it by escaping user input.")
    return LegacyVerdict(False, "Still vulnerable. Try using parameterized queries with ? placeholders.")


def _check_xss(content: str) -> LegacyVerdict:
    if "textContent" in content or "innerText" in content:
        return LegacyVerdict(True, "Excellent! Using textContent prevents XSS attacks.")
    if "escapeHtml" in content or "DOMPurify" in content:
        return LegacyVerdict(True, "Great! You sanitized the input properly.")
    return LegacyVerdict(False, "Still vulnerable. Try using textContent instead of innerHTML.")


def _check_jwt_secret(content: str) -> LegacyVerdict:
    if "process.env" in content and "secret123" not in content:
        return LegacyVerdict(True, "Perfect! Using environment variables for secrets is the right approach.")
    return LegacyVerdict(False, "Still vulnerable. Store the secret in an environment variable.")


def _check_path_traversal(content: str) -> LegacyVerdict:
    if "path.basename" in content or "startsWith" in content:
        return LegacyVerdict(True, "Nice! The requested path is now confined to the public directory.")
    return LegacyVerdict(False, "Still vulnerable. Check that the resolved path stays inside the base directory.")


def _check_xxe(content: str) -> LegacyVerdict:
    if "noent: true" not in content and "noent" in content:
        return LegacyVerdict(True, "Well done! External entity expansion is disabled.")
    return LegacyVerdict(False, "Still vulnerable. Parse XML with entity expansion disabled (noent: false).")


LEGACY_CHECKS: dict[str, Callable[[str], LegacyVerdict]] = {
    "sql-injection-basic": _check_sql_injection,
    "xss-stored": _check_xss,
    "jwt-weak-secret": _check_jwt_secret,
    "path-traversal": _check_path_traversal,
    "xxe-parser": _check_xxe,
}

DEFAULT_LEGACY_CHECK = "sql-injection-basic"


class LegacyValidator:
    """Challenge-id keyed fallback checks."""

    def __init__(self, checks: Optional[dict[str, Callable[[str], LegacyVerdict]]] = None):
        self.checks = checks or LEGACY_CHECKS

    def check(self, challenge_id: str, content: str) -> LegacyVerdict:
        check_fn = self.checks.get(challenge_id) or self.checks[DEFAULT_LEGACY_CHECK]
        return check_fn(content)
