"""Reference data — vulnerability signatures, protective idioms, tool profiles.

This is the encoded security knowledge that makes pattern validation
deterministic. Patterns target the JavaScript idioms used by the gym's
challenges and are matched case-insensitively against the submitted text.
"""

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PatternRule:
    """One textual signature, either a known-bad or a known-good idiom."""

    id: str
    regex: str
    description: str
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled", re.compile(self.regex, re.IGNORECASE))

    def find_all(self, text: str) -> list[str]:
        """All non-overlapping matches, as matched substrings."""
        return [m.group(0) for m in self.compiled.finditer(text)]


@dataclass(frozen=True)
class PatternRuleSet:
    category: str
    display_name: str
    vulnerable_patterns: tuple[PatternRule, ...]
    secure_patterns: tuple[PatternRule, ...]
    recommendations: tuple[str, ...] = ()


# ──────────────────────────────────────────────────────────────────────
# SQL INJECTION
# ──────────────────────────────────────────────────────────────────────

SQL_INJECTION = PatternRuleSet(
    category="sql-injection",
    display_name="SQL Injection Protection",
    vulnerable_patterns=(
        PatternRule("sql-quote-concatenation", r"""['"`]\s*\+\s*\w+""",
                    "String literal concatenated with a variable"),
        PatternRule("sql-template-interpolation", r"\$\{[^}]*\}",
                    "Template literal interpolation"),
        PatternRule("sql-query-concatenation", r"""query\s*=\s*['"`][^'"`]*\+""",
                    "Query string built by concatenation"),
        PatternRule("sql-where-concatenation", r"""WHERE\s+\w+\s*=\s*['"`]\s*\+""",
                    "WHERE clause built by concatenation"),
    ),
    secure_patterns=(
        PatternRule("sql-placeholder-array", r"\?\s*,?\s*\[", "Placeholder followed by a parameter array"),
        PatternRule("sql-query-with-params", r"query\([^,]*,\s*\[", "Query call with a parameter array"),
        PatternRule("sql-prepared-statement", r"prepare\s*\(", "Prepared statement"),
        PatternRule("sql-escape", r"escape\s*\(", "Escaped input"),
    ),
    recommendations=(
        "Use parameterized queries with ? placeholders and pass user input as a parameter array",
        "Never build SQL by concatenating or interpolating user input",
    ),
)


# ──────────────────────────────────────────────────────────────────────
# CROSS-SITE SCRIPTING
# ──────────────────────────────────────────────────────────────────────

XSS = PatternRuleSet(
    category="xss",
    display_name="XSS Protection",
    vulnerable_patterns=(
        PatternRule("xss-innerhtml-template", r"innerHTML\s*=.*\$\{", "innerHTML assigned from a template literal"),
        PatternRule("xss-innerhtml-append", r"innerHTML\s*\+=.*[+]", "innerHTML appended by concatenation"),
        PatternRule("xss-outerhtml", r"outerHTML\s*=.*[+]", "outerHTML built by concatenation"),
        PatternRule("xss-document-write", r"document\.write\s*\(", "document.write usage"),
        PatternRule("xss-eval", r"eval\s*\(", "eval usage"),
    ),
    secure_patterns=(
        PatternRule("xss-text-content", r"textContent\s*=", "textContent assignment"),
        PatternRule("xss-inner-text", r"innerText\s*=", "innerText assignment"),
        PatternRule("xss-dompurify", r"DOMPurify\.sanitize", "DOMPurify sanitization"),
        PatternRule("xss-escape-html", r"escapeHtml\s*\(", "HTML escaping helper"),
        PatternRule("xss-create-element", r"createElement\s*\(", "Safe DOM node creation"),
    ),
    recommendations=(
        "Render untrusted text with textContent or innerText instead of innerHTML",
        "Sanitize any HTML you must render with DOMPurify.sanitize",
    ),
)


# ──────────────────────────────────────────────────────────────────────
# AUTHENTICATION / TOKENS
# ──────────────────────────────────────────────────────────────────────

AUTH = PatternRuleSet(
    category="auth",
    display_name="Authentication Security",
    vulnerable_patterns=(
        PatternRule("auth-hardcoded-secret", r"""['"`]secret\d*['"`]""", "Hardcoded secret"),
        PatternRule("auth-weak-jwt-secret", r"""jwt\.sign\([^,]*,\s*['"`][^'"`]{1,10}['"`]""",
                    "JWT signed with a short literal secret"),
        PatternRule("auth-plaintext-compare", r"===\s*password", "Plain text password comparison"),
        PatternRule("auth-alg-none", r"""algorithm\s*:\s*['"`]none['"`]""", "JWT algorithm 'none'"),
        PatternRule("auth-long-expiry", r"""expiresIn\s*:\s*['"`]\d+[dy]['"`]""", "Token expiry measured in days or years"),
    ),
    secure_patterns=(
        PatternRule("auth-env-secret", r"process\.env\.", "Secret read from the environment"),
        PatternRule("auth-bcrypt", r"bcrypt\.compare", "bcrypt password comparison"),
        PatternRule("auth-alg-allowlist", r"algorithms\s*:\s*\[", "Algorithm allow-list"),
        PatternRule("auth-short-expiry", r"""expiresIn\s*:\s*['"`]\d+[mh]['"`]""", "Short token expiry"),
        PatternRule("auth-random-bytes", r"crypto\.randomBytes", "Cryptographically secure randomness"),
    ),
    recommendations=(
        "Load secrets from environment variables (process.env) instead of hardcoding them",
        "Pin accepted JWT algorithms and keep token lifetimes short",
    ),
)


# ──────────────────────────────────────────────────────────────────────
# PATH TRAVERSAL
# ──────────────────────────────────────────────────────────────────────

PATH_TRAVERSAL = PatternRuleSet(
    category="path-traversal",
    display_name="Path Traversal Protection",
    vulnerable_patterns=(
        PatternRule("path-join-user-input", r"path\.join\([^,]*,\s*\w+\)", "path.join with untrusted input"),
        PatternRule("path-dot-dot", r"\.\./", "Directory traversal sequence"),
        PatternRule("path-readfile-concatenation", r"fs\.readFileSync\([^,]*\+", "File read with a concatenated path"),
        PatternRule("path-dynamic-require", r"require\([^)]*\+", "Dynamic require"),
    ),
    secure_patterns=(
        PatternRule("path-basename", r"path\.basename\s*\(", "path.basename normalisation"),
        PatternRule("path-relative", r"path\.relative\s*\(", "path.relative containment check"),
        PatternRule("path-prefix-check", r"startsWith\s*\(", "Path prefix validation"),
        PatternRule("path-allowlist", r"whitelist.*includes", "Allow-list validation"),
        PatternRule("path-validate-helper", r"validatePath\s*\(", "Custom path validation"),
    ),
    recommendations=(
        "Resolve the requested path and verify it stays inside the base directory with startsWith",
        "Strip directory components from user input with path.basename",
    ),
)


RULE_SETS: dict[str, PatternRuleSet] = {
    rule_set.category: rule_set
    for rule_set in (SQL_INJECTION, XSS, AUTH, PATH_TRAVERSAL)
}

# Challenge taxonomy labels that have no rule set of their own
CATEGORY_ALIASES: dict[str, str] = {
    "injection": "sql-injection",
    "xss": "xss",
    "broken-auth": "auth",
    "broken-access": "auth",
    "security-misconfig": "auth",
    "xxe": "path-traversal",
}

DEFAULT_CATEGORY = "sql-injection"


# ──────────────────────────────────────────────────────────────────────
# STATIC ANALYSIS PROFILE (ESLint + eslint-plugin-security)
# ──────────────────────────────────────────────────────────────────────

ESLINT_CONFIG_FILENAME = ".eslintrc.json"

ESLINT_SECURITY_CONFIG: dict = {
    "extends": ["eslint:recommended"],
    "plugins": ["security"],
    "rules": {
        "security/detect-sql-injection": "error",
        "security/detect-xss": "error",
        "security/detect-eval-with-expression": "error",
        "security/detect-non-literal-require": "error",
        "security/detect-non-literal-fs-filename": "error",
        "security/detect-unsafe-regex": "error",
        "security/detect-buffer-noassert": "error",
        "security/detect-child-process": "warn",
        "security/detect-disable-mustache-escape": "error",
        "security/detect-object-injection": "warn",
        "security/detect-new-buffer": "error",
        "security/detect-possible-timing-attacks": "warn",
        "security/detect-pseudoRandomBytes": "error",
        "security/detect-bidi-characters": "error",
    },
    "env": {
        "node": True,
        "es6": True,
        "browser": True,
    },
    "parserOptions": {
        "ecmaVersion": 2022,
        "sourceType": "module",
    },
}

# Marker a lint rule id must contain to count as a security finding
SECURITY_RULE_MARKER = "security"

ESLINT_SEVERITY_ERROR = 2

SECURITY_DEV_DEPENDENCIES: dict[str, str] = {
    "eslint": "^8.53.0",
    "eslint-plugin-security": "^1.7.1",
}

DEPENDENCY_MANIFEST = "package.json"

# npm audit reports five levels; issues only carry three
NPM_SEVERITY_MAP: dict[str, str] = {
    "critical": "high",
    "high": "high",
    "moderate": "medium",
    "medium": "medium",
    "low": "low",
    "info": "low",
}
