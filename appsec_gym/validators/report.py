"""Report formatter — renders a ValidationResult for humans.

``format_report`` returns plain text (used by tests, logs and the API);
``print_report`` writes the same report with colour to a rich Console.
"""

import io

from rich.console import Console, Group
from rich.rule import Rule
from rich.text import Text

from appsec_gym.validators.models import Severity, ValidationResult

_SEVERITY_STYLES = {
    Severity.HIGH.value: "bold red",
    Severity.MEDIUM.value: "yellow",
    Severity.LOW.value: "cyan",
}


def _issue_summary(issue) -> list[str]:
    lines = []
    if issue.rule:
        lines.append(f"Rule: {issue.rule}")
    if issue.package:
        lines.append(f"Package: {issue.package}")
    if issue.title:
        lines.append(issue.title)
    if issue.message:
        lines.append(issue.message)
    if issue.matches:
        lines.append("Matched: " + ", ".join(repr(m) for m in issue.matches))
    if issue.line:
        location = f"{issue.file}:{issue.line}" if issue.file else str(issue.line)
        lines.append(f"Line: {location}")
    return lines


def build_report(result: ValidationResult) -> Group:
    """Assemble the report as a rich renderable."""
    parts = [
        Text("Security Validation Report", style="bold cyan"),
        Rule(style="white"),
    ]

    status_style = "green" if result.passed else "red"
    score = Text("Overall Score: ", style="bold")
    score.append(f"{result.score:g}/{result.max_score}", style=status_style)
    score.append(f" ({result.grade})")
    parts.append(score)

    status = Text("Status: ", style="bold")
    status.append("PASSED" if result.passed else "FAILED", style=status_style)
    parts.append(status)

    parts.append(Text())
    parts.append(Text("Security Checks:", style="bold"))
    for check in result.checks:
        if check.partial:
            icon, style = "[~]", "yellow"
        elif check.passed:
            icon, style = "[ok]", "green"
        else:
            icon, style = "[x]", "red"
        line = Text("  ")
        line.append(icon, style=style)
        line.append(f" {check.name}: {check.message}")
        parts.append(line)

    if result.security_issues:
        parts.append(Text())
        parts.append(Text("Security Issues Found:", style="bold red"))
        for index, issue in enumerate(result.security_issues, start=1):
            line = Text(f"  {index}. ")
            line.append(str(issue.severity).upper(), style=_SEVERITY_STYLES.get(issue.severity, ""))
            line.append(f" - {issue.type}")
            parts.append(line)
            for detail in _issue_summary(issue):
                parts.append(Text(f"     {detail}"))

    if result.recommendations:
        parts.append(Text())
        parts.append(Text("Recommendations:", style="bold blue"))
        for index, rec in enumerate(result.recommendations, start=1):
            parts.append(Text(f"  {index}. {rec}"))

    return Group(*parts)


def print_report(console: Console, result: ValidationResult) -> None:
    console.print(build_report(result))


def format_report(result: ValidationResult, width: int = 100) -> str:
    """Render the report to plain text."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, highlight=False)
    print_report(console, result)
    return buffer.getvalue()
