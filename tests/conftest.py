from pathlib import Path
from typing import Union

import pytest

from appsec_gym.config import get_settings
from appsec_gym.errors import ToolExecutionError
from appsec_gym.services.tool_runner import ToolResult, ToolRunner

VULNERABLE_SQL = """\
function login(username, password) {
  const query = "SELECT * FROM users WHERE username = '" + username + "'";
  return db.query(query);
}
"""

PLACEHOLDER_ONLY_SQL = """\
function login(username, password) {
  const query = "SELECT * FROM users WHERE username = ?";
  return db.query(query);
}
"""

FIXED_SQL = """\
function login(username, password) {
  const query = "SELECT * FROM users WHERE username = ? AND password = ?";
  return db.query(query, [username, password]);
}
"""


class FakeRunner(ToolRunner):
    """Replays scripted tool results; an empty script means the tool is missing."""

    def __init__(self, *results: Union[ToolResult, Exception]):
        super().__init__(timeout=1.0, probe_timeout=1.0)
        self.results = list(results)
        self.calls: list[tuple[list[str], Path]] = []

    async def run(self, command, cwd=None, timeout=None) -> ToolResult:
        self.calls.append((list(command), cwd))
        if not self.results:
            raise ToolExecutionError(str(command[0]), "not installed")
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def settings(tmp_path, monkeypatch):
    """Isolated gym home with the external tools switched off."""
    monkeypatch.setenv("APPSEC_GYM_HOME_DIR", str(tmp_path / "home"))
    monkeypatch.setenv("APPSEC_GYM_ENABLE_STATIC_ANALYSIS", "false")
    monkeypatch.setenv("APPSEC_GYM_ENABLE_DEPENDENCY_SCAN", "false")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def workspace(tmp_path) -> Path:
    path = tmp_path / "ws"
    path.mkdir()
    return path


def write_submission(workspace: Path, content: str, name: str = "vulnerable.js") -> Path:
    path = workspace / name
    path.write_text(content, encoding="utf-8")
    return path
