"""Tool runner — async subprocess boundary for the external security tools.

Every invocation is bounded by a timeout. Timeouts, missing binaries and OS
errors surface as ToolExecutionError so validators can apply their partial
credit policy. A non-zero exit code is NOT an error: linters and auditors
exit non-zero precisely when they have something to report.
"""

import asyncio
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

import structlog

from appsec_gym.config import get_settings
from appsec_gym.errors import ToolExecutionError

logger = structlog.get_logger()

Command = Union[str, Sequence[str]]


@dataclass
class ToolResult:
    exit_code: int
    stdout: str
    stderr: str


def split_command(command: Command) -> list[str]:
    """Accept "npx eslint" style strings as well as argv lists."""
    if isinstance(command, str):
        return shlex.split(command)
    return [str(part) for part in command]


class ToolRunner:
    """Runs external tools without ever blocking indefinitely."""

    def __init__(self, timeout: Optional[float] = None, probe_timeout: Optional[float] = None):
        settings = get_settings()
        self.timeout = timeout or settings.TOOL_TIMEOUT_SECONDS
        self.probe_timeout = probe_timeout or settings.PROBE_TIMEOUT_SECONDS

    async def run(
        self,
        command: Command,
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
    ) -> ToolResult:
        argv = split_command(command)
        if not argv:
            raise ToolExecutionError("<empty>", "no command given")

        label = " ".join(argv[:2])
        limit = timeout or self.timeout

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
            )
        except OSError as e:
            # FileNotFoundError when the binary is not installed
            raise ToolExecutionError(label, f"execution failed: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=limit)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            logger.warning("tool_timeout", command=label, timeout_seconds=limit)
            raise ToolExecutionError(label, f"timed out after {limit} seconds") from e

        result = ToolResult(
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        logger.debug("tool_finished", command=label, exit_code=result.exit_code)
        return result

    async def probe(self, command: Command) -> bool:
        """Quick availability check, e.g. ``npm --version``."""
        try:
            result = await self.run(command, timeout=self.probe_timeout)
        except ToolExecutionError:
            return False
        return result.exit_code == 0


async def probe_security_tools(runner: Optional[ToolRunner] = None) -> dict[str, bool]:
    """Which external validation tools answer a ``--version`` probe."""
    settings = get_settings()
    runner = runner or ToolRunner()
    return {
        "eslint": await runner.probe([*split_command(settings.ESLINT_COMMAND), "--version"]),
        "npm": await runner.probe([*split_command(settings.NPM_COMMAND), "--version"]),
    }
