"""
Command Executor Service.

Runs external commands (git) asynchronously so template checks can fan out
without blocking each other. Handles timeouts, output capturing, and logging.
"""

import asyncio
import contextlib
import time
from dataclasses import dataclass
from pathlib import Path

from vaulty.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Result of a command execution."""
    command: str
    exit_code: int
    stdout: str
    stderr: str
    duration: float
    is_timeout: bool = False

    @property
    def is_success(self) -> bool:
        """Check if command succeeded."""
        return self.exit_code == 0 and not self.is_timeout


class CommandExecutor:
    """
    Command executor wrapper.
    """

    def __init__(self, default_timeout: float = 30.0):
        self.default_timeout = default_timeout

    async def run_async(
        self,
        command: list[str],
        cwd: str | Path | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """
        Execute a command asynchronously.

        Args:
            command: List of arguments, never passed through a shell
            cwd: Working directory
            timeout: Execution timeout in seconds

        Returns:
            CommandResult object
        """
        start_time = time.perf_counter()
        timeout_val = timeout if timeout is not None else self.default_timeout
        cmd_str = " ".join(command)
        logger.debug("executing_command", command=cmd_str, cwd=str(cwd or "."), timeout=timeout_val)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except OSError as e:
            logger.error("command_execution_error", command=cmd_str, error=str(e))
            return CommandResult(
                command=cmd_str,
                exit_code=-2,
                stdout="",
                stderr=f"Execution error: {e!s}",
                duration=time.perf_counter() - start_time,
            )

        try:
            stdout_data, stderr_data = await asyncio.wait_for(process.communicate(), timeout=timeout_val)
        except asyncio.TimeoutError:
            logger.warning("command_timeout", command=cmd_str, timeout=timeout_val)
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            return CommandResult(
                command=cmd_str,
                exit_code=-1,
                stdout="",
                stderr="Command timed out",
                duration=time.perf_counter() - start_time,
                is_timeout=True,
            )

        duration = time.perf_counter() - start_time
        result = CommandResult(
            command=cmd_str,
            exit_code=process.returncode,
            stdout=stdout_data.decode("utf-8", errors="replace"),
            stderr=stderr_data.decode("utf-8", errors="replace"),
            duration=duration,
        )
        logger.debug("command_finished", command=cmd_str, exit_code=result.exit_code, duration=duration)
        return result
