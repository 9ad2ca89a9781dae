"""Subprocess execution service for the Plumber installer."""

import shutil
import subprocess
from typing import List, Optional

from plumberinstaller.errors import InstallerError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, default_timeout: Optional[float] = None, cwd: Optional[str] = None):
        self.logger = logger
        self.default_timeout = default_timeout
        self.cwd = cwd

    def which(self, name: str) -> bool:
        return shutil.which(name) is not None

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                timeout=effective_timeout,
                cwd=self.cwd,
            )
        except FileNotFoundError as exc:
            if not check:
                self.logger.debug("Command not found: %s", cmd[0])
                return subprocess.CompletedProcess(cmd, 127, stdout="", stderr="")
            raise InstallerError(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            if not check:
                self.logger.debug("Command timed out after %ss: %s", effective_timeout, cmd_str)
                return subprocess.CompletedProcess(cmd, 124, stdout="", stderr="")
            raise InstallerError(
                f"Command timed out after {effective_timeout}s: {cmd_str}"
            ) from exc
        except OSError as exc:
            if not check:
                self.logger.debug("Could not execute %s: %s", cmd_str, exc)
                return subprocess.CompletedProcess(cmd, 126, stdout="", stderr=str(exc))
            raise InstallerError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0 or not check:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"
        raise InstallerError(message)
