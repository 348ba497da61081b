"""External process execution for the upgrade engine."""

import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Dict, Optional, Union

from ..platform import get_git_executable
from .utils import CommandResult


class ProcessRunner:
    """
    Runs external commands and captures their combined output.

    The runner never raises for a failed command: launch failures and
    non-zero exits are reported through ``CommandResult.error`` so callers
    decide what is terminal. The working directory is passed on every call.
    """

    def __init__(self, git_executable: Optional[str] = None, env: Optional[Dict[str, str]] = None):
        """
        Initialize ProcessRunner.

        Args:
            git_executable: Name or path of the git binary used by git()
            env: Extra environment variables for every command
        """
        self.git_executable = git_executable or get_git_executable()
        self.logger = logging.getLogger('gitupgrade.upgrade.runner')
        self._env = dict(os.environ)
        # Git localises its messages; the fatal: marker check needs English.
        self._env["LC_ALL"] = "C"
        if env:
            self._env.update(env)

    def run(self, cwd: Union[str, Path], command: str, *args: str) -> CommandResult:
        """
        Execute ``command`` with ``args`` inside ``cwd``.

        Returns:
            CommandResult with stdout and stderr interleaved in ``output``
        """
        argv = [command, *args]
        self.logger.debug(f"$ {' '.join(argv)} (cwd={cwd})")
        start_time = time.monotonic()

        try:
            process = subprocess.run(
                argv,
                cwd=str(cwd),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                env=self._env,
                check=False,
            )
        except OSError as e:
            self.logger.error(f"❌ Could not launch {command}: {e}")
            return CommandResult(
                command=argv,
                output="",
                returncode=None,
                error=f"failed to launch {command}: {e}",
                duration=time.monotonic() - start_time,
            )

        result = CommandResult(
            command=argv,
            output=process.stdout or "",
            returncode=process.returncode,
            error=None if process.returncode == 0 else f"exit status {process.returncode}",
            duration=time.monotonic() - start_time,
        )

        if result.output.strip():
            self.logger.info(f"{result.describe()}:\n{result.output.rstrip()}")
        if result.error:
            self.logger.debug(f"{result.describe()} failed with {result.error}")

        return result

    def git(self, cwd: Union[str, Path], *args: str) -> CommandResult:
        """Run a git subcommand inside ``cwd``."""
        return self.run(cwd, self.git_executable, *args)
