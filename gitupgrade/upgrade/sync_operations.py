"""Step helpers shared by the default and hard synchronizers."""

import logging
from pathlib import Path
from typing import List, Optional

from ..config import RepositoryConfig
from ..errors import CommandFailedError, FatalOutputError, WorkingDirectoryError
from .runner import ProcessRunner
from .state import RepositoryProber
from .utils import CommandResult


class SyncOperations:
    """
    Base class for synchronizers.

    Each git step goes through ``run_step`` which records the result and
    raises on failure, so a synchronizer body reads as a flat list of steps.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        prober: Optional[RepositoryProber] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.runner = runner or ProcessRunner()
        self.prober = prober or RepositoryProber()
        self.logger = logger or logging.getLogger('gitupgrade.upgrade.sync')

    def ensure_directory(self, directory: Path) -> None:
        """
        Create ``directory`` (mode 0755) if it does not exist.

        Raises:
            WorkingDirectoryError: if the directory cannot be created
        """
        if directory.is_dir():
            return
        if directory.exists():
            raise WorkingDirectoryError(
                f"{directory} exists and is not a directory",
                error_code="NOT_A_DIRECTORY"
            )

        try:
            directory.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise WorkingDirectoryError(
                f"Cannot create working directory {directory}: {e}",
                error_code="DIRECTORY_CREATE_FAILED"
            ) from e
        self.logger.info(f"Created working directory {directory}")

    def run_step(
        self,
        config: RepositoryConfig,
        step: str,
        steps: List[CommandResult],
        *args: str,
    ) -> CommandResult:
        """
        Run ``git <args>`` in the target directory as the named step.

        Raises:
            CommandFailedError: if git could not start or exited non-zero
            FatalOutputError: if the output carries the ``fatal:`` marker
        """
        self.logger.debug(f"Step {step}")
        result = self.runner.git(config.dir, *args)
        steps.append(result)

        if not result.ok:
            self.logger.error(f"❌ {step} failed: {result.error}")
            raise CommandFailedError(
                f"{step} failed ({result.describe()}): {result.error}",
                error_code=f"{step.upper()}_FAILED",
                step=step,
                output=result.output,
            )
        if result.has_fatal_marker:
            self.logger.error(f"❌ {step} reported a fatal error")
            raise FatalOutputError(
                f"{step} reported a fatal error ({result.describe()})",
                error_code=f"{step.upper()}_FATAL",
                step=step,
                output=result.output,
            )

        return result

    def align_branch(
        self,
        config: RepositoryConfig,
        steps: List[CommandResult],
        local_branch: Optional[str],
        tracking_configured: bool = False,
    ) -> None:
        """
        Leave the checkout on ``config.branch`` tracking the remote branch.

        Switching is forced because the following or preceding hard reset
        discards local changes anyway.
        """
        if local_branch != config.branch:
            self.logger.info(
                f"Switching from {local_branch or 'detached HEAD'} to {config.branch} "
                f"tracking {config.remote_ref}"
            )
            self.run_step(
                config, "checkout", steps,
                "checkout", "-f", "-B", config.branch, "--track", config.remote_ref
            )
        elif not tracking_configured:
            self.run_step(
                config, "set_upstream", steps,
                "branch", f"--set-upstream-to={config.remote_ref}", config.branch
            )
