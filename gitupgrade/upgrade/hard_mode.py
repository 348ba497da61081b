"""Destructive full resynchronization."""

import logging
import shutil
from typing import Optional

from ..config import RepositoryConfig
from ..errors import WorkingDirectoryError
from .repository_info import RepositoryState
from .runner import ProcessRunner
from .state import RepositoryProber
from .sync_operations import SyncOperations
from .utils import CommandResult, UpgradeMode, UpgradeResult

# Used when the freshly initialised HEAD cannot be read.
CONVENTIONAL_DEFAULT_BRANCH = "master"


class HardSynchronizer(SyncOperations):
    """Discards any existing .git and rebuilds the checkout from the remote."""

    def __init__(self, runner: Optional[ProcessRunner] = None, prober: Optional[RepositoryProber] = None):
        super().__init__(runner, prober, logging.getLogger('gitupgrade.upgrade.hard_mode'))

    def sync(self, config: RepositoryConfig) -> UpgradeResult:
        """
        Rebuild ``config.dir`` as a checkout of ``config.remote_ref``.

        Steps:
        1. Ensure the directory exists
        2. Remove existing Git metadata
        3. git init
        4. Register the remote
        5. Fetch the remote
        6. Reset hard to the remote branch
        7. Put the checkout on the configured branch with tracking

        Working tree files are left in place; step 6 overwrites tracked ones.

        Raises:
            UpgradeError: on the first failing step
        """
        self.ensure_directory(config.dir)

        if self.prober.classify(config.dir) == RepositoryState.EXISTS_WITH_METADATA:
            self.remove_metadata(config)

        steps: list[CommandResult] = []
        self.run_step(config, "init", steps, "init")

        initial_branch = self.prober.current_branch(config.dir) or CONVENTIONAL_DEFAULT_BRANCH

        self.run_step(config, "remote_add", steps, "remote", "add", config.remote_name, config.remote_url)

        self.logger.info(f"Fetching {config.remote_url} as {config.remote_name}")
        self.run_step(config, "fetch", steps, "fetch", config.remote_name)

        self.logger.info(f"Resetting {config.dir} to {config.remote_ref}")
        self.run_step(config, "reset", steps, "reset", "--hard", config.remote_ref)

        self.align_branch(config, steps, initial_branch)

        self.logger.info(f"✅ {config.dir} rebuilt from {config.remote_ref}")
        return UpgradeResult(
            success=True,
            message=f"Rebuilt {config.dir} from {config.remote_ref}",
            operation="hard_sync",
            mode=UpgradeMode.HARD,
            branch_used=config.branch,
            steps=steps,
        )

    def remove_metadata(self, config: RepositoryConfig) -> None:
        """
        Delete ``.git`` (directory or gitfile) from the target directory.

        Raises:
            WorkingDirectoryError: if the metadata cannot be removed
        """
        metadata = config.metadata_dir
        self.logger.warning(f"⚠️ Removing existing Git metadata at {metadata}")

        try:
            if metadata.is_dir() and not metadata.is_symlink():
                shutil.rmtree(metadata)
            else:
                metadata.unlink()
        except OSError as e:
            raise WorkingDirectoryError(
                f"Cannot remove Git metadata at {metadata}: {e}",
                error_code="METADATA_REMOVE_FAILED"
            ) from e

        self.logger.info("Existing Git metadata removed")
