"""Incremental synchronization of an existing checkout."""

import logging
from typing import Optional

from ..config import RepositoryConfig
from .hard_mode import HardSynchronizer
from .runner import ProcessRunner
from .state import RepositoryProber
from .sync_operations import SyncOperations
from .utils import CommandResult, UpgradeMode, UpgradeResult


class DefaultSynchronizer(SyncOperations):
    """
    Fetches and hard-resets a checkout that already tracks the remote.

    Directories without usable metadata (missing, invalid, or pointing at
    another remote) are handed to HardSynchronizer instead of failing.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        prober: Optional[RepositoryProber] = None,
        hard: Optional[HardSynchronizer] = None,
    ):
        super().__init__(runner, prober, logging.getLogger('gitupgrade.upgrade.default_mode'))
        self.hard = hard or HardSynchronizer(self.runner, self.prober)

    def sync(self, config: RepositoryConfig) -> UpgradeResult:
        """
        Bring ``config.dir`` to ``config.remote_ref`` without re-initialising.

        Steps:
        1. Ensure the directory exists
        2. Fall back to hard mode if there is no usable checkout
        3. Fetch the remote
        4. Switch to the configured branch if needed
        5. Reset hard to the remote branch

        Raises:
            UpgradeError: on the first failing step
        """
        self.ensure_directory(config.dir)

        info = self.prober.inspect(config)
        if not info.usable:
            self.logger.warning(
                f"⚠️ No usable checkout in {config.dir} "
                f"(state={info.state.value}, valid={info.metadata_valid}, remote={info.remote_url}); "
                f"falling back to hard mode"
            )
            result = self.hard.sync(config)
            result.fell_back = True
            return result

        steps: list[CommandResult] = []
        self.logger.info(f"Fetching {config.remote_name} into {config.dir}")
        self.run_step(config, "fetch", steps, "fetch", config.remote_name)

        self.align_branch(config, steps, info.local_branch, info.tracking_configured)

        self.logger.info(f"Resetting {config.dir} to {config.remote_ref}")
        self.run_step(config, "reset", steps, "reset", "--hard", config.remote_ref)

        self.logger.info(f"✅ {config.dir} synchronized with {config.remote_ref}")
        return UpgradeResult(
            success=True,
            message=f"Synchronized {config.dir} with {config.remote_ref}",
            operation="default_sync",
            mode=UpgradeMode.DEFAULT,
            branch_used=config.branch,
            steps=steps,
            repository_info=info,
        )
