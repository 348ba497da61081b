"""Public entry point that selects and runs a synchronizer."""

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from ..config import RepositoryConfig
from ..errors import UpgradeError
from ..platform import get_git_executable
from .default_mode import DefaultSynchronizer
from .hard_mode import HardSynchronizer
from .runner import ProcessRunner
from .state import RepositoryProber
from .utils import UpgradeMode, UpgradeResult


class UpgradeStatus(Enum):
    """Lifecycle of a single Upgrader."""
    CREATED = "created"
    PROBING = "probing"
    SYNCING = "syncing"
    CALLBACK_RUN = "callback_run"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class UpgradeContext:
    """
    One upgrade invocation.

    ``mode`` of None lets the orchestrator pick: default mode when the
    directory holds a usable checkout of the configured remote, hard otherwise.
    """
    repository: RepositoryConfig
    mode: Optional[UpgradeMode] = None
    git_executable: str = field(default_factory=get_git_executable)

    def with_mode(self, mode: Optional[UpgradeMode]) -> "UpgradeContext":
        return dataclasses.replace(self, mode=mode)


class Upgrader:
    """Runs one upgrade for an UpgradeContext."""

    def __init__(
        self,
        context: UpgradeContext,
        runner: Optional[ProcessRunner] = None,
        prober: Optional[RepositoryProber] = None,
    ):
        """
        Initialize Upgrader.

        Args:
            context: Repository and mode to use
            runner: Process runner, built from ``context.git_executable`` if omitted
            prober: Repository prober shared with the synchronizers
        """
        self.context = context
        self.logger = logging.getLogger('gitupgrade.upgrade.orchestrator')
        self.runner = runner or ProcessRunner(context.git_executable)
        self.prober = prober or RepositoryProber()
        self.hard_synchronizer = HardSynchronizer(self.runner, self.prober)
        self.default_synchronizer = DefaultSynchronizer(self.runner, self.prober, self.hard_synchronizer)
        self._status = UpgradeStatus.CREATED

    @property
    def status(self) -> UpgradeStatus:
        return self._status

    def default(self) -> "Upgrader":
        """Force default mode. Last call between default() and hard() wins."""
        return self._select(UpgradeMode.DEFAULT)

    def hard(self) -> "Upgrader":
        """Force hard mode. Last call between default() and hard() wins."""
        return self._select(UpgradeMode.HARD)

    def _select(self, mode: UpgradeMode) -> "Upgrader":
        if self._status != UpgradeStatus.CREATED:
            raise UpgradeError(
                f"Cannot change mode once the upgrade is {self._status.value}",
                error_code="MODE_LOCKED"
            )
        self.context = self.context.with_mode(mode)
        return self

    def do(self, callback: Optional[Callable[[], None]] = None) -> UpgradeResult:
        """
        Run the upgrade to completion.

        The callback runs only after every step succeeded. Any failure marks
        the upgrade FAILED and re-raises without calling it.

        Returns:
            UpgradeResult of the synchronizer that ran

        Raises:
            UpgradeError: on configuration errors or any failing step
        """
        if self._status != UpgradeStatus.CREATED:
            raise UpgradeError(
                f"Upgrade already {self._status.value}; create a new Upgrader",
                error_code="ALREADY_STARTED"
            )

        repository = self.context.repository
        try:
            repository.validate()

            self._status = UpgradeStatus.PROBING
            mode = self._select_mode(repository)

            self._status = UpgradeStatus.SYNCING
            self.logger.info(f"Starting {mode.value} upgrade of {repository.dir} from {repository.remote_url}")
            if mode == UpgradeMode.HARD:
                result = self.hard_synchronizer.sync(repository)
            else:
                result = self.default_synchronizer.sync(repository)
        except UpgradeError as e:
            self._status = UpgradeStatus.FAILED
            self.logger.error(f"❌ Upgrade failed: {e.message}", extra={'operation': e.step or 'upgrade'})
            raise

        if callback is not None:
            self._status = UpgradeStatus.CALLBACK_RUN
            try:
                callback()
            except Exception:
                self._status = UpgradeStatus.FAILED
                raise

        self._status = UpgradeStatus.DONE
        self.logger.info(f"✅ Upgrade finished: {result.message}")
        return result

    def _select_mode(self, repository: RepositoryConfig) -> UpgradeMode:
        if self.context.mode is not None:
            self.logger.debug(f"Using requested {self.context.mode.value} mode")
            return self.context.mode

        info = self.prober.inspect(repository)
        mode = UpgradeMode.DEFAULT if info.usable else UpgradeMode.HARD
        self.logger.info(f"Detected {info.state.value} repository, selecting {mode.value} mode")
        return mode


def upgrade(
    repository: RepositoryConfig,
    callback: Optional[Callable[[], None]] = None,
    mode: Optional[UpgradeMode] = None,
    git_executable: Optional[str] = None,
) -> UpgradeResult:
    """
    Synchronize ``repository.dir`` with its remote branch.

    Convenience wrapper around ``Upgrader(UpgradeContext(...)).do(callback)``.
    """
    context = UpgradeContext(
        repository=repository,
        mode=mode,
        git_executable=git_executable or get_git_executable(),
    )
    return Upgrader(context).do(callback)
