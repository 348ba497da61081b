"""Repository synchronization ("upgrade") engine."""

from .default_mode import DefaultSynchronizer
from .hard_mode import HardSynchronizer
from .orchestrator import UpgradeContext, UpgradeStatus, Upgrader, upgrade
from .repository_info import RepositoryInfo, RepositoryState
from .runner import ProcessRunner
from .state import RepositoryProber
from .utils import CommandResult, UpgradeMode, UpgradeResult

__all__ = [
    'CommandResult',
    'DefaultSynchronizer',
    'HardSynchronizer',
    'ProcessRunner',
    'RepositoryInfo',
    'RepositoryProber',
    'RepositoryState',
    'UpgradeContext',
    'UpgradeMode',
    'UpgradeResult',
    'UpgradeStatus',
    'Upgrader',
    'upgrade',
]
