"""
gitupgrade - keep a deployment directory identical to a remote Git branch.

Brings a local working directory to the exact state of one upstream branch,
either incrementally (fetch + reset) or by rebuilding its Git metadata.
"""

__version__ = "1.0.0"
__description__ = "Force a working directory to mirror one remote Git branch"

from .config import RepositoryConfig
from .errors import UpgradeError
from .upgrade import UpgradeContext, UpgradeMode, UpgradeResult, Upgrader, upgrade

__all__ = [
    "RepositoryConfig",
    "UpgradeContext",
    "UpgradeError",
    "UpgradeMode",
    "UpgradeResult",
    "Upgrader",
    "upgrade",
]
