"""Value types shared by the upgrade runner, synchronizers and orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .repository_info import RepositoryInfo

FATAL_MARKER = "fatal:"


class UpgradeMode(Enum):
    """Synchronization strategy."""
    DEFAULT = "default"  # fetch + reset on an existing checkout
    HARD = "hard"        # rebuild .git from scratch


@dataclass
class CommandResult:
    """Outcome of one external command."""
    command: List[str]
    output: str
    returncode: Optional[int]
    error: Optional[str] = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        """True when the process started and exited with status 0."""
        return self.error is None

    @property
    def has_fatal_marker(self) -> bool:
        return FATAL_MARKER in self.output

    @property
    def failed(self) -> bool:
        return not self.ok or self.has_fatal_marker

    def describe(self) -> str:
        return " ".join(self.command)


@dataclass
class UpgradeResult:
    """Result of a completed synchronization."""
    success: bool
    message: str
    operation: str
    mode: UpgradeMode
    branch_used: Optional[str] = None
    fell_back: bool = False
    steps: List[CommandResult] = field(default_factory=list)
    repository_info: Optional["RepositoryInfo"] = None
