"""Repository state data structures."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RepositoryState(Enum):
    """Enumeration of possible target directory states."""
    ABSENT = "absent"                              # Directory does not exist
    EXISTS_NO_METADATA = "exists_no_metadata"      # Directory exists, no .git
    EXISTS_WITH_METADATA = "exists_with_metadata"  # .git present, maybe unusable


@dataclass
class RepositoryInfo:
    """Information about the target directory and its Git metadata."""
    state: RepositoryState
    metadata_valid: bool
    local_branch: Optional[str]
    remote_url: Optional[str]
    tracking_configured: bool
    expected_remote_url: Optional[str] = None
    has_commit: bool = False

    @property
    def usable(self) -> bool:
        """Whether an incremental fetch + reset can work on this checkout."""
        return (
            self.state == RepositoryState.EXISTS_WITH_METADATA
            and self.metadata_valid
            and self.has_commit
            and self.remote_url is not None
            and self.remote_url == self.expected_remote_url
        )
