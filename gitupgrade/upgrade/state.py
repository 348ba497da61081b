"""Repository state detection for the upgrade engine."""

import configparser
import logging
from pathlib import Path
from typing import Optional, Union

from git import GitDB, Repo, InvalidGitRepositoryError, NoSuchPathError

from ..config import RepositoryConfig
from ..errors import WorkingDirectoryError
from .repository_info import RepositoryState, RepositoryInfo


class RepositoryProber:
    """
    Classifies a target directory without launching git.

    Metadata is read through GitPython with the pure-Python GitDB object
    database, so no git process is started.
    """

    def __init__(self):
        self.logger = logging.getLogger('gitupgrade.upgrade.state')

    def classify(self, directory: Union[str, Path]) -> RepositoryState:
        """
        Detect the current state of ``directory``.

        Raises:
            WorkingDirectoryError: if the path exists but is not a directory
        """
        directory = Path(directory)

        if not directory.exists():
            self.logger.debug(f"Repository state: ABSENT ({directory})")
            return RepositoryState.ABSENT

        if not directory.is_dir():
            raise WorkingDirectoryError(
                f"{directory} exists and is not a directory",
                error_code="NOT_A_DIRECTORY"
            )

        # A .git file (worktree/submodule pointer) still counts as metadata.
        if (directory / ".git").exists():
            self.logger.debug(f"Repository state: EXISTS_WITH_METADATA ({directory})")
            return RepositoryState.EXISTS_WITH_METADATA

        self.logger.debug(f"Repository state: EXISTS_NO_METADATA ({directory})")
        return RepositoryState.EXISTS_NO_METADATA

    def inspect(self, config: RepositoryConfig) -> RepositoryInfo:
        """
        Get the state of the configured directory and what its metadata says.

        Returns:
            RepositoryInfo; ``usable`` tells whether default mode can proceed
        """
        state = self.classify(config.dir)
        info = RepositoryInfo(
            state=state,
            metadata_valid=False,
            local_branch=None,
            remote_url=None,
            tracking_configured=False,
            expected_remote_url=config.remote_url,
        )

        if state != RepositoryState.EXISTS_WITH_METADATA:
            return info

        try:
            with Repo(config.dir, odbt=GitDB) as repo:
                info.metadata_valid = True
                # False for an unborn branch, e.g. after an interrupted hard run
                info.has_commit = repo.head.is_valid()
                info.local_branch = self._active_branch(repo)
                info.remote_url = self._remote_url(repo, config.remote_name)
                if info.local_branch:
                    info.tracking_configured = self._tracks(repo, info.local_branch, config.remote_ref)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            self.logger.warning(f"⚠️ Git metadata in {config.dir} is not a valid repository: {e}")
        except (ValueError, OSError) as e:
            self.logger.warning(f"⚠️ Git metadata in {config.dir} could not be read: {e}")

        self.logger.debug(f"Repository info: {info}")
        return info

    def current_branch(self, directory: Union[str, Path]) -> Optional[str]:
        """Name of the checked-out branch, or None if detached or unreadable."""
        try:
            with Repo(directory, odbt=GitDB) as repo:
                return self._active_branch(repo)
        except (InvalidGitRepositoryError, NoSuchPathError, ValueError, OSError) as e:
            self.logger.debug(f"Error getting current local branch: {e}")
            return None

    def _active_branch(self, repo: Repo) -> Optional[str]:
        try:
            return repo.active_branch.name
        except (TypeError, ValueError):
            # Detached HEAD
            return None

    def _remote_url(self, repo: Repo, remote_name: str) -> Optional[str]:
        try:
            return repo.config_reader("repository").get_value(f'remote "{remote_name}"', "url")
        except (configparser.NoSectionError, configparser.NoOptionError):
            return None

    def _tracks(self, repo: Repo, branch_name: str, remote_ref: str) -> bool:
        for head in repo.heads:
            if head.name == branch_name:
                tracking = head.tracking_branch()
                return tracking is not None and tracking.name == remote_ref
        return False
