"""Configuration management for gitupgrade."""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Union

from dotenv import load_dotenv

from .errors import ConfigurationError
from .platform import get_git_executable, normalize_path

DEFAULT_REMOTE_NAME = "origin"
DEFAULT_BRANCH = "master"
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass(frozen=True)
class RepositoryConfig:
    """Describes the directory to synchronize and the branch it must mirror."""

    dir: Union[str, Path]
    remote_url: str = ""
    remote_name: str = DEFAULT_REMOTE_NAME
    branch: str = DEFAULT_BRANCH

    def __post_init__(self):
        # An empty dir is kept as-is so validate() can report it.
        if isinstance(self.dir, Path) or str(self.dir).strip():
            object.__setattr__(self, "dir", normalize_path(self.dir))

    def validate(self) -> None:
        """
        Check that the configuration can drive a synchronization.

        Raises:
            ConfigurationError: if any required field is empty
        """
        if not self.remote_url or not self.remote_url.strip():
            raise ConfigurationError("repository remote URL is empty", error_code="NO_REMOTE_URL")
        if not isinstance(self.dir, Path):
            raise ConfigurationError("repository directory is empty", error_code="NO_DIRECTORY")
        if not self.remote_name or not self.remote_name.strip():
            raise ConfigurationError("remote name is empty", error_code="NO_REMOTE_NAME")
        if not self.branch or not self.branch.strip():
            raise ConfigurationError("branch name is empty", error_code="NO_BRANCH")

    @property
    def remote_ref(self) -> str:
        """Remote-tracking reference the checkout is reset to."""
        return f"{self.remote_name}/{self.branch}"

    @property
    def metadata_dir(self) -> Path:
        """Location of the Git metadata inside the target directory."""
        return Path(self.dir) / ".git"


@dataclass
class Config:
    """Process-level settings for the upgrade command."""

    repository: RepositoryConfig
    log_level: str = "INFO"
    git_executable: str = field(default_factory=get_git_executable)

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}",
                error_code="INVALID_LOG_LEVEL"
            )
        if not self.git_executable:
            raise ConfigurationError("git executable is empty", error_code="NO_GIT_EXECUTABLE")


def load_configuration(env_file: Optional[Path] = None) -> Config:
    """
    Load configuration from the environment, reading a ``.env`` file first.

    Variables already present in the environment win over the ``.env`` file.

    Args:
        env_file: Explicit ``.env`` path, otherwise python-dotenv searches for one

    Returns:
        Config built from GITUPGRADE_* variables
    """
    load_dotenv(dotenv_path=env_file)

    try:
        repository = RepositoryConfig(
            dir=os.getenv("GITUPGRADE_DIR", "."),
            remote_url=os.getenv("GITUPGRADE_REMOTE_URL", ""),
            remote_name=os.getenv("GITUPGRADE_REMOTE_NAME", DEFAULT_REMOTE_NAME),
            branch=os.getenv("GITUPGRADE_BRANCH", DEFAULT_BRANCH),
        )
        return Config(
            repository=repository,
            log_level=os.getenv("GITUPGRADE_LOG_LEVEL", "INFO"),
            git_executable=os.getenv("GITUPGRADE_GIT_EXECUTABLE") or get_git_executable(),
        )
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Configuration error: {e}")


def validate_configuration(config: Config) -> List[str]:
    """Validate configuration and return any errors or warnings."""
    errors = []
    repository = config.repository

    try:
        repository.validate()
    except ConfigurationError as e:
        errors.append(f"ERROR: {e.message}")

    url = repository.remote_url or ""
    if url and not (url.startswith(("http://", "https://", "git@", "ssh://", "git://", "file://"))
                    or Path(url).is_absolute()):
        errors.append(f"WARNING: Git remote URL may be invalid: {url}")

    if isinstance(repository.dir, Path):
        # The first existing ancestor must be writable for mkdir to succeed.
        anchor = repository.dir
        while not anchor.exists() and anchor != anchor.parent:
            anchor = anchor.parent
        if not anchor.is_dir():
            errors.append(f"ERROR: {anchor} exists and is not a directory")
        elif not os.access(anchor, os.W_OK):
            errors.append(f"ERROR: No write permission for {anchor}")

    if errors:
        logging.getLogger('gitupgrade.config').debug(f"Configuration issues: {errors}")

    return errors
