"""Cross-platform helpers for locating Git and normalising paths."""

import platform
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .upgrade.runner import ProcessRunner


class PlatformType(Enum):
    """Supported platform types."""
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    UNKNOWN = "unknown"


class PlatformInfo:
    """Platform information and utilities."""

    def __init__(self):
        self._platform_type = self._detect_platform()

    def _detect_platform(self) -> PlatformType:
        system = platform.system().lower()

        if system == "windows":
            return PlatformType.WINDOWS
        elif system == "darwin":
            return PlatformType.MACOS
        elif system == "linux":
            return PlatformType.LINUX
        else:
            return PlatformType.UNKNOWN

    @property
    def is_windows(self) -> bool:
        return self._platform_type == PlatformType.WINDOWS

    def get_system_info(self) -> Dict[str, Any]:
        """Get a summary of the host used in the CLI startup banner."""
        return {
            'platform': self._platform_type.value,
            'release': platform.release(),
            'machine': platform.machine(),
            'python_version': platform.python_version(),
        }


_platform_info: Optional[PlatformInfo] = None


def get_platform_info() -> PlatformInfo:
    """Get the global platform info instance."""
    global _platform_info
    if _platform_info is None:
        _platform_info = PlatformInfo()
    return _platform_info


def normalize_path(path: Union[str, Path]) -> Path:
    """
    Normalize a path for the current platform.

    Args:
        path: Path to normalize

    Returns:
        Absolute Path with ``~`` expanded
    """
    if isinstance(path, str):
        path = Path(path)

    return path.expanduser().resolve()


def get_git_executable() -> str:
    """Get the Git executable name for the current platform."""
    if get_platform_info().is_windows:
        return "git.exe"
    return "git"


def validate_git_availability(runner: "ProcessRunner", cwd: Optional[Path] = None) -> tuple[bool, Optional[str]]:
    """
    Validate that Git can be launched through the given runner.

    Args:
        runner: Process runner configured with the Git executable
        cwd: Directory to run ``git --version`` in (defaults to the current one)

    Returns:
        Tuple of (is_available, error_message)
    """
    result = runner.git(cwd or Path.cwd(), "--version")

    if result.ok and result.output.startswith("git version"):
        return True, None
    if result.returncode is None:
        return False, f"Git executable '{runner.git_executable}' not found: {result.error}"
    return False, f"Git command failed: {result.output.strip() or result.error}"
