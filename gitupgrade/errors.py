"""Error types raised by the upgrade engine."""

from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional


class ErrorCategory(Enum):
    """Categories of upgrade failures."""
    CONFIGURATION = "configuration"
    ENVIRONMENT = "environment"
    TOOL_INVOCATION = "tool_invocation"
    SEMANTIC_TOOL = "semantic_tool"
    STATE = "state"


class UpgradeError(Exception):
    """
    Base class for every terminal upgrade failure.

    Attributes:
        category: Broad failure class, see ErrorCategory
        error_code: Stable machine-readable code
        message: Human readable description
        step: Name of the step that failed, if any
        output: Raw tool output captured for the failing step
    """

    category = ErrorCategory.STATE
    default_code = "UPGRADE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        step: Optional[str] = None,
        output: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.step = step
        self.output = output
        self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary for structured logging."""
        result = {
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "timestamp": self.timestamp,
        }
        if self.step:
            result["step"] = self.step
        if self.output:
            result["output"] = self.output
        return result


class ConfigurationError(UpgradeError):
    """Invalid or incomplete repository configuration."""
    category = ErrorCategory.CONFIGURATION
    default_code = "INVALID_CONFIGURATION"


class WorkingDirectoryError(UpgradeError):
    """The target directory cannot be created, inspected or cleaned."""
    category = ErrorCategory.ENVIRONMENT
    default_code = "WORKING_DIRECTORY_ERROR"


class CommandFailedError(UpgradeError):
    """An external command could not be launched or exited non-zero."""
    category = ErrorCategory.TOOL_INVOCATION
    default_code = "COMMAND_FAILED"


class FatalOutputError(UpgradeError):
    """The tool reported ``fatal:`` in its output despite a zero exit status."""
    category = ErrorCategory.SEMANTIC_TOOL
    default_code = "FATAL_OUTPUT"
