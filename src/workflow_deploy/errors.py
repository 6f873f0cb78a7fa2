"""Error types raised by the workflow deployment tool."""
from typing import Optional, Sequence


class WorkflowDeployError(RuntimeError):
    """Base class for every error raised by this package."""


class PrerequisiteError(WorkflowDeployError):
    """A required file or command-line tool is missing."""


class RepoListError(WorkflowDeployError):
    """The repository list is absent, malformed, or names invalid repositories."""


class CommandError(WorkflowDeployError):
    """An external command exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: Optional[str] = None):
        self.command = list(args)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        details = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"Command failed ({returncode}): {' '.join(self.command)}{details}")
