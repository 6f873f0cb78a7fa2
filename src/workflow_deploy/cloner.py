"""
Repository Cloner.

Clones one repository into the scratch directory, preferring the GitHub CLI
(``gh repo clone <org>/<name>``) and falling back to a plain ``git clone`` of
the HTTPS remote. The result records which method succeeded, or why each one
failed.
"""
import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .commands import run_cmd, run_git
from .config import DeployConfig
from .errors import CommandError

logger = logging.getLogger("workflow_deploy.cloner")


class CloneOutcome(str, Enum):
    """How a clone attempt ended."""
    HOSTING_CLI = 'hosting_cli'
    GIT = 'git'
    FAILED = 'failed'


@dataclass
class CloneResult:
    repo_name: str
    path: Path
    outcome: CloneOutcome
    # False when the hosting CLI is not installed and was never tried.
    hosting_cli_attempted: bool = False
    hosting_cli_error: Optional[str] = None
    git_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not CloneOutcome.FAILED


def _usable_working_copy(config: DeployConfig, path: Path) -> bool:
    if not (path / ".git").exists():
        return False
    proc = run_git(config.GIT_BIN, path, "rev-parse", "--git-dir", check=False)
    return proc.returncode == 0


def _reset_destination(dest: Path) -> None:
    if dest.exists() or dest.is_symlink():
        logger.warning("Directory %s already exists. Removing...", dest)
        if dest.is_dir() and not dest.is_symlink():
            shutil.rmtree(dest)
        else:
            dest.unlink()


def clone_repo(config: DeployConfig, repo_name: str, dest: Optional[Path] = None,
               *, hosting_cli: Optional[str] = None) -> CloneResult:
    """Produce a fresh working copy of ``<org>/<repo_name>`` at ``dest``.

    ``hosting_cli`` is the resolved path of ``gh``; pass None to skip straight
    to the plain git clone.
    """
    dest = Path(dest) if dest is not None else config.TEMP_DIR / repo_name
    logger.info("Cloning repository: %s", repo_name)
    _reset_destination(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)

    result = CloneResult(repo_name=repo_name, path=dest, outcome=CloneOutcome.FAILED)

    if hosting_cli:
        result.hosting_cli_attempted = True
        try:
            run_cmd([hosting_cli, "repo", "clone", f"{config.ORG_NAME}/{repo_name}", str(dest)])
            if _usable_working_copy(config, dest):
                logger.info("Successfully cloned %s using GitHub CLI", repo_name)
                result.outcome = CloneOutcome.HOSTING_CLI
                return result
            result.hosting_cli_error = "clone finished without a usable working copy"
        except CommandError as e:
            result.hosting_cli_error = e.stderr or str(e)
        logger.warning("Failed to clone with GitHub CLI, trying git clone...")
        # A half-written checkout must not leak into the git fallback.
        shutil.rmtree(dest, ignore_errors=True)

    try:
        run_git(config.GIT_BIN, None, "clone", config.remote_url(repo_name), str(dest))
    except CommandError as e:
        result.git_error = e.stderr or str(e)
        logger.error("Failed to clone %s: %s", repo_name, result.git_error)
        return result

    if not _usable_working_copy(config, dest):
        result.git_error = "clone finished without a usable working copy"
        logger.error("Failed to clone %s: %s", repo_name, result.git_error)
        return result

    logger.info("Successfully cloned %s using git", repo_name)
    result.outcome = CloneOutcome.GIT
    return result
