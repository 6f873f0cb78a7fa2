"""
Workflow Reconciler.

Brings ``.github/workflows/<target>.yml`` in a working copy in line with the
canonical workflow file, then commits and pushes when the staged tree differs
from HEAD (or when a refresh is forced).

Decision table, after copying the canonical file and staging the workflow dir:

    change set   force   action
    ----------   -----   ------------------------------------------
    non-empty    any     commit "add"/"update", push
    empty        no      nothing; up to date (or warning for a new file)
    empty        yes     empty "refresh" commit, push
"""
import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .commands import run_git
from .config import DeployConfig
from .errors import CommandError
from .messages import commit_message

logger = logging.getLogger("workflow_deploy.reconciler")


class ReconcileOutcome(str, Enum):
    ADDED = 'added'
    UPDATED = 'updated'
    REFRESHED = 'refreshed'
    UP_TO_DATE = 'up_to_date'
    NO_CHANGES = 'no_changes'
    FAILED = 'failed'


@dataclass
class ReconcileResult:
    outcome: ReconcileOutcome
    file_existed: bool = False
    committed: bool = False
    pushed: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not ReconcileOutcome.FAILED


def has_staged_changes(config: DeployConfig, repo_path: Path) -> bool:
    """True when the index differs from HEAD (``git diff --cached --quiet`` exits 1)."""
    proc = run_git(config.GIT_BIN, repo_path, "diff", "--cached", "--quiet", check=False)
    if proc.returncode == 0:
        return False
    if proc.returncode == 1:
        return True
    raise CommandError([config.GIT_BIN, "-C", str(repo_path), "diff", "--cached", "--quiet"],
                       proc.returncode, proc.stderr)


def reconcile_workflow(config: DeployConfig, repo_path: Path, source_file: Path,
                       *, force: bool = False) -> ReconcileResult:
    repo_path = Path(repo_path)
    source_file = Path(source_file)
    repo_name = repo_path.name
    logger.info("Setting up workflow in %s", repo_name)

    target_rel = config.workflow_relpath
    target = repo_path / target_rel
    target.parent.mkdir(parents=True, exist_ok=True)

    file_existed = target.is_file()
    if file_existed:
        logger.info("Workflow file already exists, checking for differences...")

    if not source_file.is_file():
        logger.error("Source workflow file not found: %s", source_file)
        return ReconcileResult(ReconcileOutcome.FAILED, file_existed=file_existed,
                               error=f"Source workflow file not found: {source_file}")

    shutil.copyfile(source_file, target)
    logger.info("Workflow file %s at %s", "updated" if file_existed else "created", target_rel.as_posix())

    try:
        run_git(config.GIT_BIN, repo_path, "add", "--", target_rel.parent.as_posix())
        changed = has_staged_changes(config, repo_path)
    except CommandError as e:
        logger.error("Failed to stage workflow changes in %s: %s", repo_name, e)
        return ReconcileResult(ReconcileOutcome.FAILED, file_existed=file_existed, error=str(e))

    if not changed and not force:
        if file_existed:
            logger.info("Workflow file is already up to date in %s", repo_name)
            return ReconcileResult(ReconcileOutcome.UP_TO_DATE, file_existed=True)
        logger.warning("No changes detected in %s (this shouldn't happen for new files)", repo_name)
        return ReconcileResult(ReconcileOutcome.NO_CHANGES, file_existed=False)

    forced_refresh = not changed
    if forced_refresh:
        logger.info("No changes detected but forcing commit in %s", repo_name)
        outcome = ReconcileOutcome.REFRESHED
    elif file_existed:
        outcome = ReconcileOutcome.UPDATED
    else:
        outcome = ReconcileOutcome.ADDED

    message = commit_message(config.WORKFLOW_LABEL, file_existed=file_existed, forced_refresh=forced_refresh)
    commit_args = ["commit", "-m", message]
    if forced_refresh:
        commit_args.insert(1, "--allow-empty")
    try:
        run_git(config.GIT_BIN, repo_path, *commit_args)
    except CommandError as e:
        logger.error("Failed to commit changes in %s: %s", repo_name, e)
        return ReconcileResult(ReconcileOutcome.FAILED, file_existed=file_existed, error=str(e))
    logger.info("Changes committed in %s", repo_name)

    try:
        run_git(config.GIT_BIN, repo_path, "push", "origin", f"HEAD:{config.BRANCH}")
    except CommandError as e:
        logger.error("Failed to push changes to %s: %s", repo_name, e)
        return ReconcileResult(ReconcileOutcome.FAILED, file_existed=file_existed,
                               committed=True, error=str(e))
    logger.info("Changes pushed to %s", repo_name)
    return ReconcileResult(outcome, file_existed=file_existed, committed=True, pushed=True)
