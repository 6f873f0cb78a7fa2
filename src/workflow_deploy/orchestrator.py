"""
Orchestrator: drives Lister -> Cloner -> Reconciler over the repository list.

Repositories are processed one at a time in list order. A failure in one
repository is recorded and the batch moves on; only prerequisite errors stop
a run before it starts.
"""
import datetime
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .cloner import CloneResult, clone_repo
from .commands import tool_available
from .config import DeployConfig
from .errors import PrerequisiteError, WorkflowDeployError
from .reconciler import ReconcileOutcome, ReconcileResult, reconcile_workflow

logger = logging.getLogger("workflow_deploy.orchestrator")

SEPARATOR = "-" * 40


@dataclass
class RepoRecord:
    name: str
    succeeded: bool
    outcome: str
    detail: str = ""


@dataclass
class RunSummary:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    records: List[RepoRecord] = field(default_factory=list)

    def record(self, name: str, succeeded: bool, outcome: str, detail: str = "") -> RepoRecord:
        rec = RepoRecord(name=name, succeeded=succeeded, outcome=outcome, detail=detail)
        self.total += 1
        if succeeded:
            self.succeeded += 1
        else:
            self.failed += 1
        self.records.append(rec)
        return rec

    @property
    def exit_code(self) -> int:
        return 0 if self.failed == 0 else 1


@dataclass
class RunContext:
    """Per-batch state handed to every step instead of module globals."""
    config: DeployConfig
    force: bool = False
    hosting_cli: Optional[str] = None
    summary: RunSummary = field(default_factory=RunSummary)
    # Console sink for banners and separators; print by default.
    echo: Callable[[str], None] = print


def check_prerequisites(config: DeployConfig, *, dry_run: bool = False) -> Optional[str]:
    """Verify required files and tools; return the hosting CLI path if installed.

    Raises PrerequisiteError on the first missing mandatory item.
    """
    logger.info("Checking prerequisites...")
    if not Path(config.REPOS_FILE).is_file():
        raise PrerequisiteError(f"{config.REPOS_FILE} file not found!")
    if not tool_available(config.JQ_BIN):
        raise PrerequisiteError("jq is not installed! Please install jq to parse JSON.")
    if dry_run:
        return None
    if not Path(config.WORKFLOW_SOURCE).is_file():
        raise PrerequisiteError(f"{config.WORKFLOW_SOURCE} workflow file not found!")
    if not tool_available(config.GIT_BIN):
        raise PrerequisiteError("Git is not installed!")

    hosting_cli = config.hosting_cli()
    if not hosting_cli:
        logger.warning("GitHub CLI (gh) is not installed. Using git clone with HTTPS.")
        logger.warning("For private repositories, make sure you have proper authentication configured.")
    logger.info("Prerequisites check completed!")
    return hosting_cli


def _clone_detail(result: CloneResult) -> str:
    parts = []
    if result.hosting_cli_error:
        parts.append(f"gh: {result.hosting_cli_error}")
    if result.git_error:
        parts.append(f"git: {result.git_error}")
    return "; ".join(parts)


def process_repo(ctx: RunContext, repo_name: str) -> RepoRecord:
    """Clone and reconcile one repository, recording exactly one outcome."""
    config = ctx.config
    try:
        cloned = clone_repo(config, repo_name, config.TEMP_DIR / repo_name, hosting_cli=ctx.hosting_cli)
        if not cloned.ok:
            logger.error("Failed to clone %s", repo_name)
            return ctx.summary.record(repo_name, False, "clone_failed", _clone_detail(cloned))

        result: ReconcileResult = reconcile_workflow(
            config, cloned.path, Path(config.WORKFLOW_SOURCE).resolve(), force=ctx.force,
        )
    except (WorkflowDeployError, OSError) as e:
        logger.error("Error processing repository %s: %s", repo_name, e)
        return ctx.summary.record(repo_name, False, ReconcileOutcome.FAILED.value, str(e))

    if result.ok:
        logger.info("Successfully processed %s", repo_name)
    else:
        logger.error("Failed to setup workflow in %s", repo_name)
    return ctx.summary.record(repo_name, result.ok, result.outcome.value, result.error or "")


def run_batch(ctx: RunContext, repo_names: Iterable[str]) -> RunSummary:
    """Process every repository in order and print the end-of-run summary."""
    ctx.config.TEMP_DIR.mkdir(parents=True, exist_ok=True)
    for index, repo_name in enumerate(repo_names, start=1):
        ctx.echo("")
        logger.info("Processing repository %d: %s", index, repo_name)
        ctx.echo(SEPARATOR)
        rec = process_repo(ctx, repo_name)
        ctx.echo(f"[{'OK' if rec.succeeded else 'FAILED'}] {repo_name}: {rec.outcome}")
        ctx.echo(SEPARATOR)

    summary = ctx.summary
    ctx.echo("")
    ctx.echo("Deployment Summary:")
    ctx.echo(f"   Total repositories: {summary.total}")
    ctx.echo(f"   Successfully processed: {summary.succeeded}")
    ctx.echo(f"   Errors: {summary.failed}")
    if summary.failed == 0:
        logger.info("All repositories processed successfully!")
    else:
        logger.warning("Some repositories had errors. Please check the logs above.")
    return summary


def generate_summary_report(ctx: RunContext, report_dir: Optional[Path] = None) -> Path:
    report_dir = Path(report_dir or ctx.config.REPORT_DIR)
    report_dir.mkdir(parents=True, exist_ok=True)
    summary = ctx.summary
    summary_file = report_dir / "deploy_summary.md"
    with summary_file.open('w', encoding='utf-8') as f:
        f.write("# Workflow Deployment Summary\n\n")
        f.write(f"**Run Date:** {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")
        f.write(f"**Organization:** {ctx.config.ORG_NAME}\n\n")
        f.write(f"**Workflow:** {ctx.config.workflow_relpath.as_posix()}\n\n")
        f.write(f"**Forced:** {'yes' if ctx.force else 'no'}\n\n")
        f.write(f"- Total repositories: {summary.total}\n")
        f.write(f"- Successfully processed: {summary.succeeded}\n")
        f.write(f"- Errors: {summary.failed}\n\n")
        f.write("| Repository | Status | Outcome | Detail |\n")
        f.write("|------------|--------|---------|--------|\n")
        for rec in summary.records:
            detail = rec.detail.replace("|", "\\|").replace("\n", " ")
            f.write(f"| {rec.name} | {'success' if rec.succeeded else 'error'} | {rec.outcome} | {detail} |\n")
    return summary_file
