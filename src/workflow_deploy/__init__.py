"""Bulk deployment of a GitHub Actions workflow file across organization repositories.

The package wraps the ``git``, ``jq`` and (optionally) ``gh`` command-line tools:
each repository named in a JSON list is cloned into a scratch directory, its
workflow file is reconciled against a canonical copy, and any resulting commit
is pushed back to the default branch.

Example usage:
    ```python
    from src.workflow_deploy import DeployConfig, RunContext, read_repo_names, run_batch

    config = DeployConfig()
    ctx = RunContext(config=config, force=False)
    summary = run_batch(ctx, read_repo_names(config.REPOS_FILE))
    ```
"""
from .cleanup import register_cleanup, remove_scratch_dir
from .cloner import CloneOutcome, CloneResult, clone_repo
from .config import DeployConfig
from .errors import CommandError, PrerequisiteError, RepoListError, WorkflowDeployError
from .orchestrator import (
    RepoRecord,
    RunContext,
    RunSummary,
    check_prerequisites,
    generate_summary_report,
    process_repo,
    run_batch,
)
from .reconciler import ReconcileOutcome, ReconcileResult, reconcile_workflow
from .repo_list import read_repo_names, validate_repo_names

__all__ = [
    'DeployConfig',
    'WorkflowDeployError',
    'PrerequisiteError',
    'RepoListError',
    'CommandError',
    'read_repo_names',
    'validate_repo_names',
    'CloneOutcome',
    'CloneResult',
    'clone_repo',
    'ReconcileOutcome',
    'ReconcileResult',
    'reconcile_workflow',
    'RepoRecord',
    'RunContext',
    'RunSummary',
    'check_prerequisites',
    'generate_summary_report',
    'process_repo',
    'run_batch',
    'register_cleanup',
    'remove_scratch_dir',
]

__version__ = '0.1.0'
