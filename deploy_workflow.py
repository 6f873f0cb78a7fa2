#!/usr/bin/env python3
"""
SonarQube workflow deployment across an organization's repositories.

Reads repository names from repos.json, clones each repository of the
organization into a scratch directory, writes the canonical workflow file to
.github/workflows/<target>.yml, and commits and pushes the change to main when
the file is new or different.

Defaults (override in .env or the environment):
- GITHUB_ORG=iic2154-uc-cl
- DEPLOY_REPOS_FILE=repos.json
- DEPLOY_WORKFLOW_SOURCE=.github/workflows/example-usage.yml
- DEPLOY_TARGET_WORKFLOW=sonarqube-analysis.yml
- DEPLOY_TEMP_DIR=temp_repos

Usage examples:
- Full run:
  ./deploy_workflow.py
- List the repositories that would be processed:
  ./deploy_workflow.py --dry-run
- Commit even when the workflow file is already identical:
  ./deploy_workflow.py --force

Prerequisites:
- git command line tool
- jq (JSON processor)
- GitHub authentication (via gh CLI or git credentials)
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from src.workflow_deploy.cleanup import register_cleanup
from src.workflow_deploy.config import DeployConfig
from src.workflow_deploy.errors import WorkflowDeployError
from src.workflow_deploy.orchestrator import RunContext, check_prerequisites, generate_summary_report, run_batch
from src.workflow_deploy.repo_list import read_repo_names

# Load environment variables from .env file
load_dotenv(override=True)


class DeployArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits 1 (not 2) on unknown options."""

    def error(self, message):
        self.exit(1, f"Error: {message}\nUse --help for usage information\n")


def setup_logging(verbosity: int = 1, log_dir: str = 'logs'):
    level = logging.INFO
    if verbosity > 1:
        level = logging.DEBUG
    elif verbosity == 0:
        level = logging.WARNING
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    try:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, 'deploy_workflow.log')))
    except OSError:
        pass
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )


def build_parser(config: DeployConfig) -> argparse.ArgumentParser:
    parser = DeployArgumentParser(
        allow_abbrev=False,
        description='Deploy the SonarQube analysis workflow to every repository listed in '
                    f'{config.REPOS_FILE} in the {config.ORG_NAME} organization.',
        epilog='Prerequisites: git, jq, GitHub authentication (gh CLI or git credentials), '
               f'{config.REPOS_FILE} and {config.WORKFLOW_SOURCE}.',
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--dry-run', action='store_true',
                      help='Show what would be done without making changes')
    mode.add_argument('--force', action='store_true',
                      help='Force update even if workflow file is identical')
    parser.add_argument('-v', '--verbose', action='count', default=1,
                        help='Increase verbosity (can be specified multiple times)')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Suppress output (overrides --verbose)')
    return parser


def dry_run(config: DeployConfig) -> int:
    logging.info("DRY RUN MODE - No changes will be made")
    check_prerequisites(config, dry_run=True)
    logging.info("Repositories that would be processed:")
    for repo_name in read_repo_names(config.REPOS_FILE, jq_bin=config.JQ_BIN):
        print(f"  - {repo_name}")
    return 0


def deploy(config: DeployConfig, force: bool = False) -> int:
    logging.info(f"Starting SonarQube workflow deployment to {config.ORG_NAME} repositories")
    register_cleanup(config.TEMP_DIR)

    hosting_cli = check_prerequisites(config)
    repo_names = read_repo_names(config.REPOS_FILE, jq_bin=config.JQ_BIN)

    ctx = RunContext(config=config, force=force, hosting_cli=hosting_cli)
    summary = run_batch(ctx, repo_names)
    report = generate_summary_report(ctx)
    logging.info(f"Summary report written to {report}")
    return summary.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = DeployConfig()
    except ValueError as e:
        print(f"Error: {str(e)}")
        print("Please ensure you have a .env file with valid variables or set them in your environment.")
        return 1

    parser = build_parser(config)
    args = parser.parse_args(argv)

    if args.quiet:
        args.verbose = 0
    setup_logging(args.verbose)

    try:
        if args.dry_run:
            return dry_run(config)
        return deploy(config, force=args.force)
    except WorkflowDeployError as e:
        logging.error(str(e))
        return 1


def run():
    """Console entry point: exits with the status of :func:`main`."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.info("Deployment interrupted by user")
        sys.exit(130)
    except Exception as e:
        logging.error(f"Unexpected error: {str(e)}")
        if logging.getLogger().getEffectiveLevel() <= logging.DEBUG:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    run()