"""
Configuration for the workflow deployment tool.

Values come from the environment, which the CLI populates from a ``.env`` file
via python-dotenv before building a :class:`DeployConfig`.
"""
import os
import shutil
from pathlib import Path
from typing import Optional

DEFAULT_ORG = "iic2154-uc-cl"


def is_unsafe_scratch_dir(path) -> bool:
    """True when removing ``path`` would delete the working directory or an ancestor of it."""
    scratch = Path(path).resolve()
    cwd = Path.cwd().resolve()
    return scratch == cwd or scratch in cwd.parents


class DeployConfig:
    """Configuration for a deployment batch."""

    def __init__(self):
        self.ORG_NAME = os.getenv("GITHUB_ORG", DEFAULT_ORG)
        if not self.ORG_NAME:
            raise ValueError("GITHUB_ORG must not be empty")
        self.GIT_REMOTE_BASE = os.getenv("GIT_REMOTE_BASE", "https://github.com").rstrip("/")
        self.REPOS_FILE = Path(os.getenv("DEPLOY_REPOS_FILE", "repos.json"))
        self.WORKFLOW_SOURCE = Path(os.getenv("DEPLOY_WORKFLOW_SOURCE", ".github/workflows/example-usage.yml"))
        self.TARGET_WORKFLOW = os.getenv("DEPLOY_TARGET_WORKFLOW", "sonarqube-analysis.yml")
        self.WORKFLOW_LABEL = os.getenv("DEPLOY_WORKFLOW_LABEL", "SonarQube analysis workflow")
        self.TEMP_DIR = Path(os.getenv("DEPLOY_TEMP_DIR", "temp_repos"))
        if is_unsafe_scratch_dir(self.TEMP_DIR):
            raise ValueError(f"DEPLOY_TEMP_DIR must not be the working directory or one of its parents: {self.TEMP_DIR}")
        self.BRANCH = os.getenv("DEPLOY_BRANCH", "main")
        self.REPORT_DIR = Path(os.path.abspath(os.getenv("DEPLOY_REPORT_DIR", "deploy_reports")))
        self.GIT_BIN = os.getenv("GIT_BIN", "git")
        self.JQ_BIN = os.getenv("JQ_BIN", "jq")
        self.GH_BIN = os.getenv("GH_BIN", "gh")

    @property
    def workflow_relpath(self) -> Path:
        """Destination of the workflow file inside a working copy."""
        return Path(".github") / "workflows" / self.TARGET_WORKFLOW

    def remote_url(self, repo_name: str) -> str:
        return f"{self.GIT_REMOTE_BASE}/{self.ORG_NAME}/{repo_name}.git"

    def hosting_cli(self) -> Optional[str]:
        """Absolute path of the hosting-service CLI, or None when it is not installed."""
        if not self.GH_BIN:
            return None
        return shutil.which(self.GH_BIN)
