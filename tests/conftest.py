import shutil
import stat
import subprocess
from pathlib import Path

import pytest

from src.workflow_deploy.config import DeployConfig

ORG = "testorg"
WORKFLOW_CONTENT = "name: SonarQube\non:\n  push:\n    branches: [main]\n"

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
requires_jq = pytest.mark.skipif(shutil.which("jq") is None, reason="jq is not installed")


def git(*args, cwd=None):
    return subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True).stdout


@pytest.fixture
def git_identity(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Deploy Bot")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "deploy-bot@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Deploy Bot")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "deploy-bot@example.com")


@pytest.fixture
def workspace(tmp_path, monkeypatch, git_identity):
    """Point every configurable path at tmp_path and disable the gh CLI."""
    remotes = tmp_path / "remotes"
    (remotes / ORG).mkdir(parents=True)
    source = tmp_path / "canonical" / "example-usage.yml"
    source.parent.mkdir()
    source.write_text(WORKFLOW_CONTENT)

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_ORG", ORG)
    monkeypatch.setenv("GIT_REMOTE_BASE", f"file://{remotes}")
    monkeypatch.setenv("DEPLOY_REPOS_FILE", str(tmp_path / "repos.json"))
    monkeypatch.setenv("DEPLOY_WORKFLOW_SOURCE", str(source))
    monkeypatch.setenv("DEPLOY_TEMP_DIR", str(tmp_path / "scratch"))
    monkeypatch.setenv("DEPLOY_REPORT_DIR", str(tmp_path / "reports"))
    monkeypatch.setenv("GH_BIN", "")
    return tmp_path


@pytest.fixture
def config(workspace):
    return DeployConfig()


@pytest.fixture
def make_remote(workspace):
    """Create a bare remote ``<org>/<name>.git`` with one commit on main."""

    def _make(name, workflow=None):
        bare = workspace / "remotes" / ORG / f"{name}.git"
        git("init", "--bare", "-b", "main", str(bare))
        seed = workspace / "seed" / name
        seed.mkdir(parents=True)
        git("init", "-b", "main", cwd=seed)
        (seed / "README.md").write_text(f"# {name}\n")
        if workflow is not None:
            target = seed / ".github" / "workflows" / "sonarqube-analysis.yml"
            target.parent.mkdir(parents=True)
            target.write_text(workflow)
        git("add", ".", cwd=seed)
        git("commit", "-m", "initial commit", cwd=seed)
        git("push", str(bare), "main", cwd=seed)
        return bare

    return _make


def commit_count(bare: Path) -> int:
    return int(git("--git-dir", str(bare), "rev-list", "--count", "main").strip())


def last_subject(bare: Path) -> str:
    return git("--git-dir", str(bare), "log", "-1", "--format=%s", "main").strip()


def write_fake_gh(directory: Path, body: str) -> str:
    """Write an executable stand-in for the ``gh`` CLI and return its path."""
    script = directory / "bin" / "gh"
    script.parent.mkdir(exist_ok=True)
    script.write_text("#!/bin/sh\n" + body + "\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)
