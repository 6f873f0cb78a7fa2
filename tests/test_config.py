import pytest

from src.workflow_deploy.cleanup import remove_scratch_dir
from src.workflow_deploy.config import DeployConfig, is_unsafe_scratch_dir


@pytest.fixture
def in_project(tmp_path, monkeypatch):
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


def test_defaults(in_project, monkeypatch):
    for name in ("GITHUB_ORG", "GIT_REMOTE_BASE", "DEPLOY_TEMP_DIR", "DEPLOY_BRANCH", "DEPLOY_TARGET_WORKFLOW"):
        monkeypatch.delenv(name, raising=False)
    config = DeployConfig()
    assert config.ORG_NAME == "iic2154-uc-cl"
    assert config.remote_url("demo") == "https://github.com/iic2154-uc-cl/demo.git"
    assert config.BRANCH == "main"
    assert config.workflow_relpath.as_posix() == ".github/workflows/sonarqube-analysis.yml"


@pytest.mark.parametrize("scratch", [".", "..", "./", "sub/.."])
def test_scratch_dir_covering_working_directory_is_rejected(in_project, monkeypatch, scratch):
    monkeypatch.setenv("DEPLOY_TEMP_DIR", scratch)
    with pytest.raises(ValueError, match="DEPLOY_TEMP_DIR"):
        DeployConfig()


def test_scratch_dir_inside_working_directory_is_accepted(in_project, monkeypatch):
    monkeypatch.setenv("DEPLOY_TEMP_DIR", "temp_repos")
    assert DeployConfig().TEMP_DIR.name == "temp_repos"
    assert not is_unsafe_scratch_dir(in_project / "temp_repos")


def test_empty_org_is_rejected(in_project, monkeypatch):
    monkeypatch.setenv("GITHUB_ORG", "")
    with pytest.raises(ValueError, match="GITHUB_ORG"):
        DeployConfig()


def test_cleanup_refuses_to_remove_an_ancestor_of_cwd(in_project, tmp_path):
    assert remove_scratch_dir(tmp_path) is False
    assert in_project.is_dir()
