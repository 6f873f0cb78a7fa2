import json

import pytest

import deploy_workflow
from conftest import requires_git, requires_jq


@pytest.fixture
def no_cleanup_hooks(monkeypatch):
    registered = []
    monkeypatch.setattr(deploy_workflow, "register_cleanup", registered.append)
    return registered


def test_help_exits_zero(workspace, capsys):
    with pytest.raises(SystemExit) as exc:
        deploy_workflow.main(["--help"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "--dry-run" in out and "--force" in out


def test_unknown_argument_exits_one(workspace, capsys):
    with pytest.raises(SystemExit) as exc:
        deploy_workflow.main(["--bogus"])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "--bogus" in err
    assert "Use --help for usage information" in err


@requires_jq
def test_dry_run_lists_repositories_without_touching_scratch(workspace, capsys, no_cleanup_hooks):
    (workspace / "repos.json").write_text(json.dumps(["one", "two", "three"]))
    scratch = workspace / "scratch"

    assert deploy_workflow.main(["--dry-run"]) == 0

    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("  - ")]
    assert lines == ["  - one", "  - two", "  - three"]
    assert not scratch.exists()
    assert no_cleanup_hooks == []


def test_missing_repo_list_is_fatal(workspace, no_cleanup_hooks):
    assert deploy_workflow.main([]) == 1


@requires_jq
def test_malformed_repo_list_is_fatal_in_dry_run(workspace):
    (workspace / "repos.json").write_text("[oops")
    assert deploy_workflow.main(["--dry-run"]) == 1


@requires_git
@requires_jq
def test_full_run_reports_failures_with_exit_one(workspace, no_cleanup_hooks):
    (workspace / "repos.json").write_text(json.dumps(["ghost"]))
    assert deploy_workflow.main([]) == 1
    assert no_cleanup_hooks == [workspace / "scratch"]
    assert (workspace / "reports" / "deploy_summary.md").is_file()


@requires_git
@requires_jq
def test_full_run_succeeds(workspace, make_remote, no_cleanup_hooks):
    make_remote("repoA")
    (workspace / "repos.json").write_text(json.dumps(["repoA"]))
    assert deploy_workflow.main(["--force"]) == 0


@pytest.mark.parametrize("argv", [["--forc"], ["--dry"], ["--dry-run", "--force"]])
def test_abbreviated_or_combined_modes_exit_one(workspace, capsys, argv):
    with pytest.raises(SystemExit) as exc:
        deploy_workflow.main(argv)
    assert exc.value.code == 1
    assert "Use --help for usage information" in capsys.readouterr().err


def test_scratch_dir_at_working_directory_is_rejected(workspace, monkeypatch):
    monkeypatch.setenv("DEPLOY_TEMP_DIR", ".")
    assert deploy_workflow.main([]) == 1


def test_run_exits_130_on_keyboard_interrupt(monkeypatch):
    def _interrupted(argv=None):
        raise KeyboardInterrupt

    monkeypatch.setattr(deploy_workflow, "main", _interrupted)
    with pytest.raises(SystemExit) as exc:
        deploy_workflow.run()
    assert exc.value.code == 130


def test_run_exits_1_on_unexpected_error(monkeypatch):
    def _broken(argv=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(deploy_workflow, "main", _broken)
    with pytest.raises(SystemExit) as exc:
        deploy_workflow.run()
    assert exc.value.code == 1


def test_run_passes_through_main_status(monkeypatch):
    monkeypatch.setattr(deploy_workflow, "main", lambda argv=None: 0)
    with pytest.raises(SystemExit) as exc:
        deploy_workflow.run()
    assert exc.value.code == 0
