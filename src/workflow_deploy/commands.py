"""
Thin wrappers around the external command-line collaborators (git, jq, gh).

Every invocation takes explicit paths; nothing here changes the process
working directory.
"""
import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .errors import CommandError

logger = logging.getLogger("workflow_deploy.commands")

PathLike = Union[str, Path]


def tool_available(name: str) -> bool:
    return bool(name) and shutil.which(name) is not None


def run_cmd(args: Sequence[str], *, check: bool = True) -> subprocess.CompletedProcess:
    """Run a command with captured output.

    Raises CommandError when ``check`` is set and the command exits non-zero,
    or when the executable cannot be started at all.
    """
    cmd: List[str] = [str(a) for a in args]
    logger.debug("$ %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True,
                              encoding="utf-8", errors="replace", check=False)
    except OSError as e:
        raise CommandError(cmd, 127, str(e)) from e
    if check and proc.returncode != 0:
        raise CommandError(cmd, proc.returncode, proc.stderr or proc.stdout)
    return proc


def run_git(git_bin: str, repo_path: Optional[PathLike], *args: str,
            check: bool = True) -> subprocess.CompletedProcess:
    """Run ``git`` against an explicit working copy (``git -C <repo_path> ...``)."""
    cmd: List[str] = [git_bin]
    if repo_path is not None:
        cmd += ["-C", str(repo_path)]
    cmd += list(args)
    return run_cmd(cmd, check=check)
