"""
Repository Lister: reads the JSON array of repository names.

The file is parsed by ``jq``; the compact JSON it emits is then checked to be
an array of unique, path-safe strings.
"""
import json
import logging
from pathlib import Path
from typing import Iterator, List, Sequence, Union

from .commands import run_cmd
from .errors import CommandError, RepoListError

logger = logging.getLogger("workflow_deploy.repo_list")

# Accepts only an array; anything else makes jq exit non-zero.
_JQ_FILTER = 'if type == "array" then . else error("expected a JSON array") end'


def validate_repo_names(names: Sequence[object]) -> List[str]:
    """Reject entries that are not strings, are unsafe as a directory name, or repeat."""
    seen = set()
    out: List[str] = []
    for index, name in enumerate(names):
        if not isinstance(name, str):
            raise RepoListError(f"Entry {index} is not a string: {name!r}")
        if not name.strip() or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
            raise RepoListError(f"Invalid repository name at entry {index}: {name!r}")
        if name in seen:
            raise RepoListError(f"Duplicate repository name: {name}")
        seen.add(name)
        out.append(name)
    return out


def read_repo_names(repos_file: Union[str, Path], *, jq_bin: str = "jq") -> Iterator[str]:
    """Return the repository names from ``repos_file`` in file order.

    The whole file is read and validated before the first name is yielded,
    so a bad list fails before any repository is processed.
    """
    path = Path(repos_file)
    logger.info("Reading repository list from %s...", path)
    if not path.is_file():
        raise RepoListError(f"{path} file not found!")
    try:
        proc = run_cmd([jq_bin, "-c", _JQ_FILTER, str(path)])
        raw = json.loads(proc.stdout or "null")
    except (CommandError, json.JSONDecodeError) as e:
        raise RepoListError(f"Failed to parse {path}. Please check the JSON format.") from e
    if not isinstance(raw, list):
        raise RepoListError(f"Failed to parse {path}: expected a JSON array")
    names = validate_repo_names(raw)
    logger.info("Found %d repositories to process", len(names))
    return iter(names)
