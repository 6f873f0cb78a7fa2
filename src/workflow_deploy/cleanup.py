"""Scratch-directory cleanup that runs on every exit path."""
import atexit
import logging
import shutil
import signal
from pathlib import Path
from typing import Union

from .config import is_unsafe_scratch_dir

logger = logging.getLogger("workflow_deploy.cleanup")


def remove_scratch_dir(path: Union[str, Path]) -> bool:
    """Remove the scratch tree; returns False when there was nothing to remove."""
    path = Path(path)
    logger.info("Cleaning up temporary files...")
    if not path.exists():
        return False
    if is_unsafe_scratch_dir(path):
        logger.error("Refusing to remove %s: it contains the working directory", path)
        return False
    shutil.rmtree(path, ignore_errors=True)
    logger.info("Temporary directory removed")
    return True


def _exit_on_sigterm(signum, frame):
    # SystemExit unwinds normally, so atexit hooks still run.
    raise SystemExit(128 + signum)


def register_cleanup(path: Union[str, Path]) -> None:
    """Remove ``path`` at interpreter exit, including after SIGTERM or Ctrl-C."""
    atexit.register(remove_scratch_dir, Path(path).resolve())
    if signal.getsignal(signal.SIGTERM) in (signal.SIG_DFL, None):
        signal.signal(signal.SIGTERM, _exit_on_sigterm)
