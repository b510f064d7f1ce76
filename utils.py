# utils.py

import subprocess
import logging
from typing import List, Optional

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, command: List[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {' '.join(command)}")

    def __str__(self):
        msg = super().__str__()
        if self.stderr:
            msg += f"\nError: {self.stderr}"
        return msg


def run_command(command: List[str], cwd: Optional[str] = None, strip: bool = True) -> str:
    logger.debug(f"Executing command: {' '.join(command)} in {cwd or '.'}")
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True
        )
    except subprocess.CalledProcessError as e:
        stderr_decoded = (e.stderr or "").strip()
        logger.debug(f"Command failed: {' '.join(command)}\nError: {stderr_decoded}")
        raise GitCommandError(command, e.returncode, stderr_decoded) from e

    stdout_decoded = result.stdout.strip() if strip else result.stdout
    stderr_decoded = result.stderr.strip()
    if stderr_decoded:
        logger.debug(f"Command stderr: {stderr_decoded}")

    return stdout_decoded
