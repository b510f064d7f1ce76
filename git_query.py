# git_query.py

import logging
from typing import List, Optional

from models.ref_update import Commit, ObjectType
from utils import GitCommandError, run_command

logger = logging.getLogger(__name__)

# Unit and record separators keep subjects containing spaces or dashes intact.
LOG_FORMAT = "%H%x1f%h%x1f%s%x1f%an"


class GitQuery:
    """
    Read-only queries against the repository the hook runs in.
    """

    def __init__(self, git_dir: Optional[str] = None, git_binary: str = "git"):
        self.git_dir = git_dir
        self.git_binary = git_binary

    def _git(self, *args: str) -> str:
        command = [self.git_binary]
        if self.git_dir:
            command.append(f"--git-dir={self.git_dir}")
        command.extend(args)
        return run_command(command)

    def object_type(self, rev: str) -> ObjectType:
        try:
            output = self._git("cat-file", "-t", rev)
        except GitCommandError:
            logger.debug(f"Object type lookup failed for {rev}")
            return ObjectType.MISSING

        if output == "commit":
            return ObjectType.COMMIT
        if output == "tag":
            return ObjectType.TAG
        return ObjectType.OTHER

    def log_range(self, old_rev: str, new_rev: str) -> List[Commit]:
        """
        Commits reachable from new_rev but not old_rev, newest first (git log order).
        """
        output = self._git("log", "-z", f"--pretty=format:{LOG_FORMAT}", f"{old_rev}..{new_rev}")
        commits = []
        for record in output.split("\x00"):
            if not record.strip():
                continue
            sha, short_sha, subject, author = record.strip("\n").split("\x1f", 3)
            commits.append(Commit(sha=sha, short_sha=short_sha, subject=subject, author=author))
        return commits

    def config_get(self, key: str) -> Optional[str]:
        """
        Value of a git config key, or None when it is not set.
        """
        try:
            value = self._git("config", "--get", key)
        except GitCommandError as e:
            # Exit status 1 means the key is not set.
            if e.returncode == 1:
                return None
            raise
        return value or None
