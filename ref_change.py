# ref_change.py

import logging
import os
from typing import List, Optional

from config import HookConfig
from models.hook_context import HookContext
from models.ref_update import ChangeType, Commit, ObjectType, RefKind, RefUpdate

logger = logging.getLogger(__name__)

REF_PREFIXES = ("refs/heads/", "refs/tags/", "refs/remotes/")

SUPPRESSED_KINDS = (RefKind.TRACKING_BRANCH, RefKind.UNKNOWN)


def classify(ref_name: str, object_type: ObjectType) -> RefKind:
    """
    Decide what kind of ref was pushed from where it lives and what it points to.
    """
    if ref_name.startswith("refs/remotes/"):
        return RefKind.TRACKING_BRANCH
    if ref_name.startswith("refs/tags/"):
        if object_type == ObjectType.COMMIT:
            return RefKind.TAG
        if object_type == ObjectType.TAG:
            return RefKind.ANNOTATED_TAG
    if ref_name.startswith("refs/heads/") and object_type == ObjectType.COMMIT:
        return RefKind.BRANCH
    return RefKind.UNKNOWN


def short_ref_name(ref_name: str) -> str:
    for prefix in REF_PREFIXES:
        if ref_name.startswith(prefix):
            return ref_name[len(prefix):]
    return ref_name


def repo_path(context: HookContext, repos_root: Optional[str]) -> Optional[str]:
    """
    Path of the working directory below repos_root, or None when it lies outside it.
    """
    if not repos_root:
        return None
    root = os.path.abspath(repos_root)
    cwd = os.path.abspath(context.cwd)
    if cwd != root and not cwd.startswith(root.rstrip(os.sep) + os.sep):
        return None
    return os.path.relpath(cwd, root).replace(os.sep, "/")


class RefChange:
    """
    One classified ref update and the Slack message that describes it.

    Call prepare() before reading kind, channel or message; it does the git work.
    """

    def __init__(self, update: RefUpdate, git, config: HookConfig, context: HookContext):
        self.update = update
        self.git = git
        self.config = config
        self.context = context
        self.change_type: ChangeType = update.change_type
        self.short_ref_name = short_ref_name(update.ref_name)
        self.object_type: Optional[ObjectType] = None
        self.kind: Optional[RefKind] = None
        self.commits: List[Commit] = []

    def prepare(self):
        self.object_type = self.git.object_type(self.update.surviving_rev)
        self.kind = classify(self.update.ref_name, self.object_type)
        if self.kind in SUPPRESSED_KINDS:
            return
        if self.change_type == ChangeType.UPDATE:
            self.commits = self.git.log_range(self.update.old_rev, self.update.new_rev)
            logger.info(f"{self.update.ref_name}: pushed {len(self.commits)} commit{self.plural_suffix}",
                        extra={"ref_name": self.update.ref_name})

    @property
    def suppressed(self) -> bool:
        return self.kind in SUPPRESSED_KINDS

    @property
    def plural_suffix(self) -> str:
        return "s" if len(self.commits) > 1 else ""

    @property
    def channel(self) -> str:
        # Annotated tags are releases; announce them on the announce channel when there is one.
        if self.kind == RefKind.ANNOTATED_TAG and self.config.announce_channel:
            return self.config.announce_channel
        return self.config.channel

    def changeset_url(self, sha: str) -> Optional[str]:
        pattern = self.config.changeset_url_pattern
        if not pattern:
            return None
        path = repo_path(self.context, self.config.repos_root)
        if path is None:
            return None
        return pattern.replace("%repo_path%", path).replace("%rev_hash%", sha)

    def format_commit(self, commit: Commit) -> str:
        url = self.changeset_url(commit.sha)
        rev = f"<{url}|{commit.short_sha}>" if url else commit.short_sha
        return f"[{self.config.repo_prefix}/{self.short_ref_name}] {rev}: {commit.subject} - {commit.author}"

    def summary_line(self, verb: str) -> str:
        return f"{self.config.repo_prefix} {self.context.user} {verb} the {self.kind.value} {self.short_ref_name}."

    def get_message(self) -> str:
        if self.change_type == ChangeType.CREATE:
            return self.summary_line("created")
        if self.change_type == ChangeType.DELETE:
            return self.summary_line("deleted")
        if not self.commits:
            # Rewind to an ancestor: nothing new in old..new.
            return self.summary_line("updated")
        return "\n".join(self.format_commit(commit) for commit in self.commits)

    def diagnostic(self) -> List[str]:
        if self.kind == RefKind.TRACKING_BRANCH:
            first = f"*** Push-update of tracking branch, {self.update.ref_name}"
        else:
            first = f"*** Unknown type of update to {self.update.ref_name} ({self.object_type.value})"
        return [first, "***  - no notification generated."]
