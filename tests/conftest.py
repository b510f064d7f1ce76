import logging

import pytest

from config import HookConfig
from models.hook_context import HookContext
from models.ref_update import Commit, ObjectType
from utils import GitCommandError

NULL = "0" * 40
OLD = "1111111111111111111111111111111111111111"
NEW = "abc1234def5678abc1234def5678abc1234def56"
TAG_OBJECT = "7777777777777777777777777777777777777777"


class FakeGit:
    """In-memory stand-in for GitQuery."""

    def __init__(self, object_types=None, logs=None, config=None, failing_ranges=()):
        self.object_types = object_types or {}
        self.logs = logs or {}
        self.config = config or {}
        self.failing_ranges = set(failing_ranges)
        self.calls = []

    def object_type(self, rev):
        self.calls.append(("object_type", rev))
        return self.object_types.get(rev, ObjectType.MISSING)

    def log_range(self, old_rev, new_rev):
        self.calls.append(("log_range", old_rev, new_rev))
        if (old_rev, new_rev) in self.failing_ranges:
            raise GitCommandError(["git", "log", f"{old_rev}..{new_rev}"], 128, "fatal: bad revision")
        return list(self.logs.get((old_rev, new_rev), []))

    def config_get(self, key):
        return self.config.get(key)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_git_slack_hook", False):
            root.removeHandler(handler)
            handler.close()


def make_commit(sha, subject, author):
    return Commit(sha=sha, short_sha=sha[:7], subject=subject, author=author)


@pytest.fixture
def context():
    return HookContext(cwd="/srv/git/team/proj.git", user="alice", repo_name="proj")


@pytest.fixture
def config():
    return HookConfig(token="secret-token", org_name="acme", channel="dev", repo_prefix="proj")


@pytest.fixture
def fake_git():
    return FakeGit(
        object_types={OLD: ObjectType.COMMIT, NEW: ObjectType.COMMIT, TAG_OBJECT: ObjectType.TAG},
        logs={
            (OLD, NEW): [
                make_commit("b" * 40, "Add login form", "Alice"),
                make_commit("c" * 40, "Fix typo", "Bob"),
            ]
        },
    )
