import re
from enum import Enum
from pydantic import BaseModel

NULL_REV = re.compile(r"^0+$")


class ChangeType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ObjectType(str, Enum):
    COMMIT = "commit"
    TAG = "tag"
    OTHER = "other"
    MISSING = "missing"


class RefKind(str, Enum):
    BRANCH = "branch"
    TRACKING_BRANCH = "tracking branch"
    TAG = "tag"
    ANNOTATED_TAG = "annotated tag"
    UNKNOWN = "unknown"


class Commit(BaseModel):
    sha: str
    short_sha: str
    subject: str
    author: str


class RefUpdate(BaseModel):
    old_rev: str
    new_rev: str
    ref_name: str

    @classmethod
    def from_line(cls, line: str) -> "RefUpdate":
        """
        Parse one post-receive input line: "<old-rev> <new-rev> <ref-name>".
        """
        parts = line.split()
        if len(parts) != 3:
            raise ValueError(f"Expected '<old-rev> <new-rev> <ref-name>', got: {line.strip()!r}")
        old_rev, new_rev, ref_name = parts
        return cls(old_rev=old_rev, new_rev=new_rev, ref_name=ref_name)

    @property
    def change_type(self) -> ChangeType:
        if NULL_REV.match(self.old_rev):
            return ChangeType.CREATE
        if NULL_REV.match(self.new_rev):
            return ChangeType.DELETE
        return ChangeType.UPDATE

    @property
    def surviving_rev(self) -> str:
        # A deleted ref only exists in its old revision.
        if self.change_type == ChangeType.DELETE:
            return self.old_rev
        return self.new_rev
