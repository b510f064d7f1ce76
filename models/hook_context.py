import getpass
import os
from pydantic import BaseModel
from typing import Mapping, Optional


def repo_name_from_path(path: str) -> str:
    """
    Derive a repository name from its directory: "/srv/git/proj.git" -> "proj",
    "/home/me/proj/.git" -> "proj".
    """
    path = path.rstrip(os.sep) or os.sep
    name = os.path.basename(path)
    if name == ".git":
        name = os.path.basename(os.path.dirname(path))
    if name.endswith(".git"):
        name = name[:-len(".git")]
    return name


class HookContext(BaseModel):
    cwd: str
    user: str
    repo_name: str

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None,
                         cwd: Optional[str] = None) -> "HookContext":
        """
        Capture the process-wide state the hook depends on, once at start-up.

        Under gitolite, GL_REPO and GL_USER name the repository and the pushing user.
        Otherwise the working directory and the OS user are used.
        """
        environ = os.environ if environ is None else environ
        cwd = os.path.abspath(cwd or os.getcwd())

        if environ.get("GL_REPO"):
            repo_name = environ["GL_REPO"]
            user = environ.get("GL_USER") or getpass.getuser()
        else:
            repo_name = repo_name_from_path(cwd)
            user = getpass.getuser()

        return cls(cwd=cwd, user=user, repo_name=repo_name)
