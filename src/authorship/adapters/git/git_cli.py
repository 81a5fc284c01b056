# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from ...domain.errors import BlameUnavailable
from ...domain.models import RawHunk
from ...ports.blame_source import BlameSourcePort
from ...services.line_porcelain import extract_raw_hunks

logger = logging.getLogger(__name__)


def run_git(git: str, args: list[str], cwd: Path, timeout_s: int) -> bytes:
    """
    Run git in `cwd` and return its stdout.

    Raises:
        BlameUnavailable: git could not be started, timed out, or exited non-zero.
    """
    cmd = [git, *args]
    logger.debug("running %s in %s", " ".join(cmd), cwd)
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), capture_output=True, timeout=timeout_s)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise BlameUnavailable(str(cwd), f"could not run {git}: {e}") from e
    if proc.returncode != 0:
        err = proc.stderr.decode("utf-8", errors="replace").strip()
        raise BlameUnavailable(str(cwd), err or f"{git} exited with {proc.returncode}")
    return proc.stdout


class GitIdentityResolver:
    """Resolves commit authors with `git show` inside one repository."""

    def __init__(self, repo_dir: Path, *, git: str = "git", timeout_s: int = 60) -> None:
        self._repo_dir = Path(repo_dir)
        self._git = git
        self._timeout_s = int(timeout_s)

    def resolve_commit_identity(self, commit_id: str) -> tuple[str, str]:
        out = run_git(
            self._git,
            ["show", "-s", "--format=%an%x00%ae", commit_id],
            self._repo_dir,
            self._timeout_s,
        )
        text = out.decode("utf-8", errors="replace").strip()
        name, sep, email = text.partition("\x00")
        if not sep:
            raise BlameUnavailable(commit_id, f"unexpected git show output: {text!r}")
        return name, email


class GitCLIBlameSource(BlameSourcePort):
    """
    Blame data from the `git` executable.

    git runs in the file's own directory, so files from different
    repositories can be mixed in one batch. The adapter holds no mutable
    state and is safe to share between worker threads.
    """

    def __init__(self, git: str = "git", *, timeout_s: int = 300) -> None:
        self._git = git
        self._timeout_s = int(timeout_s)

    def _locate(self, path: Path) -> Path:
        p = Path(path)
        if not p.is_file():
            raise BlameUnavailable(str(path), "no such file")
        return p.resolve()

    def _blame(self, path: Path, mode: str) -> bytes:
        p = self._locate(path)
        return run_git(self._git, ["blame", mode, "--", p.name], p.parent, self._timeout_s)

    def raw_blame_text(self, path: Path) -> bytes:
        return self._blame(path, "--porcelain")

    def raw_hunks(self, path: Path) -> list[RawHunk]:
        text = self._blame(path, "--line-porcelain").decode("utf-8", errors="replace")
        return extract_raw_hunks(text)

    def display_path(self, path: Path) -> str:
        p = self._locate(path)
        out = run_git(self._git, ["rev-parse", "--show-toplevel"], p.parent, self._timeout_s)
        root = Path(out.decode("utf-8", errors="replace").strip()).resolve()
        try:
            return p.relative_to(root).as_posix()
        except ValueError:
            return str(p)

    def identity_resolver(self, path: Path) -> GitIdentityResolver:
        return GitIdentityResolver(self._locate(path).parent, git=self._git)
