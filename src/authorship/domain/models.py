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

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .errors import AuthorshipError


@dataclass(frozen=True)
class PreviousCommit:
    """The commit and path a blamed line came from before its last change."""

    commit_id: str
    path: str


@dataclass(frozen=True)
class CommitDetails:
    """
    Per-commit metadata block of a porcelain stream.

    git prints it once per commit, on whichever line of the output first
    references that commit. Mail values keep their angle brackets.
    """

    author: str
    author_mail: str
    author_time: datetime
    committer: str
    committer_mail: str
    committer_time: datetime
    summary: str
    filename: str
    boundary: bool = False
    previous: Optional[PreviousCommit] = None


@dataclass(frozen=True)
class PathInfo:
    """Filename lines emitted without an author block (commits touching several paths)."""

    filename: str
    previous: Optional[PreviousCommit] = None


@dataclass(frozen=True)
class LineRecord:
    commit_id: str
    orig_line_no: int
    final_line_no: int
    content: str
    group_size: Optional[int] = None
    extra: Optional[CommitDetails] = None
    origin: Optional[PathInfo] = None


@dataclass(frozen=True)
class Hunk:
    """A contiguous run of lines attributed to one commit."""

    commit_id: str
    author_name: str
    author_email: str
    line_count: int


@dataclass(frozen=True)
class RawHunk:
    """Hunk as extracted from line-porcelain output; identity may be missing."""

    commit_id: str
    line_count: int
    author_name: Optional[str] = None
    author_email: Optional[str] = None


@dataclass
class Owner:
    name: str
    email: str
    commits: dict[str, int] = field(default_factory=dict)

    @property
    def total_lines(self) -> int:
        return sum(self.commits.values())

    @property
    def commit_count(self) -> int:
        return len(self.commits)

    def add(self, commit_id: str, lines: int) -> None:
        self.commits[commit_id] = self.commits.get(commit_id, 0) + lines

    def __str__(self) -> str:
        return (
            f"{self.name} <{self.email}>: "
            f"Lines: {self.total_lines} Count: {self.commit_count}"
        )


@dataclass
class TrackedFile:
    """Ownership ledger for one file: author email -> Owner."""

    path: str
    owners: dict[str, Owner] = field(default_factory=dict)

    def add_hunk(self, hunk: Hunk) -> None:
        owner = self.owners.get(hunk.author_email)
        if owner is None:
            owner = Owner(name=hunk.author_name, email=hunk.author_email)
            self.owners[hunk.author_email] = owner
        owner.add(hunk.commit_id, hunk.line_count)

    @property
    def total_lines(self) -> int:
        return sum(o.total_lines for o in self.owners.values())


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of analysing one file: a ledger or the error that stopped it."""

    path: str
    tracked: Optional[TrackedFile] = None
    error: Optional[AuthorshipError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.tracked is not None
