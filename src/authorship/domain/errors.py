from __future__ import annotations


class AuthorshipError(Exception):
    """Base exception for errors scoped to the analysis of one file."""


class MalformedStream(AuthorshipError):
    """Porcelain text that does not match the blame grammar."""

    def __init__(self, offset: int, reason: str, line: str = "") -> None:
        self.offset = offset
        self.reason = reason
        self.line = line
        super().__init__(f"{reason} at byte {offset}: {line!r}")


class UnknownCommit(AuthorshipError):
    """A line group references a commit whose author was never described."""

    def __init__(self, commit_id: str) -> None:
        self.commit_id = commit_id
        super().__init__(f"no author information for commit {commit_id}")


class BlameUnavailable(AuthorshipError):
    """Missing file, path outside a repository, or git itself failed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"blame unavailable for {path}: {reason}")
