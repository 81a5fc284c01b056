# Licensed under the Apache License, Version 2.0
from __future__ import annotations

from typing import Protocol


class IdentityResolverPort(Protocol):
    """
    Looks up the author of a commit.
    Only consulted for extracted hunks that do not carry identity inline.
    """

    def resolve_commit_identity(self, commit_id: str) -> tuple[str, str]:
        """Return ``(author_name, author_email)`` for the commit."""
        ...
