# Licensed under the Apache License, Version 2.0
from __future__ import annotations

import re
from typing import Optional

from ..domain.models import RawHunk

# First header of a contiguous group; only these carry the group size.
_GROUP_HEADER_RE = re.compile(
    r"""
    ^([0-9a-fA-F]{40})\s+  # commit id
    [0-9]+\s+              # original line number
    [0-9]+\s+              # final line number
    ([0-9]+)\s*$           # lines in group
    """,
    re.VERBOSE,
)
_LINE_HEADER_RE = re.compile(r"^[0-9a-fA-F]{40}\s+[0-9]+\s+[0-9]+\s*$")


def extract_raw_hunks(text: str) -> list[RawHunk]:
    """
    Pull one RawHunk per group out of ``git blame --line-porcelain`` text.

    ``line_count`` is the group size from the group's first header. The
    headers line-porcelain repeats for every other line of the group have no
    size and are not counted. ``author``/``author-mail`` lines directly after
    a group header are captured when present.
    """
    hunks: list[RawHunk] = []
    commit_id: Optional[str] = None
    count = 0
    name: Optional[str] = None
    mail: Optional[str] = None
    in_header = False

    def flush() -> None:
        if commit_id is not None:
            hunks.append(
                RawHunk(
                    commit_id=commit_id,
                    line_count=count,
                    author_name=name,
                    author_email=mail,
                )
            )

    for line in text.split("\n"):
        if line.startswith("\t"):
            in_header = False
            continue
        m = _GROUP_HEADER_RE.match(line)
        if m:
            flush()
            commit_id, count = m.group(1), int(m.group(2))
            name = mail = None
            in_header = True
            continue
        if _LINE_HEADER_RE.match(line):
            in_header = False
            continue
        if not in_header:
            continue
        if line.startswith("author "):
            name = line[len("author ") :]
        elif line.startswith("author-mail "):
            mail = line[len("author-mail ") :]
    flush()
    return hunks
