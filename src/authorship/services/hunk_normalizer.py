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

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ..domain.errors import UnknownCommit
from ..domain.models import Hunk, LineRecord, RawHunk
from ..ports.identity import IdentityResolverPort


@dataclass(frozen=True)
class PorcelainRecords:
    """Hunk source: records parsed from a full-porcelain stream."""
    records: Sequence[LineRecord]


@dataclass(frozen=True)
class ExtractedHunks:
    """Hunk source: per-group hunks extracted from line-porcelain output."""
    hunks: Sequence[RawHunk]


HunkSource = Union[PorcelainRecords, ExtractedHunks]


def strip_email(mail: str) -> str:
    return mail.lstrip("<").rstrip(">")


def _from_records(records: Sequence[LineRecord]) -> list[Hunk]:
    # Porcelain describes each commit only once, so identity is gathered
    # from the whole stream before any group is attributed.
    identities: dict[str, tuple[str, str]] = {}
    for rec in records:
        if rec.extra is not None:
            identities[rec.commit_id] = (rec.extra.author, rec.extra.author_mail)

    hunks: list[Hunk] = []
    for rec in records:
        if rec.group_size is None:
            continue
        identity = identities.get(rec.commit_id)
        if identity is None:
            raise UnknownCommit(rec.commit_id)
        name, mail = identity
        hunks.append(
            Hunk(
                commit_id=rec.commit_id,
                author_name=name,
                author_email=strip_email(mail),
                line_count=rec.group_size,
            )
        )
    return hunks


def _from_extracted(
    raw_hunks: Sequence[RawHunk], resolver: Optional[IdentityResolverPort]
) -> list[Hunk]:
    resolved: dict[str, tuple[str, str]] = {}
    hunks: list[Hunk] = []
    for raw in raw_hunks:
        name, mail = raw.author_name, raw.author_email
        if name is None or mail is None:
            if raw.commit_id not in resolved:
                if resolver is None:
                    raise UnknownCommit(raw.commit_id)
                resolved[raw.commit_id] = resolver.resolve_commit_identity(raw.commit_id)
            r_name, r_mail = resolved[raw.commit_id]
            name = r_name if name is None else name
            mail = r_mail if mail is None else mail
        hunks.append(
            Hunk(
                commit_id=raw.commit_id,
                author_name=name,
                author_email=strip_email(mail),
                line_count=raw.line_count,
            )
        )
    return hunks


def normalize_hunks(
    source: HunkSource, resolver: Optional[IdentityResolverPort] = None
) -> list[Hunk]:
    """
    Turn either hunk source into the common Hunk sequence fed to the ledger.

    Raises:
        UnknownCommit: a group references a commit with no known author.
        TypeError: for an unrecognised source.
    """
    if isinstance(source, PorcelainRecords):
        return _from_records(source.records)
    if isinstance(source, ExtractedHunks):
        return _from_extracted(source.hunks, resolver)
    raise TypeError(f"Unsupported hunk source: {type(source).__name__}")
