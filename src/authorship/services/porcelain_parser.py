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

"""
Parser for ``git blame --porcelain`` output.

Each output line of the blamed file is described by:

    <sha1> <orig-line> <final-line> [<lines-in-group>]
    author ...                       \\
    author-mail <...>                 |
    ...                               |  only the first time a commit appears
    summary ...                       |
    [boundary]                        |
    [previous <sha1> <path>]          |
    filename <path>                  /
    \\t<content>

The parser works on bytes so that error offsets are real byte offsets into
the stream git produced; field values are decoded as UTF-8 with replacement.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Union

from ..domain.errors import MalformedStream
from ..domain.models import CommitDetails, LineRecord, PathInfo, PreviousCommit

logger = logging.getLogger(__name__)

COMMIT_ID_LENGTH = 40

_HEADER_RE = re.compile(
    rb"^([0-9a-fA-F]{%d}) ([0-9]+) ([0-9]+)(?: ([0-9]+))?$" % COMMIT_ID_LENGTH
)
_TIME_RE = re.compile(r"^-?[0-9]+$")
_TZ_RE = re.compile(r"^([+-])([0-9]{2})([0-9]{2})$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class _Cursor:
    """Line-at-a-time reader over a byte buffer that tracks the current offset."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self._data)

    def peek(self, expecting: str) -> bytes:
        if self.at_end():
            raise MalformedStream(self.pos, f"unexpected end of stream, expected {expecting}")
        nl = self._data.find(b"\n", self.pos)
        if nl < 0:
            raise MalformedStream(
                self.pos, "unterminated line", _text(self._data[self.pos :])
            )
        return self._data[self.pos : nl]

    def take(self, expecting: str) -> tuple[int, bytes]:
        line = self.peek(expecting)
        offset = self.pos
        self.pos += len(line) + 1
        return offset, line

    def take_field(self, key: str) -> tuple[int, str]:
        prefix = key.encode("ascii") + b" "
        offset = self.pos
        line = self.peek(f"'{key}' line")
        if not line.startswith(prefix):
            raise MalformedStream(offset, f"expected '{key}' line", _text(line))
        self.pos += len(line) + 1
        return offset, _text(line[len(prefix) :])


def _positive(value: bytes, offset: int, line: bytes, what: str) -> int:
    n = int(value)
    if n < 1:
        raise MalformedStream(offset, f"{what} must be positive", _text(line))
    return n


def _timestamp(cursor: _Cursor, who: str) -> datetime:
    """Combine ``<who>-time`` and ``<who>-tz`` into an aware local datetime."""
    t_offset, seconds = cursor.take_field(f"{who}-time")
    if _TIME_RE.match(seconds) is None:
        raise MalformedStream(t_offset, f"invalid {who}-time", seconds)

    z_offset, tz = cursor.take_field(f"{who}-tz")
    m = _TZ_RE.match(tz)
    if m is None:
        raise MalformedStream(z_offset, f"invalid {who}-tz", tz)
    sign = -1 if m.group(1) == "-" else 1
    offset = timedelta(hours=int(m.group(2)), minutes=int(m.group(3))) * sign
    if abs(offset) >= timedelta(days=1):
        raise MalformedStream(z_offset, f"invalid {who}-tz", tz)

    try:
        return (_EPOCH + timedelta(seconds=int(seconds))).astimezone(timezone(offset))
    except OverflowError:
        raise MalformedStream(t_offset, f"{who}-time out of range", seconds) from None


def _previous(cursor: _Cursor) -> Optional[PreviousCommit]:
    line = cursor.peek("'previous' or 'filename' line")
    if not line.startswith(b"previous "):
        return None
    offset, value = cursor.take_field("previous")
    parts = value.split(" ", 1)
    if len(parts) != 2 or len(parts[0]) != COMMIT_ID_LENGTH:
        raise MalformedStream(offset, "invalid 'previous' line", value)
    return PreviousCommit(commit_id=parts[0], path=parts[1])


def _parse_details(cursor: _Cursor) -> CommitDetails:
    _, author = cursor.take_field("author")
    _, author_mail = cursor.take_field("author-mail")
    author_time = _timestamp(cursor, "author")
    _, committer = cursor.take_field("committer")
    _, committer_mail = cursor.take_field("committer-mail")
    committer_time = _timestamp(cursor, "committer")
    _, summary = cursor.take_field("summary")

    boundary = False
    if cursor.peek("'filename' line") == b"boundary":
        cursor.take("boundary")
        boundary = True

    previous = _previous(cursor)
    _, filename = cursor.take_field("filename")

    return CommitDetails(
        author=author,
        author_mail=author_mail,
        author_time=author_time,
        committer=committer,
        committer_mail=committer_mail,
        committer_time=committer_time,
        summary=summary,
        boundary=boundary,
        previous=previous,
        filename=filename,
    )


def _parse_path_info(cursor: _Cursor) -> PathInfo:
    previous = _previous(cursor)
    _, filename = cursor.take_field("filename")
    return PathInfo(filename=filename, previous=previous)


def _parse_record(cursor: _Cursor) -> LineRecord:
    offset, line = cursor.take("blame header")
    m = _HEADER_RE.match(line)
    if m is None:
        raise MalformedStream(offset, "expected blame header", _text(line))

    commit_id = m.group(1).decode("ascii")
    orig_line_no = _positive(m.group(2), offset, line, "original line number")
    final_line_no = _positive(m.group(3), offset, line, "final line number")
    group_size = None
    if m.group(4) is not None:
        group_size = _positive(m.group(4), offset, line, "group size")

    extra = None
    origin = None
    nxt = cursor.peek("content line")
    if nxt.startswith(b"author "):
        extra = _parse_details(cursor)
    elif nxt.startswith((b"previous ", b"filename ")):
        origin = _parse_path_info(cursor)

    c_offset, content = cursor.take("content line")
    if not content.startswith(b"\t"):
        raise MalformedStream(c_offset, "expected tab-prefixed content line", _text(content))

    return LineRecord(
        commit_id=commit_id,
        orig_line_no=orig_line_no,
        final_line_no=final_line_no,
        group_size=group_size,
        extra=extra,
        origin=origin,
        content=_text(content[1:]),
    )


def parse_porcelain(data: Union[bytes, str]) -> list[LineRecord]:
    """
    Parse a complete porcelain stream into LineRecords, in output order.

    Raises:
        MalformedStream: at the first line that does not fit the grammar.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    cursor = _Cursor(data)
    records: list[LineRecord] = []
    while not cursor.at_end():
        records.append(_parse_record(cursor))
    logger.debug("parsed %d porcelain records (%d bytes)", len(records), len(data))
    return records


# --- writer -----------------------------------------------------------------


def _format_time(value: datetime) -> tuple[str, str]:
    seconds = int((value - _EPOCH).total_seconds())
    offset = value.utcoffset() or timedelta(0)
    minutes = int(offset.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    minutes = abs(minutes)
    return str(seconds), f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


def _format_previous(previous: Optional[PreviousCommit]) -> list[str]:
    if previous is None:
        return []
    return [f"previous {previous.commit_id} {previous.path}"]


def _format_record(record: LineRecord) -> list[str]:
    header = f"{record.commit_id} {record.orig_line_no} {record.final_line_no}"
    if record.group_size is not None:
        header += f" {record.group_size}"
    out = [header]

    d = record.extra
    if d is not None:
        a_time, a_tz = _format_time(d.author_time)
        c_time, c_tz = _format_time(d.committer_time)
        out += [
            f"author {d.author}",
            f"author-mail {d.author_mail}",
            f"author-time {a_time}",
            f"author-tz {a_tz}",
            f"committer {d.committer}",
            f"committer-mail {d.committer_mail}",
            f"committer-time {c_time}",
            f"committer-tz {c_tz}",
            f"summary {d.summary}",
        ]
        if d.boundary:
            out.append("boundary")
        out += _format_previous(d.previous)
        out.append(f"filename {d.filename}")
    elif record.origin is not None:
        out += _format_previous(record.origin.previous)
        out.append(f"filename {record.origin.filename}")

    out.append("\t" + record.content)
    return out


def format_porcelain(records: Iterable[LineRecord]) -> str:
    """Render records back into porcelain text; the inverse of parse_porcelain."""
    lines: list[str] = []
    for record in records:
        lines.extend(_format_record(record))
    return "".join(line + "\n" for line in lines)
