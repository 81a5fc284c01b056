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

import csv
import io
import json
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from ..domain.models import AnalysisResult, Owner, TrackedFile

FORMATS = ("text", "json", "csv")


class ReportService:
    """
    Filters, orders and renders ownership ledgers.

    Notes:
      - Email and name filters are substring matches. Any match within one
        list is enough; when both lists are given an owner must match both.
      - Owners are ordered by total lines, descending, then by email.
      - Files with no owner left after filtering are omitted.
      - text: the console listing; json: one document; csv: one row per owner.
    """

    def __init__(
        self,
        emails: Optional[Sequence[str]] = None,
        names: Optional[Sequence[str]] = None,
    ) -> None:
        self._emails = list(emails or [])
        self._names = list(names or [])

    def _selected(self, owner: Owner) -> bool:
        if self._emails and not any(e in owner.email for e in self._emails):
            return False
        if self._names and not any(n in owner.name for n in self._names):
            return False
        return True

    def _ordered(self, owners: Iterable[Owner]) -> list[Owner]:
        picked = [o for o in owners if self._selected(o)]
        return sorted(picked, key=lambda o: (-o.total_lines, o.email))

    def select_owners(self, tracked: TrackedFile) -> list[Owner]:
        return self._ordered(tracked.owners.values())

    def summarize(self, results: Iterable[AnalysisResult]) -> list[Owner]:
        """Merge owners of every successfully analysed file, keyed by email."""
        merged: dict[str, Owner] = {}
        for r in results:
            if r.tracked is None:
                continue
            for owner in r.tracked.owners.values():
                target = merged.setdefault(owner.email, Owner(owner.name, owner.email))
                for commit_id, lines in owner.commits.items():
                    target.add(commit_id, lines)
        return self._ordered(merged.values())

    # --- rendering ----------------------------------------------------------

    def _files(self, results: Sequence[AnalysisResult]) -> list[tuple[str, list[Owner]]]:
        out = []
        for r in results:
            if r.tracked is None:
                continue
            owners = self.select_owners(r.tracked)
            if owners:
                out.append((r.tracked.path, owners))
        return out

    @staticmethod
    def _owner_dict(owner: Owner) -> dict[str, Any]:
        return {
            "name": owner.name,
            "email": owner.email,
            "lines": owner.total_lines,
            "commit_count": owner.commit_count,
            "commits": dict(sorted(owner.commits.items())),
        }

    def _render_text(self, results: Sequence[AnalysisResult], summary: bool) -> str:
        lines: list[str] = []
        if summary:
            owners = self.summarize(results)
            if owners:
                lines.append("Summary:")
                lines.extend(f" {o}" for o in owners)
        else:
            for path, owners in self._files(results):
                lines.append(f"File: {path}")
                lines.extend(f" {o}" for o in owners)
        failed = [r for r in results if not r.ok]
        if failed:
            lines.append("Failed:")
            lines.extend(f" {r.path}: {r.error}" for r in failed)
        return "".join(line + "\n" for line in lines)

    def _render_json(self, results: Sequence[AnalysisResult], summary: bool) -> str:
        doc: dict[str, Any] = {}
        if summary:
            doc["summary"] = [self._owner_dict(o) for o in self.summarize(results)]
        else:
            doc["files"] = [
                {"path": path, "owners": [self._owner_dict(o) for o in owners]}
                for path, owners in self._files(results)
            ]
        doc["failed"] = [
            {"path": r.path, "error": str(r.error)} for r in results if not r.ok
        ]
        return json.dumps(doc, ensure_ascii=False, indent=2) + "\n"

    def _render_csv(self, results: Sequence[AnalysisResult], summary: bool) -> str:
        # Stable schema for downstream tooling; summary rows have an empty path.
        fieldnames = ["path", "name", "email", "lines", "commit_count"]
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=fieldnames, lineterminator="\n")
        writer.writeheader()
        groups = [("", self.summarize(results))] if summary else self._files(results)
        for path, owners in groups:
            for o in owners:
                writer.writerow(
                    {
                        "path": path,
                        "name": o.name,
                        "email": o.email,
                        "lines": o.total_lines,
                        "commit_count": o.commit_count,
                    }
                )
        return buf.getvalue()

    def render(
        self,
        results: Sequence[AnalysisResult],
        fmt: str = "text",
        *,
        summary: bool = False,
    ) -> str:
        """
        Render a report for the given analysis results.

        Raises:
            ValueError: if an unsupported format is requested.
        """
        fmt = (fmt or "text").lower()
        if fmt == "text":
            return self._render_text(results, summary)
        if fmt == "json":
            return self._render_json(results, summary)
        if fmt == "csv":
            return self._render_csv(results, summary)
        raise ValueError(f"Unsupported format: {fmt}")

    def write(
        self,
        results: Sequence[AnalysisResult],
        out: Path,
        fmt: str = "text",
        *,
        summary: bool = False,
    ) -> Path:
        """Write the rendered report to `out`, creating parent directories."""
        text = self.render(results, fmt, summary=summary)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
        return out
