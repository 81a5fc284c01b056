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
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional

from ..domain.errors import AuthorshipError
from ..domain.models import AnalysisResult, TrackedFile
from ..ports.blame_source import BlameSourcePort
from ..ports.identity import IdentityResolverPort
from .hunk_normalizer import ExtractedHunks, HunkSource, PorcelainRecords, normalize_hunks
from .porcelain_parser import parse_porcelain

logger = logging.getLogger(__name__)


class OwnershipService:
    """
    Builds a per-file ownership ledger from blame data:
      - fetches blame data through the BlameSourcePort
      - parses full porcelain (default) or uses extracted line-porcelain hunks
      - normalises to Hunks and folds them into a TrackedFile

    Every error is scoped to its file: analyze() returns a failed
    AnalysisResult instead of raising, so a batch always completes.
    """

    def __init__(
        self,
        source: BlameSourcePort,
        *,
        resolver: Optional[IdentityResolverPort] = None,
        use_line_porcelain: bool = False,
    ) -> None:
        self._source = source
        self._resolver = resolver
        self._use_line_porcelain = bool(use_line_porcelain)

    def _hunk_source(self, path: Path) -> HunkSource:
        if self._use_line_porcelain:
            return ExtractedHunks(self._source.raw_hunks(path))
        return PorcelainRecords(parse_porcelain(self._source.raw_blame_text(path)))

    def build(self, path: Path) -> TrackedFile:
        """
        Analyse one file, raising on failure.

        Raises:
            BlameUnavailable, MalformedStream, UnknownCommit
        """
        path = Path(path)
        tracked = TrackedFile(self._source.display_path(path))
        resolver = self._resolver
        if resolver is None and self._use_line_porcelain:
            resolver = self._source.identity_resolver(path)
        for hunk in normalize_hunks(self._hunk_source(path), resolver):
            tracked.add_hunk(hunk)
        logger.debug(
            "%s: %d lines across %d owners",
            tracked.path,
            tracked.total_lines,
            len(tracked.owners),
        )
        return tracked

    def analyze(self, path: Path) -> AnalysisResult:
        try:
            return AnalysisResult(path=str(path), tracked=self.build(path))
        except AuthorshipError as e:
            logger.warning("Skipping %s: %s", path, e)
            return AnalysisResult(path=str(path), error=e)

    def analyze_many(
        self, paths: Iterable[Path], jobs: Optional[int] = None
    ) -> list[AnalysisResult]:
        """
        Analyse files on a thread pool.

        Results come back in input order, whatever order the workers finish in.
        """
        paths = list(paths)
        if not paths:
            return []
        workers = max(1, min(jobs or os.cpu_count() or 1, len(paths)))
        with ThreadPoolExecutor(max_workers=workers) as ex:
            futs = [ex.submit(self.analyze, p) for p in paths]
            results = [f.result() for f in futs]
        failed = sum(1 for r in results if not r.ok)
        logger.info("Analyzed %d files (%d failed)", len(results), failed)
        return results
