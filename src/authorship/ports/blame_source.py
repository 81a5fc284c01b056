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

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..domain.models import RawHunk
from .identity import IdentityResolverPort


class BlameSourcePort(ABC):
    """
    Abstract interface for obtaining blame data for one file.

    Implementations raise BlameUnavailable for a missing file, a path that
    is not under version control, or a failure of the underlying tool.
    """

    @abstractmethod
    def raw_blame_text(self, path: Path) -> bytes:
        """Return the full-porcelain blame stream for the file at its current revision."""
        raise NotImplementedError

    @abstractmethod
    def raw_hunks(self, path: Path) -> list[RawHunk]:
        """Return per-group hunks extracted from line-porcelain output."""
        raise NotImplementedError

    @abstractmethod
    def display_path(self, path: Path) -> str:
        """Return the path to show in reports, relative to the repository root."""
        raise NotImplementedError

    def identity_resolver(self, path: Path) -> Optional[IdentityResolverPort]:
        """Return a resolver for commits in the file's repository, if the source has one."""
        return None
