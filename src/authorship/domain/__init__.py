from .errors import (
    AuthorshipError,
    BlameUnavailable,
    MalformedStream,
    UnknownCommit,
)
from .models import (
    AnalysisResult,
    CommitDetails,
    Hunk,
    LineRecord,
    Owner,
    PathInfo,
    PreviousCommit,
    RawHunk,
    TrackedFile,
)

__all__ = [
    "AnalysisResult",
    "AuthorshipError",
    "BlameUnavailable",
    "CommitDetails",
    "Hunk",
    "LineRecord",
    "MalformedStream",
    "Owner",
    "PathInfo",
    "PreviousCommit",
    "RawHunk",
    "TrackedFile",
    "UnknownCommit",
]
