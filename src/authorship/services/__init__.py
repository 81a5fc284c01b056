from .porcelain_parser import parse_porcelain, format_porcelain
from .line_porcelain import extract_raw_hunks
from .hunk_normalizer import (
    ExtractedHunks,
    HunkSource,
    PorcelainRecords,
    normalize_hunks,
)
from .ownership_service import OwnershipService
from .report_service import ReportService


__all__ = [
    'parse_porcelain',
    'format_porcelain',
    'extract_raw_hunks',
    'ExtractedHunks',
    'HunkSource',
    'PorcelainRecords',
    'normalize_hunks',
    'OwnershipService',
    'ReportService',
]
