import csv
import io
import json
from pathlib import Path

import pytest

from authorship.domain.errors import BlameUnavailable
from authorship.domain.models import AnalysisResult, Hunk, TrackedFile
from authorship.services.report_service import ReportService

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_C = "c" * 40


def _tracked(path: str, *hunks: Hunk) -> TrackedFile:
    t = TrackedFile(path)
    for h in hunks:
        t.add_hunk(h)
    return t


def _results() -> list[AnalysisResult]:
    main = _tracked(
        "src/main.py",
        Hunk(SHA_A, "Alice", "alice@example.com", 3),
        Hunk(SHA_B, "Bob", "bob@corp.test", 7),
        Hunk(SHA_C, "Carol", "carol@corp.test", 3),
    )
    util = _tracked(
        "src/util.py",
        Hunk(SHA_A, "Alice", "alice@example.com", 2),
        Hunk(SHA_C, "Carol", "carol@corp.test", 1),
    )
    return [
        AnalysisResult("src/main.py", tracked=main),
        AnalysisResult("gone.py", error=BlameUnavailable("gone.py", "no such file")),
        AnalysisResult("src/util.py", tracked=util),
    ]


def test_owners_ordered_by_lines_then_email():
    main = _results()[0].tracked
    owners = ReportService().select_owners(main)
    assert [o.email for o in owners] == ["bob@corp.test", "alice@example.com", "carol@corp.test"]


def test_filters_or_within_kind_and_across_kinds():
    main = _results()[0].tracked
    by_email = ReportService(emails=["example.com", "carol"]).select_owners(main)
    assert [o.name for o in by_email] == ["Alice", "Carol"]

    both = ReportService(emails=["corp.test"], names=["Car"]).select_owners(main)
    assert [o.name for o in both] == ["Carol"]

    assert ReportService(names=["Nobody"]).select_owners(main) == []


def test_summary_merges_owners_across_files():
    owners = ReportService().summarize(_results())
    assert [(o.email, o.total_lines, o.commit_count) for o in owners] == [
        ("bob@corp.test", 7, 1),
        ("alice@example.com", 5, 1),
        ("carol@corp.test", 4, 1),
    ]
    assert owners[1].commits == {SHA_A: 5}


def test_text_report_lists_files_then_failures():
    text = ReportService().render(_results())
    assert text.splitlines() == [
        "File: src/main.py",
        " Bob <bob@corp.test>: Lines: 7 Count: 1",
        " Alice <alice@example.com>: Lines: 3 Count: 1",
        " Carol <carol@corp.test>: Lines: 3 Count: 1",
        "File: src/util.py",
        " Alice <alice@example.com>: Lines: 2 Count: 1",
        " Carol <carol@corp.test>: Lines: 1 Count: 1",
        "Failed:",
        " gone.py: blame unavailable for gone.py: no such file",
    ]


def test_text_report_omits_files_without_selected_owners():
    text = ReportService(emails=["bob"]).render(_results())
    assert "src/util.py" not in text
    assert "File: src/main.py" in text


def test_json_report():
    doc = json.loads(ReportService().render(_results(), "json"))
    assert [f["path"] for f in doc["files"]] == ["src/main.py", "src/util.py"]
    bob = doc["files"][0]["owners"][0]
    assert bob == {
        "name": "Bob",
        "email": "bob@corp.test",
        "lines": 7,
        "commit_count": 1,
        "commits": {SHA_B: 7},
    }
    assert doc["failed"] == [{"path": "gone.py", "error": "blame unavailable for gone.py: no such file"}]


def test_json_summary_report():
    doc = json.loads(ReportService().render(_results(), "JSON", summary=True))
    assert "files" not in doc
    assert [o["email"] for o in doc["summary"]] == ["bob@corp.test", "alice@example.com", "carol@corp.test"]


def test_csv_report_rows():
    rows = list(csv.DictReader(io.StringIO(ReportService().render(_results(), "csv"))))
    assert len(rows) == 5
    assert rows[0] == {
        "path": "src/main.py",
        "name": "Bob",
        "email": "bob@corp.test",
        "lines": "7",
        "commit_count": "1",
    }


def test_csv_summary_rows_have_empty_path():
    rows = list(csv.DictReader(io.StringIO(ReportService().render(_results(), "csv", summary=True))))
    assert {r["path"] for r in rows} == {""}
    assert [r["email"] for r in rows][0] == "bob@corp.test"


def test_empty_results():
    assert ReportService().render([]) == ""
    assert json.loads(ReportService().render([], "json")) == {"files": [], "failed": []}


def test_write_creates_parent_directories(tmp_path: Path):
    out = tmp_path / "reports" / "owners.json"
    written = ReportService().write(_results(), out, "json")
    assert written == out
    assert json.loads(out.read_text(encoding="utf-8"))["files"]


def test_rejects_unsupported_format(tmp_path: Path):
    with pytest.raises(ValueError) as excinfo:
        ReportService().write(_results(), tmp_path / "x.bogus", "bogus")
    assert "unsupported" in str(excinfo.value).lower()
    assert not (tmp_path / "x.bogus").exists()
