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

import dataclasses
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

import typer

from ..adapters.git.git_cli import GitCLIBlameSource
from ..domain.errors import MalformedStream
from ..logging_config import setup_logging
from ..services import OwnershipService, ReportService, format_porcelain, parse_porcelain
from ..services.report_service import FORMATS

setup_logging()

app = typer.Typer(help="Authorship CLI - per-file code ownership from git blame")

PARSE_FORMATS: set[str] = {"json", "porcelain"}

logger = logging.getLogger(__name__)


def _parse_fmt(fmt: Optional[str], allowed: set[str]) -> str:
    """
    Normalise and validate a --fmt value.
    Raises Typer BadParameter if the format is unknown.
    """
    value = (fmt or "").strip().lower()
    if value not in allowed:
        raise typer.BadParameter(
            f"Unknown format: {fmt}. Valid options: {', '.join(sorted(allowed))}"
        )
    return value


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


# ------------------------------
# CLI Commands
# ------------------------------


def _wire(git: str = "git", regex: bool = False) -> OwnershipService:
    """
    Minimal composition root:
      GitCLIBlameSource -> OwnershipService
    """
    source = GitCLIBlameSource(git)
    return OwnershipService(source, use_line_porcelain=regex)


@app.command()
def report(
    files: List[Path] = typer.Argument(..., help="Files to analyse."),
    filter_email: Optional[List[str]] = typer.Option(
        None, "--filter-email", help="Only show owners whose email contains this (repeatable)."
    ),
    filter_name: Optional[List[str]] = typer.Option(
        None, "--filter-name", help="Only show owners whose name contains this (repeatable)."
    ),
    summary: bool = typer.Option(
        False, "--summary", help="Print out summary of owners across all files."
    ),
    regex: bool = typer.Option(
        False,
        "--regex",
        help="Extract hunks from --line-porcelain output instead of parsing --porcelain.",
    ),
    jobs: Optional[int] = typer.Option(
        None,
        "--jobs",
        "-j",
        min=1,
        envvar="AUTHORSHIP_JOBS",
        help="Worker threads. Defaults to the number of CPUs.",
    ),
    git: str = typer.Option("git", "--git", envvar="AUTHORSHIP_GIT", help="git executable."),
    fmt: str = typer.Option("text", "--fmt", help="Output format: text, json or csv."),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "--output",
        help="Write the report to this path instead of stdout.",
        resolve_path=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Report which authors own the lines of each file.

    Files that cannot be analysed are listed as failed; the rest are still reported.
    """
    if verbose:
        setup_logging(verbose=True)
        logger.debug("Verbose logging enabled")

    fmt = _parse_fmt(fmt, set(FORMATS))
    service = _wire(git, regex=regex)
    results = service.analyze_many(files, jobs=jobs)
    view = ReportService(emails=filter_email, names=filter_name)

    if out is None:
        typer.echo(view.render(results, fmt, summary=summary), nl=False)
        return

    # --out DIR -> DIR/authorship.<fmt>
    target = Path(out)
    if target.exists() and target.is_dir():
        target = target / f"authorship.{fmt}"
    written = view.write(results, target, fmt, summary=summary)
    typer.echo(f"Wrote {fmt} report to {written}")


@app.command()
def parse(
    path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Saved output of `git blame --porcelain`.",
    ),
    fmt: str = typer.Option("json", "--fmt", help="Output format: json or porcelain."),
):
    """
    Parse a saved porcelain stream and print its line records.
    """
    fmt = _parse_fmt(fmt, PARSE_FORMATS)
    try:
        records = parse_porcelain(path.read_bytes())
    except MalformedStream as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if fmt == "porcelain":
        typer.echo(format_porcelain(records), nl=False)
        return
    doc = [dataclasses.asdict(r) for r in records]
    typer.echo(json.dumps(doc, ensure_ascii=False, indent=2, default=_json_default))
