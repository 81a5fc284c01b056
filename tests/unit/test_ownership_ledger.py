import itertools
import random

import pytest

from authorship.domain.models import Hunk, Owner, TrackedFile
from authorship.services.hunk_normalizer import PorcelainRecords, normalize_hunks
from authorship.services.porcelain_parser import parse_porcelain

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_C = "c" * 40


def _extra(name: str, email: str) -> str:
    return (
        f"author {name}\n"
        f"author-mail <{email}>\n"
        "author-time 1600000000\n"
        "author-tz +0100\n"
        f"committer {name}\n"
        f"committer-mail <{email}>\n"
        "committer-time 1600000000\n"
        "committer-tz +0100\n"
        "summary change\n"
        "filename a.txt\n"
    )


def _stream(groups) -> str:
    """Porcelain text for groups of (sha, size, name, email); details once per commit."""
    out = []
    seen = set()
    line_no = 1
    for sha, size, name, email in groups:
        for i in range(size):
            header = f"{sha} {line_no} {line_no}"
            if i == 0:
                header += f" {size}"
            out.append(header + "\n")
            if sha not in seen:
                out.append(_extra(name, email))
                seen.add(sha)
            out.append(f"\tline {line_no}\n")
            line_no += 1
    return "".join(out)


def _ledger(text: str) -> TrackedFile:
    tracked = TrackedFile("a.txt")
    for hunk in normalize_hunks(PorcelainRecords(parse_porcelain(text))):
        tracked.add_hunk(hunk)
    return tracked


def test_single_group_shared_by_two_records():
    text = _stream([(SHA_A, 2, "Alice", "alice@example.com")])
    records = parse_porcelain(text)
    assert records[0].extra is not None and records[1].extra is None

    tracked = _ledger(text)
    assert list(tracked.owners) == ["alice@example.com"]
    alice = tracked.owners["alice@example.com"]
    assert alice.name == "Alice"
    assert alice.total_lines == 2
    assert alice.commit_count == 1


def test_non_contiguous_groups_of_one_commit_accumulate():
    text = _stream(
        [
            (SHA_A, 3, "Alice", "alice@example.com"),
            (SHA_B, 1, "Bob", "bob@example.com"),
            (SHA_A, 5, "Alice", "alice@example.com"),
        ]
    )
    alice = _ledger(text).owners["alice@example.com"]
    assert alice.commits == {SHA_A: 8}
    assert alice.commit_count == 1


def test_empty_stream_gives_empty_ledger():
    assert parse_porcelain("") == []
    tracked = _ledger("")
    assert tracked.owners == {}
    assert tracked.total_lines == 0


def test_one_owner_per_email_across_commits():
    text = _stream(
        [
            (SHA_A, 2, "Alice", "alice@example.com"),
            (SHA_C, 4, "Alice Smith", "alice@example.com"),
        ]
    )
    tracked = _ledger(text)
    assert len(tracked.owners) == 1
    alice = tracked.owners["alice@example.com"]
    # The name seen when the owner was created is kept.
    assert alice.name == "Alice"
    assert alice.commits == {SHA_A: 2, SHA_C: 4}
    assert str(alice) == "Alice <alice@example.com>: Lines: 6 Count: 2"


@pytest.mark.parametrize("seed", range(5))
def test_totals_match_group_sizes_and_content_lines(seed):
    rng = random.Random(seed)
    people = [("Alice", "alice@example.com"), ("Bob", "bob@example.com"), ("Carol", "carol@example.com")]
    shas = [format(rng.getrandbits(160), "040x") for _ in range(6)]
    author_of = {sha: rng.choice(people) for sha in shas}
    groups = []
    for _ in range(rng.randint(1, 12)):
        sha = rng.choice(shas)
        groups.append((sha, rng.randint(1, 7), *author_of[sha]))

    text = _stream(groups)
    records = parse_porcelain(text)
    tracked = _ledger(text)

    owner_total = sum(o.total_lines for o in tracked.owners.values())
    assert owner_total == sum(r.group_size for r in records if r.group_size is not None)
    assert owner_total == len(records) == text.count("\n\t")


HUNKS = [
    Hunk(SHA_A, "Alice", "alice@example.com", 3),
    Hunk(SHA_B, "Bob", "bob@example.com", 1),
    Hunk(SHA_A, "Alice", "alice@example.com", 5),
    Hunk(SHA_C, "Alice", "alice@example.com", 2),
    Hunk(SHA_B, "Bob", "bob@example.com", 4),
]


def _fold(hunks) -> TrackedFile:
    tracked = TrackedFile("f")
    for h in hunks:
        tracked.add_hunk(h)
    return tracked


def test_add_hunk_is_order_independent():
    expected = _fold(HUNKS)
    for perm in itertools.permutations(HUNKS):
        assert _fold(perm) == expected


def test_fold_of_expected_ledger():
    tracked = _fold(HUNKS)
    assert tracked.owners == {
        "alice@example.com": Owner("Alice", "alice@example.com", {SHA_A: 8, SHA_C: 2}),
        "bob@example.com": Owner("Bob", "bob@example.com", {SHA_B: 5}),
    }
    assert tracked.total_lines == 15
