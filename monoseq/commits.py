"""Conventional Commits parsing.

Pure functions - no git calls, no output. The release pipeline feeds them the
raw ``git log`` text and gets back Commit models.
"""

from __future__ import annotations

import re

from .models import BumpKind, Commit

# Markers framing each commit in `git log --format=%h==HASH==%B==END==`
HASH_MARKER = "==HASH=="
END_MARKER = "==END=="
LOG_FORMAT = f"%h{HASH_MARKER}%B{END_MARKER}"

# type(scope)!: subject
HEADER_PATTERN = re.compile(
    r"^(?P<type>\w+)"
    r"(?:\((?P<scope>[^)]*)\))?"
    r"(?P<breaking>!)?"
    r":\s+(?P<subject>.+)$"
)

# Lines that open the footer: breaking change notes and issue references
FOOTER_PATTERN = re.compile(
    r"^(?:BREAKING[ -]CHANGE:"
    r"|(?:[Cc]loses?|[Ff]ix(?:es)?|[Rr]esolves?|[Rr]efs?)\s+#\d+)"
)

BREAKING_MARKERS = ("BREAKING CHANGE:", "BREAKING-CHANGE:")

TYPE_BUMPS = {
    "fix": BumpKind.PATCH,
    "feat": BumpKind.MINOR,
}


def parse_commit(hash_: str, message: str) -> Commit:
    """Parse one raw commit message.

    Non-conventional headers still produce a Commit, with ``type`` and
    ``scope`` left as None.
    """
    lines = message.strip("\n").splitlines()
    header = lines[0].strip() if lines else ""
    rest = lines[1:]

    footer_start = next(
        (i for i, line in enumerate(rest) if FOOTER_PATTERN.match(line)), None
    )
    if footer_start is None:
        body_lines, footer_lines = rest, []
    else:
        body_lines, footer_lines = rest[:footer_start], rest[footer_start:]

    body = "\n".join(body_lines).strip() or None
    footer = "\n".join(footer_lines).strip() or None

    match = HEADER_PATTERN.match(header)
    if not match:
        return Commit(hash=hash_, header=header, body=body, footer=footer)
    return Commit(
        hash=hash_,
        type=match.group("type"),
        scope=match.group("scope"),
        subject=match.group("subject"),
        header=header,
        body=body,
        footer=footer,
        breaking_header=bool(match.group("breaking")),
    )


def parse_log(output: str) -> list[Commit]:
    """Split ``git log --format=LOG_FORMAT`` output into parsed commits."""
    commits: list[Commit] = []
    for chunk in output.split(END_MARKER):
        if not chunk.strip():
            continue
        hash_, _, message = chunk.strip().partition(HASH_MARKER)
        commits.append(parse_commit(hash_.strip(), message))
    return commits


def is_breaking_change(commit: Commit) -> bool:
    if commit.breaking_header:
        return True
    return bool(commit.footer) and any(m in commit.footer for m in BREAKING_MARKERS)


def infer_bump(commits: list[Commit]) -> BumpKind:
    """Infer the version increment a set of commits requires.

    Starts at patch; ``feat`` escalates to minor and any breaking change
    forces major. Other types never escalate.
    """
    bump = BumpKind.PATCH
    for commit in commits:
        if is_breaking_change(commit):
            return BumpKind.MAJOR
        bump = max(bump, TYPE_BUMPS.get(commit.type or "", BumpKind.PATCH))
    return bump


def format_commit_list(commits: list[Commit], prepend: str, append: str) -> str:
    """Render commit headers, one per entry, flagging breaking changes."""
    return "".join(
        f"{prepend}{c.header}{' (BREAKING)' if is_breaking_change(c) else ''}{append}"
        for c in commits
    )
