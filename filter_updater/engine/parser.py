"""Summaries of downloaded filter content."""

from __future__ import annotations

COMMENT_MARKERS = (b"#", b"!")


def summarize(body: bytes) -> int:
    """Count usable rules, skipping blank and comment lines.

    A comment starts with a marker in the first column; an indented marker
    is counted as a rule. Whitespace-only lines are blank.

    Operates on raw bytes so arbitrary content is accepted. The count is
    advisory and never gates whether a list is used.
    """

    count = 0
    for line in body.split(b"\n"):
        if not line.rstrip() or line.startswith(COMMENT_MARKERS):
            continue
        count += 1
    return count


__all__ = ["COMMENT_MARKERS", "summarize"]
