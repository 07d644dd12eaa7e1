from __future__ import annotations

import pytest

from filter_updater.engine import summarize


def test_comments_and_blank_lines_are_skipped() -> None:
    assert summarize(b"# h\n\nrule1\nrule2\n!n\n") == 2


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        (b"", 0),
        (b"rule", 1),
        (b"a\r\nb\r\n\r\n", 2),
        (b"   \n\t\nrule\n", 1),
        (b"#c\r\n!c\r\nrule\r\n", 1),
        (b"  # indented\n\t! marker\nrule\n", 3),
        (b"\xff\xfe binary junk\n\x00\n", 2),
    ],
)
def test_summarize_edge_cases(body: bytes, expected: int) -> None:
    assert summarize(body) == expected
