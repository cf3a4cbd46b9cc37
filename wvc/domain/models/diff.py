"""
Positional line diff.

Lines are compared index by index rather than aligned by longest common
subsequence. The output is not a minimal edit script: inserting one line
near the top of a document reports every following line as changed.
Callers rely on this exact shape, so keep it positional.
"""

from typing import List, Optional

from .value_objects import LineStats


def generate_simple_diff(old_content: str, new_content: str) -> str:
    """
    Build a positional line diff.

    For each index up to the longer of the two documents:
    - a line only present in the new document emits ``+ line``
    - a line only present in the old document emits ``- line``
    - differing lines emit ``- old`` followed by ``+ new``

    Equal lines produce no output.

    Args:
        old_content: Previous document content
        new_content: New document content

    Returns:
        Newline-joined diff lines (empty string when identical)
    """
    old_lines = old_content.split("\n")
    new_lines = new_content.split("\n")
    diff: List[str] = []

    for i in range(max(len(old_lines), len(new_lines))):
        if i >= len(old_lines):
            diff.append(f"+ {new_lines[i]}")
        elif i >= len(new_lines):
            diff.append(f"- {old_lines[i]}")
        elif old_lines[i] != new_lines[i]:
            diff.append(f"- {old_lines[i]}")
            diff.append(f"+ {new_lines[i]}")

    return "\n".join(diff)


def summarize_line_changes(old_content: Optional[str], new_content: str) -> LineStats:
    """
    Count added, removed and modified lines positionally.

    Without an old version every line of the new document counts as added.
    Blank lines are treated as absent, so a line emptied in place counts as
    removed and a blank line filled in counts as added.
    """
    new_lines = new_content.split("\n")
    if old_content is None:
        return LineStats(added=len(new_lines))

    old_lines = old_content.split("\n")
    added = removed = modified = 0

    for i in range(max(len(old_lines), len(new_lines))):
        old_line = old_lines[i] if i < len(old_lines) else ""
        new_line = new_lines[i] if i < len(new_lines) else ""

        if old_line and not new_line:
            removed += 1
        elif not old_line and new_line:
            added += 1
        elif old_line != new_line:
            modified += 1

    return LineStats(added=added, removed=removed, modified=modified)


__all__ = ["generate_simple_diff", "summarize_line_changes"]
