"""Plain-text table rendering for terminal output."""

from typing import List, Sequence


def render_table(records: Sequence, title: str = "") -> str:
    """One record per row inside a bordered single-column table"""
    lines: List[str] = [str(record) for record in records]
    if not lines:
        lines = ["(no records)"]

    width = max(len(line) for line in lines + [title])
    border = f"+{'-' * (width + 2)}+"

    output = [border]
    if title:
        output.append(f"| {title.ljust(width)} |")
        output.append(border)
    for line in lines:
        output.append(f"| {line.ljust(width)} |")
    output.append(border)
    return "\n".join(output)
