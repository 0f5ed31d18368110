"""
Plain-text table rendering for the terminal.

Columns are fixed-width and long values are truncated to fit, so the report
lines up regardless of what Jamf returns.
"""

from __future__ import annotations

from collections.abc import Sequence

from uptimechamps.storage.models import (
    ComputerSummary,
    DeviceUptimeRecord,
    ExtensionAttribute,
)

MISSING = "N/A"


def format_table(
    columns: Sequence[tuple[str, int]],
    rows: Sequence[Sequence[str | None]],
) -> str:
    """
    Render rows as a fixed-width table with a dashed header rule.

    Args:
        columns: (header, width) pairs.
        rows: Row values; None renders as "N/A".

    Returns:
        Table text without a trailing newline.
    """
    widths = [width for _, width in columns]
    lines = [
        _format_row([header for header, _ in columns], widths),
        _format_row(["-" * width for width in widths], widths),
    ]
    for row in rows:
        lines.append(_format_row(row, widths))
    return "\n".join(lines)


def render_report(records: Sequence[DeviceUptimeRecord]) -> str:
    """Render ranked uptime records."""
    columns = [
        ("RANK", 6),
        ("UPTIME", 15),
        ("USERNAME", 30),
        ("EMAIL", 30),
        ("COMPUTER", 20),
    ]
    rows = [
        [
            f"{rank}.",
            record.uptime_display,
            record.username,
            record.email,
            record.display_name,
        ]
        for rank, record in enumerate(records, start=1)
    ]
    return format_table(columns, rows)


def render_extension_attributes(attributes: Sequence[ExtensionAttribute]) -> str:
    """Render Extension Attribute definitions."""
    columns = [("ID", 5), ("NAME", 50), ("ENABLED", 15)]
    rows = [
        [
            attribute.id,
            attribute.name,
            None if attribute.enabled is None else str(attribute.enabled).lower(),
        ]
        for attribute in attributes
    ]
    return format_table(columns, rows)


def render_computers(computers: Sequence[ComputerSummary]) -> str:
    """Render a computer listing."""
    columns = [("ID", 8), ("NAME", 30), ("SERIAL", 20)]
    rows = [[c.id, c.name, c.serial_number] for c in computers]
    return format_table(columns, rows)


def render_attribute_details(attributes: Sequence[ExtensionAttribute]) -> str:
    """Render one computer's Extension Attributes as ID/Name/Value blocks."""
    blocks = []
    for attribute in attributes:
        lines = [
            f"ID: {attribute.id}",
            f"Name: {attribute.name}",
            f"Value: {attribute.value if attribute.value is not None else 'null'}",
        ]
        if attribute.type:
            lines.append(f"Type: {attribute.type}")
        lines.append("---")
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


def _format_row(values: Sequence[str | None], widths: Sequence[int]) -> str:
    cells = []
    for value, width in zip(values, widths):
        text = MISSING if value is None else str(value)
        cells.append(f"{text[:width]:<{width}}")
    return " ".join(cells).rstrip()
