"""
Tests for terminal table rendering.

Uses Python's unittest module.
"""

from __future__ import annotations

import unittest

from uptimechamps.reports import (
    format_table,
    render_attribute_details,
    render_computers,
    render_extension_attributes,
    render_report,
)
from uptimechamps.storage.models import ComputerSummary, ExtensionAttribute

from tests.helpers import make_record


class TestFormatTable(unittest.TestCase):
    """Tests for format_table."""

    def test_header_and_rule(self) -> None:
        """Test the header row is followed by a dashed rule per column."""
        table = format_table([("A", 3), ("B", 2)], [])

        self.assertEqual(table.splitlines(), ["A   B", "--- --"])

    def test_missing_values(self) -> None:
        """Test None cells render as N/A."""
        table = format_table([("A", 4), ("B", 4)], [[None, "x"]])

        self.assertEqual(table.splitlines()[2], "N/A  x")

    def test_long_values_truncated(self) -> None:
        table = format_table([("NAME", 5), ("X", 1)], [["abcdefghij", "y"]])

        self.assertEqual(table.splitlines()[2], "abcde y")


class TestRenderReport(unittest.TestCase):
    """Tests for render_report."""

    def test_rows_in_rank_order(self) -> None:
        """Test each record is one row, numbered from 1."""
        records = [
            make_record("2", 30, username="alice", email="alice@example.com", name="Lab-Mac"),
            make_record("1", 4, username=None, email=None),
        ]

        lines = render_report(records).splitlines()

        self.assertEqual(len(lines), 4)
        self.assertTrue(lines[0].startswith("RANK   UPTIME"))
        self.assertTrue(lines[2].startswith("1.     30d 2h"))
        self.assertIn("alice@example.com", lines[2])
        self.assertTrue(lines[2].endswith("Lab-Mac"))
        self.assertTrue(lines[3].startswith("2.     4d 2h"))
        self.assertEqual(lines[3].count("N/A"), 2)

    def test_column_positions(self) -> None:
        """Test columns start at fixed offsets."""
        line = render_report([make_record("7", 12, username="bob", email="bob@example.com")]).splitlines()[2]

        self.assertEqual(line[7:22].rstrip(), "12d 2h")
        self.assertEqual(line[23:53].rstrip(), "bob")
        self.assertEqual(line[54:84].rstrip(), "bob@example.com")
        self.assertEqual(line[85:], "Mac-7")

    def test_empty(self) -> None:
        self.assertEqual(len(render_report([]).splitlines()), 2)


class TestDiagnosticRendering(unittest.TestCase):
    """Tests for the attribute and computer listings."""

    def test_extension_attributes(self) -> None:
        attributes = [
            ExtensionAttribute(id="1", name="Uptime", value=None, enabled=True),
            ExtensionAttribute(id="2", name="Battery", value=None, enabled=False),
        ]

        lines = render_extension_attributes(attributes).splitlines()

        self.assertTrue(lines[2].startswith("1     Uptime"))
        self.assertTrue(lines[2].endswith("true"))
        self.assertTrue(lines[3].endswith("false"))

    def test_computers(self) -> None:
        lines = render_computers([ComputerSummary(id="12", name="Mac-12")]).splitlines()

        self.assertEqual(lines[2], "12       Mac-12                         N/A")

    def test_attribute_details(self) -> None:
        """Test each attribute becomes an ID/Name/Value block."""
        text = render_attribute_details([
            ExtensionAttribute(id="7", name="Uptime", value="2026-10-01 08:00:00", type="String"),
            ExtensionAttribute(id="8", name="Empty", value=None),
        ])

        self.assertEqual(
            text.splitlines(),
            [
                "ID: 7",
                "Name: Uptime",
                "Value: 2026-10-01 08:00:00",
                "Type: String",
                "---",
                "ID: 8",
                "Name: Empty",
                "Value: null",
                "---",
            ],
        )


if __name__ == "__main__":
    unittest.main()
