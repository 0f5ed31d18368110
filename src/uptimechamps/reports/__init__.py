"""
Report generation for Uptimechamps.

This module builds the ranked uptime report from a scan decision and renders
it, along with the diagnostic listings, as plain-text tables.
"""

from uptimechamps.reports.builder import (
    NoDataError,
    ReportBuilder,
    ReportResult,
)
from uptimechamps.reports.presenter import (
    format_table,
    render_attribute_details,
    render_computers,
    render_extension_attributes,
    render_report,
)

__all__ = [
    # Builder
    "ReportBuilder",
    "ReportResult",
    "NoDataError",
    # Presenter
    "format_table",
    "render_report",
    "render_computers",
    "render_extension_attributes",
    "render_attribute_details",
]
