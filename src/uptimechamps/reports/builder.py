"""
Uptime report builder.

Runs the fetch loop for a scan decision: fetches each candidate device,
reads its boot time Extension Attribute, computes uptime, ranks the results,
writes the top N to the cache, and returns the top K for display.

Per-device problems (API errors, missing or malformed boot times, boot times
in the future) skip that device and never abort the run. A run that ends up
with no usable records raises NoDataError and leaves the cache untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from uptimechamps.inventory.base import InventoryError
from uptimechamps.storage.cache import RankedCache
from uptimechamps.storage.models import (
    ComputerRecord,
    DeviceUptimeRecord,
    ScanDecision,
)
from uptimechamps.uptime.calculator import InvalidUptimeError, compute_uptime
from uptimechamps.uptime.timestamps import TimestampParseError, parse_boot_time

logger = logging.getLogger(__name__)

# How often the progress callback fires
PROGRESS_INTERVAL = 10


class NoDataError(Exception):
    """
    Raised when a scan produced no usable uptime records.

    Attributes:
        scanned: Number of devices that were attempted.
        attribute_name: Extension Attribute the scan looked for.
    """

    def __init__(self, scanned: int, attribute_name: str) -> None:
        self.scanned = scanned
        self.attribute_name = attribute_name
        super().__init__(
            f"No uptime data found in {scanned} devices "
            f"(extension attribute '{attribute_name}')"
        )


@dataclass
class ReportResult:
    """
    Outcome of a report run.

    Attributes:
        records: Top K records for display, longest uptime first.
        decision: The scan decision the run executed.
        scanned: Number of candidate devices attempted.
        ranked: Number of devices with usable uptime data.
        skipped: Reasons for skipped devices, keyed by device ID.
        cache: The cache as written at the end of the run.
    """

    records: list[DeviceUptimeRecord]
    decision: ScanDecision
    scanned: int
    ranked: int
    skipped: dict[str, str] = field(default_factory=dict)
    cache: RankedCache | None = None


class ReportBuilder:
    """
    Builds the ranked uptime report.

    Example:
        builder = ReportBuilder(cache_path, attribute_name="Uptime")
        result = builder.run(decision, client.get_computer, now)
        print(render_report(result.records))
    """

    def __init__(
        self,
        cache_path: Path,
        attribute_name: str = "Uptime",
        cache_top_n: int = 50,
        display_top_k: int = 25,
    ) -> None:
        self.cache_path = cache_path
        self.attribute_name = attribute_name
        self.cache_top_n = cache_top_n
        self.display_top_k = display_top_k

    def run(
        self,
        decision: ScanDecision,
        fetch_one: Callable[[str], ComputerRecord],
        now: datetime,
        progress: Callable[[int, int], None] | None = None,
    ) -> ReportResult:
        """
        Scan the decision's candidates and rank them by uptime.

        Args:
            decision: Scan decision from ScanPlanner.
            fetch_one: Fetches one device's record; raises InventoryError on failure.
            now: Reference time for uptime calculation and cache timestamp.
            progress: Optional callback receiving (processed, total).

        Returns:
            ReportResult with the top K records.

        Raises:
            NoDataError: If no candidate yielded a usable record.
            CacheError: If the cache cannot be written.
        """
        total = len(decision.candidate_ids)
        records: list[DeviceUptimeRecord] = []
        skipped: dict[str, str] = {}

        for index, device_id in enumerate(decision.candidate_ids, start=1):
            try:
                record = self._observe(device_id, fetch_one, now)
            except _SkipDevice as e:
                skipped[device_id] = e.reason
                logger.debug(f"Skipping device {device_id}: {e.reason}")
            else:
                records.append(record)

            if progress is not None and index % PROGRESS_INTERVAL == 0:
                progress(index, total)

        if progress is not None and total % PROGRESS_INTERVAL != 0:
            progress(total, total)

        logger.info(
            f"Scanned {total} devices: {len(records)} with uptime data, "
            f"{len(skipped)} skipped"
        )

        if not records:
            raise NoDataError(total, self.attribute_name)

        cache = RankedCache.save(self.cache_path, records, now, self.cache_top_n)

        # Ties keep scan order since sorted() is stable
        ranked = sorted(records, key=lambda r: r.uptime_days, reverse=True)
        return ReportResult(
            records=ranked[: self.display_top_k],
            decision=decision,
            scanned=total,
            ranked=len(records),
            skipped=skipped,
            cache=cache,
        )

    def _observe(
        self,
        device_id: str,
        fetch_one: Callable[[str], ComputerRecord],
        now: datetime,
    ) -> DeviceUptimeRecord:
        try:
            computer = fetch_one(device_id)
        except InventoryError as e:
            logger.warning(f"Failed to fetch device {device_id}: {e}")
            raise _SkipDevice(f"fetch failed: {e.message}") from e

        if computer is None:
            raise _SkipDevice("empty response")

        boot_time_text = computer.attribute_value(self.attribute_name)
        if boot_time_text is None:
            raise _SkipDevice(f"no '{self.attribute_name}' attribute")

        try:
            boot_instant = parse_boot_time(boot_time_text)
            uptime = compute_uptime(boot_instant, now)
        except (TimestampParseError, InvalidUptimeError) as e:
            raise _SkipDevice(str(e)) from e

        return DeviceUptimeRecord(
            device_id=str(device_id),
            display_name=computer.name,
            serial_number=computer.serial_number,
            username=computer.username,
            email=computer.email,
            boot_time_text=boot_time_text.strip(),
            boot_instant=boot_instant,
            uptime_days=uptime.days,
            uptime_display=uptime.display,
        )


class _SkipDevice(Exception):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)
