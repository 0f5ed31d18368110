"""
Top-N uptime cache.

The cache holds the highest-ranked machines from the previous run so the
next run can re-check just those instead of the whole fleet. It is replaced
wholesale at the end of every successful run.

File Layout:
    # saved_at=2026-10-18T09:30:00+02:00
    uptimeDays|username|email|displayName|serialNumber|uptimeDisplay|bootTimeText|deviceId

    The header line is optional. Files written by the older shell report have
    no header; for those the file modification time is used as saved_at.
    Missing values are written as "N/A".
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from uptimechamps.storage.models import DeviceUptimeRecord
from uptimechamps.uptime.calculator import SECONDS_PER_DAY
from uptimechamps.uptime.timestamps import TimestampParseError, parse_boot_time

logger = logging.getLogger(__name__)

FIELD_DELIMITER = "|"
FIELD_COUNT = 8
HEADER_PREFIX = "# saved_at="
MISSING_VALUE = "N/A"


class CacheError(Exception):
    """Raised when the cache file cannot be written."""

    pass


@dataclass
class RankedCache:
    """
    Bounded, persisted list of the longest-running devices.

    Attributes:
        entries: Records sorted by uptime_days, longest first.
        saved_at: When the cache was written (timezone-aware).
        path: File the cache was loaded from or saved to.
    """

    entries: list[DeviceUptimeRecord] = field(default_factory=list)
    saved_at: datetime | None = None
    path: Path | None = None

    @classmethod
    def load(cls, path: Path) -> RankedCache | None:
        """
        Load a cache file.

        Args:
            path: Cache file location.

        Returns:
            RankedCache, or None if the file is missing, unreadable, or holds
            no valid entries.
        """
        try:
            text = path.read_text(encoding="utf-8")
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Cannot read cache file {path}: {e}")
            return None

        saved_at: datetime | None = None
        entries: list[DeviceUptimeRecord] = []

        for line_number, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            if line.startswith("#"):
                if line.startswith(HEADER_PREFIX) and saved_at is None:
                    saved_at = _parse_saved_at(line[len(HEADER_PREFIX):])
                continue

            record = _parse_line(line)
            if record is None:
                logger.debug(f"Skipping malformed cache line {line_number} in {path}")
                continue
            entries.append(record)

        if not entries:
            logger.info(f"Cache file {path} has no usable entries")
            return None

        if saved_at is None:
            saved_at = datetime.fromtimestamp(mtime).astimezone()

        entries.sort(key=lambda r: r.uptime_days, reverse=True)
        return cls(entries=entries, saved_at=saved_at, path=path)

    @classmethod
    def save(
        cls,
        path: Path,
        records: list[DeviceUptimeRecord],
        now: datetime,
        top_n: int,
    ) -> RankedCache:
        """
        Replace the cache file with the top N of the given records.

        The file is written to a temporary file in the same directory and
        renamed over the target, so a failed write leaves the previous cache
        intact.

        Args:
            path: Cache file location.
            records: All records from this run, in scan order.
            now: Time of the run; becomes saved_at.
            top_n: Maximum number of entries to keep.

        Returns:
            The cache as written.

        Raises:
            CacheError: If the file cannot be written.
        """
        # sorted() is stable, so equal uptimes keep scan order
        entries = sorted(records, key=lambda r: r.uptime_days, reverse=True)[:top_n]

        lines = [f"{HEADER_PREFIX}{now.isoformat()}"]
        lines.extend(_format_line(record) for record in entries)
        content = "\n".join(lines) + "\n"

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                prefix=f".{path.name}.",
                suffix=".tmp",
                dir=str(path.parent),
            )
        except OSError as e:
            raise CacheError(f"Cannot create cache file in {path.parent}: {e}") from e

        try:
            # Unencodable characters (lone surrogates from JSON) become "?"
            with os.fdopen(temp_fd, "w", encoding="utf-8", errors="replace") as f:
                f.write(content)
            timestamp = now.timestamp()
            os.utime(temp_path, (timestamp, timestamp))
            os.replace(temp_path, path)
        except Exception as e:
            # Clean up temp file on error
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise CacheError(f"Cannot write cache file {path}: {e}") from e

        logger.info(f"Saved {len(entries)} entries to cache {path}")
        return cls(entries=entries, saved_at=now, path=path)

    def age_days(self, now: datetime) -> int:
        """Whole days since the cache was saved (never negative)."""
        if self.saved_at is None:
            return 0
        elapsed = (now - self.saved_at).total_seconds()
        return max(0, int(elapsed // SECONDS_PER_DAY))

    def is_fresh(self, now: datetime, max_age_days: int) -> bool:
        """
        Check whether the cache may drive a quick scan.

        A cache exactly max_age_days old is stale, so a full scan happens no
        later than the configured interval.
        """
        return self.age_days(now) < max_age_days

    def top_ids(self, n: int) -> list[str]:
        """Device IDs of the first n entries, in ranked order."""
        return [record.device_id for record in self.entries[:n]]

    def __len__(self) -> int:
        return len(self.entries)


def _parse_saved_at(value: str) -> datetime | None:
    try:
        saved_at = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if saved_at.tzinfo is None:
        saved_at = saved_at.astimezone()
    return saved_at


def _parse_line(line: str) -> DeviceUptimeRecord | None:
    fields = line.split(FIELD_DELIMITER)
    if len(fields) != FIELD_COUNT:
        return None

    (
        days_text,
        username,
        email,
        display_name,
        serial_number,
        uptime_display,
        boot_time_text,
        device_id,
    ) = fields

    try:
        uptime_days = int(days_text)
        boot_instant = parse_boot_time(boot_time_text)
    except (ValueError, TimestampParseError):
        return None

    if uptime_days < 0 or not device_id.strip():
        return None

    return DeviceUptimeRecord(
        device_id=device_id.strip(),
        display_name=_read_field(display_name),
        serial_number=_read_field(serial_number),
        username=_read_field(username),
        email=_read_field(email),
        boot_time_text=boot_time_text,
        boot_instant=boot_instant,
        uptime_days=uptime_days,
        uptime_display=uptime_display,
    )


def _format_line(record: DeviceUptimeRecord) -> str:
    return FIELD_DELIMITER.join(
        [
            str(record.uptime_days),
            _write_field(record.username),
            _write_field(record.email),
            _write_field(record.display_name),
            _write_field(record.serial_number),
            _write_field(record.uptime_display),
            _write_field(record.boot_time_text),
            _write_field(record.device_id),
        ]
    )


def _read_field(value: str) -> str | None:
    if value == MISSING_VALUE or value == "":
        return None
    return value


def _write_field(value: str | None) -> str:
    if value is None or value == "":
        return MISSING_VALUE
    return (
        value.replace(FIELD_DELIMITER, "/")
        .replace("\r", " ")
        .replace("\n", " ")
    )
