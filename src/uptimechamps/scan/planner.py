"""
Scan planning.

Decides whether a run enumerates every computer in Jamf (full scan) or only
re-checks the machines ranked in the cache (quick scan). A quick scan never
calls the computer listing endpoint; that is what keeps routine runs cheap.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from uptimechamps.storage.cache import RankedCache
from uptimechamps.storage.models import ScanDecision, ScanMode

logger = logging.getLogger(__name__)


class ScanPlanner:
    """
    Chooses the scan mode and candidate devices for a run.

    Attributes:
        max_age_days: Cache age at which a full scan is forced.
        cache_top_n: Number of cached devices a quick scan re-checks.

    Example:
        planner = ScanPlanner(max_age_days=14, cache_top_n=50)
        decision = planner.plan(
            RankedCache.load(path),
            force_full_scan=False,
            all_known_ids=lambda: [c.id for c in client.list_computers()],
            now=datetime.now().astimezone(),
        )
    """

    def __init__(self, max_age_days: int = 14, cache_top_n: int = 50) -> None:
        self.max_age_days = max_age_days
        self.cache_top_n = cache_top_n

    def plan(
        self,
        cache: RankedCache | None,
        force_full_scan: bool,
        all_known_ids: Callable[[], list[str]],
        now: datetime,
    ) -> ScanDecision:
        """
        Produce the scan decision for this run.

        Args:
            cache: Cache from the previous run, or None if there is none.
            force_full_scan: True when the user asked for a full scan.
            all_known_ids: Enumerates every device ID; only called for full scans.
            now: Current time.

        Returns:
            ScanDecision with mode and candidate IDs.
        """
        cache_age_days = cache.age_days(now) if cache is not None else None

        if force_full_scan:
            return self._full_scan(all_known_ids, cache_age_days, "forced")

        if cache is None:
            return self._full_scan(all_known_ids, None, "no cache")

        if not cache.is_fresh(now, self.max_age_days):
            return self._full_scan(all_known_ids, cache_age_days, "stale")

        candidate_ids = cache.top_ids(self.cache_top_n)
        logger.info(
            f"Quick scan of {len(candidate_ids)} cached devices "
            f"(cache is {cache_age_days} days old)"
        )
        return ScanDecision(
            mode=ScanMode.QUICK,
            candidate_ids=candidate_ids,
            cache_age_days=cache_age_days,
            reason="fresh",
        )

    def _full_scan(
        self,
        all_known_ids: Callable[[], list[str]],
        cache_age_days: int | None,
        reason: str,
    ) -> ScanDecision:
        candidate_ids = list(all_known_ids())
        logger.info(f"Full scan of {len(candidate_ids)} devices ({reason})")
        return ScanDecision(
            mode=ScanMode.FULL,
            candidate_ids=candidate_ids,
            cache_age_days=cache_age_days,
            reason=reason,
        )
