"""Periodic score refresh.

Report views re-run the whole pipeline on a fixed interval instead of
subscribing to changes. `ScoreRefresher` makes that loop explicit: every run
builds a fresh report from a new snapshot and hands it to a callback.
"""
from __future__ import annotations

import logging
import time
from datetime import date
from typing import Callable

from pymongo.errors import PyMongoError

from esg_pipeline.ingest.repository import SubmissionRepository
from esg_pipeline.models import ScoreReport
from esg_pipeline.pipeline import build_score_report

log = logging.getLogger(__name__)


class ScoreRefresher:
    """Poll a repository and deliver a new `ScoreReport` on every run.

    Attributes:
        repository: Source of raw submissions.
        on_report: Callback receiving each successfully built report.
        interval_seconds: Pause between runs.
    """

    def __init__(
        self,
        repository: SubmissionRepository,
        on_report: Callable[[ScoreReport], None],
        interval_seconds: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = date.today,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.repository = repository
        self.on_report = on_report
        self.interval_seconds = interval_seconds
        self._sleep = sleep
        self._today = today

    def run_once(self) -> ScoreReport:
        """Build one report from a fresh snapshot and deliver it."""
        report = build_score_report(self.repository, today=self._today())
        self.on_report(report)
        return report

    def run(self, max_runs: int | None = None) -> int:
        """Refresh until `max_runs` runs have been attempted (forever when None).

        A run whose repository read fails is logged and skipped; the next run
        starts from a new snapshot.

        Returns:
            Number of reports delivered.
        """
        delivered = 0
        attempted = 0
        while max_runs is None or attempted < max_runs:
            attempted += 1
            try:
                self.run_once()
                delivered += 1
            except (OSError, ValueError, PyMongoError) as e:
                log.warning("Score refresh %d failed: %s", attempted, e)

            if max_runs is None or attempted < max_runs:
                self._sleep(self.interval_seconds)

        log.info("Score refresh stopped after %d runs (%d delivered)", attempted, delivered)
        return delivered
