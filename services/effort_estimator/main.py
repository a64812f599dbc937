"""
Effort Estimator Service.

Runs the per-developer pipeline over a repository:
- Discover the distinct author identities
- Fetch and parse each author's numstat log
- Estimate hours for every commit
- Write one JSON report per developer and a repository summary
"""

import logging
from collections import Counter
from typing import Dict, List, Optional, Set

from shared.git_repository import GitRepository
from shared.models import (
    DeveloperIdentity, DeveloperTotals, EstimatedCommit, RepositorySummary
)
from shared.report_writer import ReportWriter
from services.effort_estimator.hour_estimator import HourEstimator
from services.effort_estimator.log_parser import CommitLogParser

logger = logging.getLogger(__name__)


class EffortEstimationService:
    """Core estimation service with the orchestration logic."""

    def __init__(
        self,
        repository: GitRepository,
        writer: ReportWriter,
        parser: Optional[CommitLogParser] = None,
        estimator: Optional[HourEstimator] = None,
    ):
        self.repository = repository
        self.writer = writer
        self.parser = parser or CommitLogParser.from_settings(repository.git_settings)
        self.estimator = estimator or HourEstimator()

    def discover_developers(self) -> List[DeveloperIdentity]:
        """List every author identity in the history."""
        return self.repository.get_all_authors_with_emails()

    @staticmethod
    def assign_filename_bases(developers: List[DeveloperIdentity]) -> Dict[DeveloperIdentity, str]:
        """Use the name as file stem, or the email when the name is shared."""
        name_count = Counter(d.name for d in developers)
        return {
            d: (d.email if name_count[d.name] > 1 and d.email else d.name)
            for d in developers
        }

    def estimate_commits(
        self,
        raw_log: str,
        commit_hashes: Optional[Set[str]] = None,
    ) -> List[EstimatedCommit]:
        """
        Parse a raw log and attach an estimate to every commit.

        When ``commit_hashes`` is given, commits outside it are dropped
        before estimation.
        """
        return [
            EstimatedCommit.from_estimation(commit, self.estimator.estimate(commit))
            for commit in self.parser.parse(raw_log)
            if commit_hashes is None or commit.hash in commit_hashes
        ]

    def process_developer(
        self,
        developer: DeveloperIdentity,
        filename_base: Optional[str] = None,
    ) -> Optional[DeveloperTotals]:
        """
        Estimate and write the report for one developer.

        Returns:
            DeveloperTotals, or None when the developer has no commits
        """
        raw_log = self.repository.get_commits_for_author(developer)
        if not raw_log.strip():
            logger.warning(f"No commits found for {developer.name}")
            return None

        commits = self.estimate_commits(
            raw_log, self.repository.get_commit_hashes_for_author(developer)
        )
        if not commits:
            logger.warning(f"No commits found for {developer.name} <{developer.email}>")
            return None

        totals = self.writer.write_developer_report(
            developer.name, commits, filename_base, email=developer.email
        )
        logger.info(
            f"{developer.name}: {totals.commits} commits, {totals.hours:.2f}h -> {totals.filename}"
        )
        return totals

    def finalize(self, totals: List[DeveloperTotals]) -> RepositorySummary:
        summary = self.writer.write_summary(totals)
        logger.info(
            f"Processed {summary.total_developers} developers, "
            f"grand total {summary.grand_total_hours:.2f}h"
        )
        return summary

    def run(self) -> RepositorySummary:
        """Estimate every developer in the repository and write all reports."""
        developers = self.discover_developers()
        filename_bases = self.assign_filename_bases(developers)

        totals = []
        for developer in developers:
            result = self.process_developer(developer, filename_bases[developer])
            if result is not None:
                totals.append(result)

        return self.finalize(totals)
