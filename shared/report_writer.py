"""
JSON report output for the commit effort estimator.

Writes one ``<developer>.json`` file per developer and a repository-wide
``_summary.json`` into the output directory.
"""

import json
import logging
import re
from pathlib import Path
from typing import List, Optional

from config.settings import settings
from shared.models import (
    DeveloperReport, DeveloperTotals, EstimatedCommit, RepositorySummary
)

logger = logging.getLogger(__name__)


def sanitize_filename(name: str) -> str:
    """
    Make a developer name or email safe to use as a file name.

    Path separators become dashes, brackets and characters invalid on Windows
    (plus ``@``) are dropped, whitespace runs collapse to one space.
    """
    name = re.sub(r"[/\\]", "-", name)
    name = re.sub(r"[\[\]]", "", name)
    name = re.sub(r'[<>:"|?*@]', "", name)
    name = re.sub(r"\s+", " ", name)
    return name.strip()


class ReportWriter:
    """Aggregates estimated commits and writes the JSON reports."""

    def __init__(self, output_dir: Optional[str] = None, estimation_settings=None, output_settings=None):
        self.estimation_settings = estimation_settings or settings.estimation
        self.output_settings = output_settings or settings.output
        self.output_dir = Path(output_dir or self.output_settings.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def output_dir_path(self) -> str:
        return str(self.output_dir.resolve())

    def _write_json(self, filename: str, payload: dict) -> Path:
        output_file = self.output_dir / filename
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=self.output_settings.json_indent, ensure_ascii=False)
        logger.debug(f"Wrote {output_file}")
        return output_file

    def build_developer_report(
        self,
        developer: str,
        commits: List[EstimatedCommit],
        email: Optional[str] = None,
    ) -> DeveloperReport:
        return DeveloperReport.build(
            developer,
            commits,
            email=email,
            hours_per_day=self.estimation_settings.hours_per_day,
            hours_per_week=self.estimation_settings.hours_per_week,
        )

    def write_developer_report(
        self,
        developer: str,
        commits: List[EstimatedCommit],
        filename_base: Optional[str] = None,
        email: Optional[str] = None,
    ) -> DeveloperTotals:
        """
        Write the report for one developer.

        Args:
            developer: Developer name
            commits: Estimated commits in history order
            filename_base: File name stem, defaults to the developer name
            email: Identity email, defaults to the first commit's email

        Returns:
            DeveloperTotals: Summary row including the written file name
        """
        report = self.build_developer_report(developer, commits, email)
        filename = f"{sanitize_filename(filename_base or developer)}.json"
        self._write_json(filename, report.model_dump(mode="json", by_alias=True))

        return DeveloperTotals(
            developer=developer,
            email=report.email,
            commits=report.total_commits,
            hours=report.total_hours,
            filename=filename,
        )

    def write_summary(self, developers: List[DeveloperTotals]) -> RepositorySummary:
        """Write the repository-wide summary file."""
        summary = RepositorySummary.build(
            developers,
            hours_per_day=self.estimation_settings.hours_per_day,
            hours_per_week=self.estimation_settings.hours_per_week,
        )
        self._write_json(
            self.output_settings.summary_filename,
            summary.model_dump(mode="json", by_alias=True),
        )
        return summary
