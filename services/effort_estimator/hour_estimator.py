"""
Hour estimation for parsed commits.

An estimate is the product of four independent factors:

    hours = base_hours * type_multiplier * file_multiplier * lang_multiplier

``base_hours`` grows with log10 of the changed line count so large mechanical
diffs do not dominate. The product is capped, snapped half-up to the rounding
increment and floored at the minimum estimate. Every factor is reported back
in the ``ChangeValue`` breakdown.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from config.settings import settings
from shared.models import (
    ChangeType, ChangeValue, CommitRecord, CommitTypeRule, EstimationResult,
    FileChange, SizeCategory
)

logger = logging.getLogger(__name__)


class HourEstimator:
    """Deterministic, configuration-driven commit effort estimator."""

    def __init__(self, estimation_settings=None):
        self.config = estimation_settings or settings.estimation

    @property
    def commit_type_rules(self) -> List[CommitTypeRule]:
        return self.config.commit_type_rules

    def estimate(self, commit: CommitRecord) -> EstimationResult:
        """Estimate hours for one commit."""
        base_hours, size = self.calculate_base_hours(commit.total_changes)
        type_multiplier, change_type = self.determine_commit_type(commit.message)
        file_multiplier = self.calculate_file_multiplier(commit.files_changed)
        lang_multiplier = self.calculate_language_multiplier(commit.files)

        multipliers = (base_hours, type_multiplier, file_multiplier, lang_multiplier)
        hours_total = self.finalize_hours(math.prod(multipliers))

        logger.debug(
            f"Commit {commit.hash[:8]}: {size.value}/{change_type.value} "
            f"x{multipliers} -> {hours_total}h"
        )

        return EstimationResult(
            hours_total=hours_total,
            change_value=ChangeValue(
                size=size,
                change_type=change_type,
                multipliers=multipliers,
                hours_total=hours_total,
            ),
        )

    def calculate_base_hours(self, total_changes: int) -> Tuple[float, SizeCategory]:
        """
        Base hours from the changed line count on a logarithmic scale.

        0 changes is a flat 0.1h; otherwise 10 changes is about 0.7h,
        100 about 1.2h and 1000 about 1.7h.
        """
        if total_changes == 0:
            base_hours = self.config.empty_commit_hours
        else:
            base_hours = (
                self.config.log_scale_factor * math.log10(total_changes + 1)
                + self.config.log_base_offset
            )
        return base_hours, SizeCategory.from_base_hours(base_hours)

    def determine_commit_type(self, message: str) -> Tuple[float, ChangeType]:
        """First rule whose keywords appear in the message wins."""
        lowered = message.lower()
        for rule in self.commit_type_rules:
            if rule.matches(lowered):
                return rule.multiplier, rule.change_type
        return 1.0, ChangeType.GENERAL

    def calculate_file_multiplier(self, num_files: int) -> float:
        for threshold, multiplier in self.config.file_count_bands:
            if num_files > threshold:
                return multiplier
        return 1.0

    def calculate_language_multiplier(self, files: Sequence[FileChange]) -> float:
        """Commits touching source code weigh more than asset or doc changes."""
        extensions = self.config.coding_extensions
        for change in files:
            name = change.name.lower()
            if any(ext in name for ext in extensions):
                return self.config.coding_multiplier
        return 1.0

    def finalize_hours(self, raw_hours: float) -> float:
        """Cap, snap half-up to the increment, then apply the floor."""
        increment = self.config.rounding_increment
        capped = min(raw_hours, self.config.max_hours_per_commit)
        snapped = math.floor(capped / increment + 0.5) * increment
        return max(snapped, self.config.min_hours_per_commit)


def estimate_hours(commit: CommitRecord, estimator: Optional[HourEstimator] = None) -> EstimationResult:
    """Estimate one commit with the configured estimator."""
    return (estimator or HourEstimator()).estimate(commit)
