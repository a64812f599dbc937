"""
Data models for the commit effort estimator.

This module provides:
- Commit records reconstructed from git log output
- Estimation results with a traceable breakdown
- Per-developer reports and the repository-wide summary

Every model serializes with camelCase aliases so the JSON reports keep their
established keys (``filesChanged``, ``estimatedHours``, ``changeValue`` ...).
"""

import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from enum import Enum

from pydantic import BaseModel, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


class SizeCategory(Enum):
    """Ordinal magnitude buckets, one unit of base hours each."""
    TRIVIAL = "trivial"
    SIMPLE = "simple"
    MEDIUM = "medium"
    LARGE = "large"
    VERY_LARGE = "very_large"
    MASSIVE = "massive"

    @classmethod
    def from_base_hours(cls, base_hours: float) -> "SizeCategory":
        """Bucket index is floor(base_hours), clamped to the known buckets."""
        buckets = list(cls)
        index = min(max(int(base_hours // 1), 0), len(buckets) - 1)
        return buckets[index]


class ChangeType(Enum):
    """Kinds of commits inferred from the commit message."""
    FEATURE = "feature"
    BUGFIX = "bugfix"
    REFACTOR = "refactor"
    TEST = "test"
    DOCUMENTATION = "documentation"
    UPDATE = "update"
    OPTIMIZATION = "optimization"
    GENERAL = "general"


class ReportModel(BaseModel):
    """Base model with camelCase serialization."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class FileChange(ReportModel):
    """Line stats for one file within a commit."""

    name: str = Field(..., description="Path of the changed file")
    additions: int = Field(default=0, ge=0, description="Lines added")
    deletions: int = Field(default=0, ge=0, description="Lines deleted")

    model_config = {"frozen": True}


class CommitRecord(ReportModel):
    """
    One commit reconstructed from the log.

    Totals are derived from ``files`` so they can never drift from the
    per-file stats.
    """

    hash: str = Field(..., description="Commit hash")
    author: str = Field(default="", description="Author name")
    email: str = Field(default="", description="Author email")
    date: str = Field(default="", description="Commit date as emitted by git")
    message: str = Field(default="", description="Commit subject line")
    files: Tuple[FileChange, ...] = Field(default=(), description="Changed files in log order")

    model_config = {"frozen": True}

    @computed_field
    @property
    def additions(self) -> int:
        return sum(f.additions for f in self.files)

    @computed_field
    @property
    def deletions(self) -> int:
        return sum(f.deletions for f in self.files)

    @computed_field(alias="totalChanges")
    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions

    @property
    def files_changed(self) -> int:
        return len(self.files)


class CommitTypeRule(ReportModel):
    """One row of the ordered commit classification table."""

    change_type: ChangeType = Field(..., description="Type assigned on match")
    keywords: Tuple[str, ...] = Field(..., description="Lower-case substrings to look for")
    multiplier: float = Field(..., gt=0, description="Effort multiplier for this type")

    model_config = {"frozen": True}

    @field_validator("keywords")
    @classmethod
    def lowercase_keywords(cls, v):
        return tuple(kw.lower() for kw in v)

    def matches(self, message: str) -> bool:
        """
        Check a lower-cased message against this rule's keywords.

        A keyword must start a word but may run on, so "test" matches
        "tests" while "doc" does not match "undocked".
        """
        return any(
            re.search(r"(?<![a-z0-9])" + re.escape(kw), message) for kw in self.keywords
        )


class ChangeValue(ReportModel):
    """Explanation of how an estimate was derived."""

    size: SizeCategory
    change_type: ChangeType = Field(..., alias="type")
    multipliers: Tuple[float, float, float, float] = Field(
        ..., description="base hours, type, file count and language factors"
    )
    hours_total: float = Field(..., ge=0)

    model_config = {"frozen": True}


class EstimationResult(ReportModel):
    """Hours estimate for one commit plus its breakdown."""

    hours_total: float = Field(..., ge=0)
    change_value: ChangeValue

    model_config = {"frozen": True}


class EstimatedCommit(CommitRecord):
    """A sealed commit record annotated with its estimate."""

    estimated_hours: float = Field(..., ge=0)
    change_value: ChangeValue

    @classmethod
    def from_estimation(cls, commit: CommitRecord, result: EstimationResult) -> "EstimatedCommit":
        return cls(
            hash=commit.hash,
            author=commit.author,
            email=commit.email,
            date=commit.date,
            message=commit.message,
            files=commit.files,
            estimated_hours=result.hours_total,
            change_value=result.change_value,
        )


class DeveloperIdentity(ReportModel):
    """A distinct author name and email pair from the history."""

    name: str
    email: str = ""

    model_config = {"frozen": True}

    @property
    def author_pattern(self) -> str:
        """Identity string as git matches it for --author."""
        if self.email:
            return f"{self.name} <{self.email}>"
        return self.name


class CommitSummary(ReportModel):
    """Per-commit entry of a developer report."""

    hash: str
    date: str
    message: str
    additions: int
    deletions: int
    files_changed: int
    estimated_hours: float
    change_value: ChangeValue

    @classmethod
    def from_commit(cls, commit: EstimatedCommit) -> "CommitSummary":
        return cls(
            hash=commit.hash,
            date=commit.date,
            message=commit.message,
            additions=commit.additions,
            deletions=commit.deletions,
            files_changed=commit.files_changed,
            estimated_hours=round(commit.estimated_hours, 2),
            change_value=commit.change_value,
        )


class DeveloperReport(ReportModel):
    """Everything estimated for one developer."""

    developer: str
    email: str = ""
    total_commits: int = Field(default=0, ge=0)
    total_hours: float = Field(default=0.0, ge=0)
    total_days: float = Field(default=0.0, ge=0)
    total_weeks: float = Field(default=0.0, ge=0)
    commits: List[CommitSummary] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        developer: str,
        commits: List[EstimatedCommit],
        hours_per_day: float = 8.0,
        hours_per_week: float = 40.0,
        email: Optional[str] = None,
    ) -> "DeveloperReport":
        """Aggregate estimated commits; email defaults to the first commit's."""
        if email is None:
            email = commits[0].email if commits else ""
        total_hours = sum(c.estimated_hours for c in commits)
        return cls(
            developer=developer,
            email=email,
            total_commits=len(commits),
            total_hours=round(total_hours, 2),
            total_days=round(total_hours / hours_per_day, 2),
            total_weeks=round(total_hours / hours_per_week, 2),
            commits=[CommitSummary.from_commit(c) for c in commits],
        )


class DeveloperTotals(ReportModel):
    """One developer row of the repository summary."""

    developer: str
    email: str = ""
    commits: int = Field(default=0, ge=0)
    hours: float = Field(default=0.0, ge=0)
    filename: Optional[str] = Field(default=None, exclude=True)


class RepositorySummary(ReportModel):
    """Repository-wide totals across all developers."""

    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    total_developers: int = Field(default=0, ge=0)
    grand_total_hours: float = Field(default=0.0, ge=0)
    grand_total_days: float = Field(default=0.0, ge=0)
    grand_total_weeks: float = Field(default=0.0, ge=0)
    developers: List[DeveloperTotals] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        developers: List[DeveloperTotals],
        hours_per_day: float = 8.0,
        hours_per_week: float = 40.0,
    ) -> "RepositorySummary":
        grand_total = sum(d.hours for d in developers)
        return cls(
            total_developers=len(developers),
            grand_total_hours=round(grand_total, 2),
            grand_total_days=round(grand_total / hours_per_day, 2),
            grand_total_weeks=round(grand_total / hours_per_week, 2),
            developers=developers,
        )


# Export commonly used classes
__all__ = [
    'SizeCategory', 'ChangeType',
    'FileChange', 'CommitRecord', 'CommitTypeRule',
    'ChangeValue', 'EstimationResult', 'EstimatedCommit',
    'DeveloperIdentity', 'CommitSummary', 'DeveloperReport',
    'DeveloperTotals', 'RepositorySummary',
]
