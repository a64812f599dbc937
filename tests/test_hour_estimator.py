"""
Unit tests for the hour estimator.

This module covers:
- Logarithmic base hours and size categories
- Ordered commit type classification
- File count and language multipliers
- Capping, quantization and the minimum estimate
"""

import math

import pytest

from config.settings import EstimationSettings
from shared.models import ChangeType, CommitRecord, CommitTypeRule, FileChange, SizeCategory
from services.effort_estimator.hour_estimator import HourEstimator, estimate_hours
from services.effort_estimator.log_parser import CommitLogParser


def make_commit(message="general work", files=None, commit_hash="abc123"):
    """Build a commit record from (name, additions, deletions) tuples."""
    files = files or []
    return CommitRecord(
        hash=commit_hash,
        author="Bob",
        email="b@x.com",
        date="2024-01-01",
        message=message,
        files=tuple(FileChange(name=n, additions=a, deletions=d) for n, a, d in files),
    )


@pytest.fixture
def estimator():
    """Create an estimator with default settings."""
    return HourEstimator(EstimationSettings())


class TestBaseHours:
    """Test cases for base hours and size categories."""

    def test_zero_changes(self, estimator):
        """Test empty commits get the flat base."""
        base_hours, size = estimator.calculate_base_hours(0)

        assert base_hours == 0.1
        assert size is SizeCategory.TRIVIAL

    @pytest.mark.parametrize("changes", [1, 10, 18, 100, 1000])
    def test_logarithmic_scale(self, estimator, changes):
        """Test base hours follow 0.5 * log10(n + 1) + 0.2."""
        base_hours, _ = estimator.calculate_base_hours(changes)

        assert base_hours == pytest.approx(0.5 * math.log10(changes + 1) + 0.2)

    @pytest.mark.parametrize("changes,expected", [
        (10, SizeCategory.TRIVIAL),
        (100, SizeCategory.SIMPLE),
        (10 ** 4, SizeCategory.MEDIUM),
        (10 ** 6, SizeCategory.LARGE),
        (10 ** 8, SizeCategory.VERY_LARGE),
        (10 ** 10, SizeCategory.MASSIVE),
        (10 ** 20, SizeCategory.MASSIVE),
    ])
    def test_size_categories(self, estimator, changes, expected):
        """Test size category is floor(base hours), clamped."""
        _, size = estimator.calculate_base_hours(changes)

        assert size is expected


class TestCommitType:
    """Test cases for message classification."""

    @pytest.mark.parametrize("message,expected_type,expected_multiplier", [
        ("feat: new login page", ChangeType.FEATURE, 1.3),
        ("Fix crash on startup", ChangeType.BUGFIX, 1.2),
        ("refactor cleanup", ChangeType.REFACTOR, 1.4),
        ("more unit tests", ChangeType.TEST, 1.1),
        ("Docs for the API", ChangeType.DOCUMENTATION, 0.8),
        ("bump dependencies", ChangeType.UPDATE, 0.9),
        ("improve query performance", ChangeType.OPTIMIZATION, 1.3),
        ("wip", ChangeType.GENERAL, 1.0),
        ("update address validation", ChangeType.UPDATE, 0.9),
        ("docs: add readme", ChangeType.DOCUMENTATION, 0.8),
        ("Dockerfile tweak", ChangeType.GENERAL, 1.0),
        ("Added export button", ChangeType.FEATURE, 1.3),
    ])
    def test_classification(self, estimator, message, expected_type, expected_multiplier):
        """Test each keyword group maps to its type and multiplier."""
        multiplier, change_type = estimator.determine_commit_type(message)

        assert change_type is expected_type
        assert multiplier == expected_multiplier

    def test_feature_wins_over_fix(self, estimator):
        """Test the first matching group in table order wins."""
        multiplier, change_type = estimator.determine_commit_type("feat: fix login redirect")

        assert change_type is ChangeType.FEATURE
        assert multiplier == 1.3

    def test_fix_wins_over_test(self, estimator):
        """Test bugfix is checked before test."""
        _, change_type = estimator.determine_commit_type("fix flaky test")

        assert change_type is ChangeType.BUGFIX

    def test_custom_rule_table(self):
        """Test a reordered table changes the priority."""
        rules = [
            CommitTypeRule(change_type=ChangeType.BUGFIX, keywords=("fix",), multiplier=2.0),
            CommitTypeRule(change_type=ChangeType.FEATURE, keywords=("feat",), multiplier=3.0),
        ]
        estimator = HourEstimator(EstimationSettings(commit_type_rules=rules))

        multiplier, change_type = estimator.determine_commit_type("feat: fix login redirect")

        assert change_type is ChangeType.BUGFIX
        assert multiplier == 2.0


class TestFileMultiplier:
    """Test cases for the file count bands."""

    @pytest.mark.parametrize("num_files,expected", [
        (0, 1.0),
        (2, 1.0),
        (3, 1.1),
        (5, 1.1),
        (6, 1.2),
        (10, 1.2),
        (11, 1.3),
        (50, 1.3),
    ])
    def test_bands(self, estimator, num_files, expected):
        """Test thresholds are strict more-than checks."""
        assert estimator.calculate_file_multiplier(num_files) == expected


class TestLanguageMultiplier:
    """Test cases for the coding file check."""

    def test_coding_file(self, estimator):
        """Test a source file applies the multiplier."""
        files = [FileChange(name="README.md"), FileChange(name="src/a.js")]

        assert estimator.calculate_language_multiplier(files) == 1.1

    def test_case_insensitive(self, estimator):
        """Test extension matching ignores case."""
        assert estimator.calculate_language_multiplier([FileChange(name="Main.PY")]) == 1.1

    def test_non_coding_files(self, estimator):
        """Test docs and assets do not apply the multiplier."""
        files = [FileChange(name="README.md"), FileChange(name="assets/logo.png")]

        assert estimator.calculate_language_multiplier(files) == 1.0

    def test_no_files(self, estimator):
        """Test empty commits do not apply the multiplier."""
        assert estimator.calculate_language_multiplier([]) == 1.0


class TestEstimate:
    """Test cases for the full estimate."""

    def test_end_to_end_example(self, estimator):
        """Test the documented refactor example lands on 1.25 hours."""
        raw = "\n".join([
            "h1|Bob|b@x.com|2024-01-01|refactor cleanup",
            "10\t5\tsrc/a.js",
            "2\t1\tREADME.md",
        ])
        commit = CommitLogParser().parse(raw)[0]

        result = estimator.estimate(commit)

        assert commit.total_changes == 18
        base, type_mult, file_mult, lang_mult = result.change_value.multipliers
        assert base == pytest.approx(0.5 * math.log10(19) + 0.2)
        assert type_mult == 1.4
        assert file_mult == 1.0
        assert lang_mult == 1.1
        assert result.hours_total == 1.25
        assert result.change_value.hours_total == 1.25
        assert result.change_value.change_type is ChangeType.REFACTOR
        assert result.change_value.size is SizeCategory.TRIVIAL

    def test_deterministic(self, estimator):
        """Test identical input gives identical output."""
        commit = make_commit("feat: search", [("src/search.py", 120, 30), ("docs/search.md", 10, 0)])

        assert estimator.estimate(commit) == estimator.estimate(commit)

    def test_cap(self, estimator):
        """Test huge commits are capped at 16 hours."""
        files = [(f"src/module_{i}.py", 10 ** 16 // 20, 0) for i in range(20)]
        commit = make_commit("refactor everything", files)

        result = estimator.estimate(commit)

        assert result.hours_total == 16.0
        assert result.change_value.size is SizeCategory.MASSIVE

    def test_empty_commit_gets_minimum(self, estimator):
        """Test an empty commit still gets a positive estimate."""
        result = estimator.estimate(make_commit("wip"))

        assert result.hours_total == 0.25
        assert result.change_value.multipliers == (0.1, 1.0, 1.0, 1.0)

    @pytest.mark.parametrize("message,files", [
        ("wip", []),
        ("docs", [("README.md", 1, 0)]),
        ("feat: api", [("src/api.py", 40, 10)]),
        ("fix: many", [(f"f{i}.go", 30, 30) for i in range(12)]),
        ("perf: tune", [("core.rs", 5000, 4000)]),
    ])
    def test_hours_in_range_and_quantized(self, estimator, message, files):
        """Test every estimate is positive, capped and a multiple of 0.25."""
        hours = estimator.estimate(make_commit(message, files)).hours_total

        assert 0 < hours <= 16.0
        assert (hours * 4) == int(hours * 4)

    def test_half_quantum_rounds_up(self, estimator):
        """Test quantization rounds halves up."""
        assert estimator.finalize_hours(1.125) == 1.25
        assert estimator.finalize_hours(1.124) == 1.0

    def test_custom_cap(self):
        """Test the cap comes from settings."""
        estimator = HourEstimator(EstimationSettings(max_hours_per_commit=1.0))
        commit = make_commit("feat: big", [("src/a.py", 5000, 5000)])

        assert estimator.estimate(commit).hours_total == 1.0

    def test_estimate_hours_function(self, estimator):
        """Test the module-level convenience function."""
        commit = make_commit("refactor", [("src/a.py", 10, 0)])

        assert estimate_hours(commit, estimator) == estimator.estimate(commit)
