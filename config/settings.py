"""
Configuration management for the commit effort estimator.

This module provides centralized configuration management with:
- Git log format and separator settings
- Tunable estimation heuristics (keyword table, bands, extensions)
- Report output settings
- Logging settings
"""

from typing import List, Dict, Any, Tuple
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import BaseSettings as PydanticBaseSettings

from shared.models import ChangeType, CommitTypeRule


DEFAULT_COMMIT_TYPE_RULES: List[CommitTypeRule] = [
    CommitTypeRule(
        change_type=ChangeType.FEATURE,
        keywords=("feat", "implement", "introduce", "added", "adds", "new feature"),
        multiplier=1.3,
    ),
    CommitTypeRule(
        change_type=ChangeType.BUGFIX,
        keywords=("fix", "bug", "patch", "resolve", "hotfix", "issue"),
        multiplier=1.2,
    ),
    CommitTypeRule(
        change_type=ChangeType.REFACTOR,
        keywords=("refactor", "restructure", "cleanup", "clean up", "reorganize", "simplify"),
        multiplier=1.4,
    ),
    CommitTypeRule(
        change_type=ChangeType.TEST,
        keywords=("test", "spec", "coverage"),
        multiplier=1.1,
    ),
    CommitTypeRule(
        change_type=ChangeType.DOCUMENTATION,
        keywords=("docs", "document", "readme", "comment", "changelog"),
        multiplier=0.8,
    ),
    CommitTypeRule(
        change_type=ChangeType.UPDATE,
        keywords=("update", "bump", "upgrade", "chore", "deps"),
        multiplier=0.9,
    ),
    CommitTypeRule(
        change_type=ChangeType.OPTIMIZATION,
        keywords=("perf", "optimiz", "performance", "speed up", "faster"),
        multiplier=1.3,
    ),
]

DEFAULT_CODING_EXTENSIONS: List[str] = [
    ".py", ".js", ".ts", ".jsx", ".tsx", ".java", ".kt", ".scala", ".go", ".rs",
    ".rb", ".php", ".c", ".cpp", ".h", ".hpp", ".cs", ".swift", ".vue",
    ".svelte", ".sql", ".sh", ".lua", ".dart",
]


class GitSettings(BaseSettings):
    """Git log invocation and output format settings."""

    field_separator: str = Field(default="|", description="Separator between header fields")
    stat_separator: str = Field(default="\t", description="Separator between numstat fields")
    date_format: str = Field(default="iso", description="Value passed to git log --date")
    exclude_merges: bool = Field(default=True, description="Skip merge commits")
    all_refs: bool = Field(default=True, description="Read history from all refs")

    @field_validator("field_separator", "stat_separator")
    @classmethod
    def validate_separator(cls, v):
        if not v:
            raise ValueError("Separator cannot be empty")
        return v

    @field_validator("stat_separator")
    @classmethod
    def validate_distinct_separators(cls, v, info):
        if info.data.get("field_separator") == v:
            raise ValueError("Header and stat separators must differ")
        return v

    @property
    def header_format(self) -> str:
        """Pretty format producing hash, author, email, date and subject."""
        return self.field_separator.join(["%H", "%an", "%ae", "%ad", "%s"])


class EstimationSettings(BaseSettings):
    """Tunable parameters of the effort heuristic."""

    max_hours_per_commit: float = Field(default=16.0, description="Cap for a single commit")
    rounding_increment: float = Field(default=0.25, description="Estimates snap to this step")
    min_hours_per_commit: float = Field(default=0.25, description="Floor for a single commit")
    empty_commit_hours: float = Field(default=0.1, description="Base hours for zero-line commits")
    log_scale_factor: float = Field(default=0.5, description="Weight of log10(changes + 1)")
    log_base_offset: float = Field(default=0.2, description="Constant added to the log term")
    commit_type_rules: List[CommitTypeRule] = Field(
        default_factory=lambda: list(DEFAULT_COMMIT_TYPE_RULES),
        description="Ordered keyword table, first match wins",
    )
    file_count_bands: List[Tuple[int, float]] = Field(
        default=[(10, 1.3), (5, 1.2), (2, 1.1)],
        description="(more-than threshold, multiplier) pairs",
    )
    coding_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CODING_EXTENSIONS),
        description="Substrings marking a file as source code",
    )
    coding_multiplier: float = Field(default=1.1, description="Multiplier when code is touched")
    hours_per_day: float = Field(default=8.0, description="Hours in one work day")
    hours_per_week: float = Field(default=40.0, description="Hours in one work week")

    @field_validator("max_hours_per_commit", "rounding_increment", "hours_per_day", "hours_per_week")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("min_hours_per_commit")
    @classmethod
    def validate_min_hours(cls, v):
        if v < 0:
            raise ValueError("Minimum hours cannot be negative")
        return v

    @field_validator("file_count_bands")
    @classmethod
    def validate_file_count_bands(cls, v):
        thresholds = [threshold for threshold, _ in v]
        if thresholds != sorted(thresholds, reverse=True):
            raise ValueError("File count bands must be ordered from highest threshold down")
        return v

    @field_validator("coding_extensions")
    @classmethod
    def normalize_extensions(cls, v):
        return [ext.lower() for ext in v if ext]


class OutputSettings(BaseSettings):
    """Report output settings."""

    output_dir: str = Field(default="./estimation", description="Directory for JSON reports")
    summary_filename: str = Field(default="_summary.json", description="Repository summary file")
    json_indent: int = Field(default=2, description="JSON indentation")


class MonitoringSettings(BaseSettings):
    """Logging configuration settings."""

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format string",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()


class Settings(PydanticBaseSettings):
    """
    Main application settings.

    Values come from the environment or a ``.env`` file, nested groups use
    ``__`` as delimiter, e.g. ``ESTIMATION__MAX_HOURS_PER_COMMIT=12``.
    """

    app_name: str = Field(default="Commit Effort Estimator", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")

    git: GitSettings = Field(default_factory=GitSettings)
    estimation: EstimationSettings = Field(default_factory=EstimationSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "extra": "ignore"
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration object

    Example:
        >>> settings = get_settings()
        >>> print(settings.estimation.max_hours_per_commit)
    """
    return Settings()


# Global settings instance
settings = get_settings()


def validate_configuration() -> Dict[str, Any]:
    """
    Validate configuration consistency and return validation results.

    Returns:
        Dict[str, Any]: Validation results with status, errors and warnings
    """
    errors = []
    warnings = []
    estimation = settings.estimation

    if estimation.min_hours_per_commit > estimation.max_hours_per_commit:
        errors.append("Minimum hours per commit exceeds the maximum")

    if estimation.hours_per_week < estimation.hours_per_day:
        errors.append("Hours per week is smaller than hours per day")

    seen_types = set()
    for rule in estimation.commit_type_rules:
        if rule.change_type in seen_types:
            warnings.append(f"Commit type {rule.change_type.value} appears more than once")
        seen_types.add(rule.change_type)
        if not rule.keywords:
            warnings.append(f"Commit type {rule.change_type.value} has no keywords")

    if not estimation.coding_extensions:
        warnings.append("No coding extensions configured; language multiplier never applies")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


def export_config() -> Dict[str, Any]:
    """
    Export configuration for reports and debugging.

    Returns:
        Dict[str, Any]: Plain configuration snapshot
    """
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "git": {
            "header_format": settings.git.header_format,
            "date_format": settings.git.date_format,
            "exclude_merges": settings.git.exclude_merges,
            "all_refs": settings.git.all_refs,
        },
        "estimation": {
            "max_hours_per_commit": settings.estimation.max_hours_per_commit,
            "rounding_increment": settings.estimation.rounding_increment,
            "min_hours_per_commit": settings.estimation.min_hours_per_commit,
            "commit_types": [
                rule.change_type.value for rule in settings.estimation.commit_type_rules
            ],
            "file_count_bands": settings.estimation.file_count_bands,
            "hours_per_day": settings.estimation.hours_per_day,
            "hours_per_week": settings.estimation.hours_per_week,
        },
        "output": {
            "output_dir": settings.output.output_dir,
            "summary_filename": settings.output.summary_filename,
        },
        "monitoring": {
            "log_level": settings.monitoring.log_level,
        },
    }


if __name__ == "__main__":
    """Configuration validation script."""
    import json

    validation = validate_configuration()
    config_export = export_config()

    print("Configuration Validation:")
    print(json.dumps(validation, indent=2))

    print("\nConfiguration Export:")
    print(json.dumps(config_export, indent=2))

    if not validation["valid"]:
        exit(1)
