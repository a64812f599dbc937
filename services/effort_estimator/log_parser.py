"""
Git log parser for the Effort Estimator Service.

Turns the text produced by ``git log --pretty=format:<header> --numstat``
into ordered ``CommitRecord`` objects. The grammar is deliberately lenient:
lines that are neither headers nor stat lines are skipped, and numeric stats
that cannot be read count as zero.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from config.settings import settings
from shared.models import CommitRecord, FileChange

logger = logging.getLogger(__name__)

HEADER_FIELD_COUNT = 5
STAT_FIELD_COUNT = 3
BINARY_PLACEHOLDER = "-"

_LEADING_DIGITS = re.compile(r"\d+")


class LineKind(Enum):
    """Classification of a single log line."""
    HEADER = "header"
    STAT = "stat"
    BLANK = "blank"
    UNRECOGNIZED = "unrecognized"


class ParserState(Enum):
    """Parser states."""
    AWAITING_HEADER = "awaiting_header"
    IN_COMMIT = "in_commit"


@dataclass(frozen=True)
class ClassifiedLine:
    """A log line tagged with its kind and split fields."""
    kind: LineKind
    fields: Tuple[str, ...] = ()
    raw: str = ""


def parse_count(token: str) -> int:
    """
    Read an unsigned line count.

    The binary placeholder and anything without leading digits count as 0.
    """
    token = token.strip()
    if token == BINARY_PLACEHOLDER:
        return 0
    match = _LEADING_DIGITS.match(token)
    if not match:
        return 0
    return int(match.group())


def classify_line(line: str, field_separator: str = "|", stat_separator: str = "\t") -> ClassifiedLine:
    """Tag a line as header, stat, blank or unrecognized."""
    if not line.strip():
        return ClassifiedLine(LineKind.BLANK, raw=line)

    if field_separator in line:
        parts = line.split(field_separator)
        if len(parts) >= HEADER_FIELD_COUNT:
            # The subject may contain the separator itself
            message = field_separator.join(parts[HEADER_FIELD_COUNT - 1:])
            fields = tuple(parts[:HEADER_FIELD_COUNT - 1]) + (message,)
            return ClassifiedLine(LineKind.HEADER, fields, line)

    parts = line.split(stat_separator)
    if len(parts) >= STAT_FIELD_COUNT:
        return ClassifiedLine(LineKind.STAT, tuple(parts[:STAT_FIELD_COUNT]), line)

    return ClassifiedLine(LineKind.UNRECOGNIZED, raw=line)


@dataclass
class CommitBuilder:
    """Accumulates the commit currently open in the log."""
    hash: str
    author: str
    email: str
    date: str
    message: str
    files: List[FileChange] = field(default_factory=list)

    @classmethod
    def from_header(cls, fields: Tuple[str, ...]) -> "CommitBuilder":
        commit_hash, author, email, date, message = fields
        return cls(hash=commit_hash, author=author, email=email, date=date, message=message)

    def add_stat(self, fields: Tuple[str, ...]) -> None:
        additions, deletions, filename = fields
        self.files.append(
            FileChange(
                name=filename,
                additions=parse_count(additions),
                deletions=parse_count(deletions),
            )
        )

    def seal(self) -> CommitRecord:
        return CommitRecord(
            hash=self.hash,
            author=self.author,
            email=self.email,
            date=self.date,
            message=self.message,
            files=tuple(self.files),
        )


class CommitLogParser:
    """Parser for ``git log --numstat`` output with a custom header format."""

    def __init__(self, field_separator: str = "|", stat_separator: str = "\t"):
        self.field_separator = field_separator
        self.stat_separator = stat_separator

    @classmethod
    def from_settings(cls, git_settings=None) -> "CommitLogParser":
        git_settings = git_settings or settings.git
        return cls(git_settings.field_separator, git_settings.stat_separator)

    def classify(self, line: str) -> ClassifiedLine:
        return classify_line(line, self.field_separator, self.stat_separator)

    def parse(self, raw_text: str) -> List[CommitRecord]:
        """Parse raw log text into commit records, in log order."""
        commits: List[CommitRecord] = []
        state = ParserState.AWAITING_HEADER
        current: Optional[CommitBuilder] = None
        skipped = 0

        for line in raw_text.split("\n"):
            classified = self.classify(line.rstrip("\r"))

            if classified.kind is LineKind.HEADER:
                if state is ParserState.IN_COMMIT:
                    commits.append(current.seal())
                current = CommitBuilder.from_header(classified.fields)
                state = ParserState.IN_COMMIT
            elif classified.kind is LineKind.STAT and state is ParserState.IN_COMMIT:
                current.add_stat(classified.fields)
            elif classified.kind is LineKind.BLANK:
                continue
            else:
                skipped += 1
                logger.debug(f"Skipping unattributed log line: {classified.raw!r}")

        if state is ParserState.IN_COMMIT:
            commits.append(current.seal())

        if skipped:
            logger.debug(f"Skipped {skipped} unrecognized lines")
        logger.debug(f"Parsed {len(commits)} commits")
        return commits


def parse_commits(raw_text: str, field_separator: str = "|", stat_separator: str = "\t") -> List[CommitRecord]:
    """Parse raw log text with the given separators."""
    return CommitLogParser(field_separator, stat_separator).parse(raw_text)
