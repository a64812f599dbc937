"""
Git repository access for the commit effort estimator.

Wraps GitPython to validate a repository path, list the distinct author
identities and fetch the per-author ``--numstat`` log consumed by the parser.
"""

import logging
from pathlib import Path
from typing import List, Optional, Set, Tuple

from git import Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from config.settings import settings
from shared.models import DeveloperIdentity

logger = logging.getLogger(__name__)

# git renders %x00 as a NUL byte, which cannot occur in names or emails
IDENTITY_SEPARATOR = "\x00"


class RepositoryError(Exception):
    """Raised when the repository cannot be opened or read."""


class GitRepository:
    """Read-only view of a local git repository's history."""

    def __init__(self, repo_path: str, git_settings=None):
        self.repo_path = Path(repo_path).resolve()
        self.git_settings = git_settings or settings.git
        self._repo: Optional[Repo] = None

    @property
    def path(self) -> str:
        return str(self.repo_path)

    @property
    def repo(self) -> Repo:
        if self._repo is None:
            self.validate_repo()
        return self._repo

    def validate_repo(self) -> None:
        """
        Validate that the path exists and is a git repository.

        Raises:
            RepositoryError: If the path is missing or not a repository
        """
        if not self.repo_path.exists():
            raise RepositoryError(f"Repository path does not exist: {self.repo_path}")

        try:
            self._repo = Repo(self.repo_path)
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise RepositoryError(f"Not a git repository: {self.repo_path}")

        logger.info(f"Opened repository at {self.repo_path}")

    def _history_args(self) -> List[str]:
        args = []
        if self.git_settings.all_refs:
            args.append("--all")
        if self.git_settings.exclude_merges:
            args.append("--no-merges")
        return args

    def _log(self, *args: str) -> str:
        try:
            return self.repo.git.log(*args)
        except GitCommandError as e:
            logger.error(f"Git command error: {e}")
            raise RepositoryError(f"git log failed in {self.repo_path}: {e.stderr or e}") from e

    def _identity_log(self, *args: str) -> List[Tuple[str, str, str]]:
        """(hash, name, email) rows, NUL-separated so no field can shift."""
        output = self._log(*args, "--pretty=format:%H%x00%an%x00%ae")

        rows = []
        for line in output.split("\n"):
            parts = line.split(IDENTITY_SEPARATOR)
            if len(parts) == 3:
                rows.append((parts[0].strip(), parts[1].strip(), parts[2].strip()))
        return rows

    def get_all_authors_with_emails(self) -> List[DeveloperIdentity]:
        """Distinct (name, email) pairs across the history, sorted."""
        identities = {
            DeveloperIdentity(name=name, email=email)
            for _, name, email in self._identity_log(*self._history_args())
        }

        developers = sorted(identities, key=lambda d: (d.name, d.email))
        logger.info(f"Found {len(developers)} developers")
        return developers

    def get_commit_hashes_for_author(self, developer: DeveloperIdentity) -> Set[str]:
        """
        Hashes of the commits authored by exactly this identity.

        ``--author`` matches substrings, so "Ann <a@x.com>" also selects
        "Jo Ann <a@x.com>"; the rows are compared field by field here.
        """
        rows = self._identity_log(
            *self._history_args(),
            "--fixed-strings",
            f"--author={developer.author_pattern}",
        )
        return {
            commit_hash for commit_hash, name, email in rows
            if name == developer.name and email == developer.email
        }

    def get_commits_for_author(self, developer: DeveloperIdentity) -> str:
        """Raw ``--numstat`` log for one author identity."""
        return self._log(
            *self._history_args(),
            "--fixed-strings",
            f"--author={developer.author_pattern}",
            f"--pretty=format:{self.git_settings.header_format}",
            f"--date={self.git_settings.date_format}",
            "--numstat",
        )
