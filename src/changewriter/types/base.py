"""Base commit types used across the changewriter system."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

BREAKING_NOTE_TITLES = ("BREAKING CHANGE", "BREAKING CHANGES")


@dataclass(frozen=True)
class CommitNote:
    """A footer note attached to a commit, e.g. a breaking change description."""

    title: str
    text: str


@dataclass(frozen=True)
class CommitReference:
    """An issue or pull request referenced from a commit message."""

    issue: str
    action: Optional[str] = None  # 'closes', 'fixes', ...
    owner: Optional[str] = None
    repository: Optional[str] = None
    prefix: str = "#"


@dataclass(frozen=True)
class ConventionalCommit:
    """A commit that has already been parsed into conventional commit fields."""

    type: Optional[str]
    subject: Optional[str]
    header: str = ""
    scope: Optional[str] = None
    body: Optional[str] = None
    footer: Optional[str] = None
    hash: Optional[str] = None
    notes: List[CommitNote] = field(default_factory=list)
    references: List[CommitReference] = field(default_factory=list)

    @property
    def packages(self) -> List[str]:
        """Package names this commit is associated with, taken from its scope."""
        if not self.scope:
            return []
        return [s.strip() for s in self.scope.split(",") if s.strip()]

    @property
    def breaking(self) -> bool:
        return any(note.title in BREAKING_NOTE_TITLES for note in self.notes)


def _matches(package_name: str, scopes: List[str]) -> bool:
    # '@aws-cdk/aws-s3' is referred to as 'aws-s3' in commit scopes
    short_name = package_name.split("/", 1)[1] if package_name.startswith("@") and "/" in package_name else package_name
    return any(scope in (package_name, short_name) for scope in scopes)


def filter_commits(
    commits: Iterable[ConventionalCommit],
    exclude_packages: Optional[List[str]] = None,
    include_packages: Optional[List[str]] = None,
) -> List[ConventionalCommit]:
    """Filter commits by the packages they are associated with.

    ``include_packages`` keeps only commits touching at least one of the given packages.
    ``exclude_packages`` drops commits whose packages are all excluded; commits
    without any package association are always kept by this filter.
    """
    filtered = []
    for commit in commits:
        scopes = commit.packages

        if include_packages is not None and not any(_matches(p, scopes) for p in include_packages):
            continue

        if exclude_packages and scopes:
            if all(any(_matches(p, [scope]) for p in exclude_packages) for scope in scopes):
                continue

        filtered.append(commit)

    return filtered
