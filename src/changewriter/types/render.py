"""Types for rendering commits into changelog text."""

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, Iterator, List, Optional, Protocol

from .base import ConventionalCommit

TemplateContext = Dict[str, Any]


@dataclass
class RenderContext:
    """Context handed to the writer for a single render call."""

    version: str
    previous_tag: str
    current_tag: str
    host: str = "https://github.com"
    owner: str = "aws"
    repository: str = "aws-cdk"
    issue: str = "issues"
    commit: str = "commit"
    link_compare: bool = True
    # renders an H3 header instead of an H2 when set
    is_patch: bool = False
    date: Optional[str] = None

    @property
    def repo_url(self) -> str:
        return f"{self.host}/{self.owner}/{self.repository}"

    @property
    def compare_url(self) -> str:
        return f"{self.repo_url}/compare/{self.previous_tag}...{self.current_tag}"

    def as_dict(self) -> TemplateContext:
        return {
            "version": self.version,
            "previousTag": self.previous_tag,
            "currentTag": self.current_tag,
            "host": self.host,
            "owner": self.owner,
            "repository": self.repository,
            "repoUrl": self.repo_url,
            "compareUrl": self.compare_url,
            "issue": self.issue,
            "commit": self.commit,
            "linkCompare": self.link_compare,
            "isPatch": self.is_patch,
            "date": self.date,
        }


@dataclass
class NoteGroup:
    """Notes sharing a title, e.g. all breaking changes of a release."""

    title: str
    notes: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class CommitGroup:
    """Commits rendered under one section heading."""

    title: Optional[str]
    commits: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class WriterOptions:
    """Options controlling how the writer groups, sorts and renders commits."""

    main_template: str
    partials: Dict[str, str] = field(default_factory=dict)
    transform: Optional[Callable[[ConventionalCommit, RenderContext], Optional[Dict[str, Any]]]] = None
    group_by: str = "type"
    commit_group_sort: Optional[Callable[[CommitGroup], Any]] = None
    commits_sort: Optional[Callable[[Dict[str, Any]], Any]] = None
    note_groups_sort: Optional[Callable[[NoteGroup], Any]] = None
    finalize_context: Optional[Callable[[TemplateContext], TemplateContext]] = None


@dataclass
class Preset:
    """A named bundle of writer defaults."""

    name: str
    writer_opts: WriterOptions


class Renderer(Protocol):
    """Turns an ordered, single-pass sequence of commits into text chunks."""

    def render(
        self,
        commits: Iterator[ConventionalCommit],
        context: RenderContext,
        writer_options: WriterOptions,
    ) -> AsyncIterator[str]: ...
