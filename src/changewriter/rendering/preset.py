"""Changelog presets: commit type sections and templates used by the writer."""

import re
from dataclasses import asdict, dataclass
from textwrap import dedent
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from changewriter.exceptions import PresetNotFoundError
from changewriter.types.base import ConventionalCommit
from changewriter.types.render import Preset, RenderContext, WriterOptions

CONVENTIONAL_COMMITS_PRESET = "conventional-changelog-conventionalcommits"


@dataclass(frozen=True)
class TypeSection:
    """How commits of a given type show up in the changelog."""

    section: str
    hidden: bool = False


DEFAULT_TYPES: Dict[str, TypeSection] = {
    "feat": TypeSection("Features"),
    "feature": TypeSection("Features"),
    "fix": TypeSection("Bug Fixes"),
    "perf": TypeSection("Performance Improvements"),
    "revert": TypeSection("Reverts"),
    "reverts": TypeSection("Reverts"),
    "docs": TypeSection("Documentation", hidden=True),
    "style": TypeSection("Styles", hidden=True),
    "chore": TypeSection("Miscellaneous Chores", hidden=True),
    "refactor": TypeSection("Code Refactoring", hidden=True),
    "test": TypeSection("Tests", hidden=True),
    "build": TypeSection("Build System", hidden=True),
    "ci": TypeSection("Continuous Integration", hidden=True),
}

HEADER_TEMPLATE = (
    '{{ "###" if isPatch else "##" }} '
    '{{ "[" ~ version ~ "](" ~ compareUrl ~ ")" if linkCompare else version }}'
    "{{ ' \"' ~ title ~ '\"' if title else '' }}"
    '{{ " (" ~ date ~ ")" if date else "" }}\n'
)

COMMIT_TEMPLATE = dedent(
    """\
    {% macro render_commit(entry) -%}
    *{% if entry.scope %} **{{ entry.scope }}:**{% endif %} {{ entry.subject or entry.header }}
    {%- if entry.hash %} ([{{ entry.shortHash }}]({{ repoUrl }}/{{ commit }}/{{ entry.hash }})){% endif %}
    {%- for ref in entry.references %}, {{ ref.action ~ " " if ref.action else "" }}[{{ ref.prefix }}{{ ref.issue }}]({{ host }}/{{ ref.owner or owner }}/{{ ref.repository or repository }}/{{ issue }}/{{ ref.issue }}){% endfor %}
    {%- endmacro %}
    """
)

MAIN_TEMPLATE = dedent(
    """\
    {% from "commit" import render_commit with context %}
    {% include "header" %}

    {% for noteGroup in noteGroups %}

    ### ⚠ {{ noteGroup.title }}

    {% for note in noteGroup.notes %}
    * {% if note.commit.scope %}**{{ note.commit.scope }}:** {% endif %}{{ note.text }}
    {% endfor %}
    {% endfor %}
    {% for commitGroup in commitGroups %}

    {% if commitGroup.title %}
    ### {{ commitGroup.title }}

    {% endif %}
    {% for entry in commitGroup.commits %}
    {{ render_commit(entry) }}
    {% endfor %}
    {% endfor %}


    """
)


ISSUE_PATTERN = re.compile(r"#([0-9]+)")
USER_PATTERN = re.compile(r"\B@([a-z0-9](?:-?[a-z0-9/]){0,38})")


def link_subject(subject: str, context: RenderContext) -> Tuple[str, List[str]]:
    """Turn ``#123`` and ``@user`` mentions into markdown links.

    Returns the linked subject and the issue numbers it mentions.
    """
    issues = []

    def issue_link(match: "re.Match[str]") -> str:
        issues.append(match.group(1))
        return f"[#{match.group(1)}]({context.repo_url}/{context.issue}/{match.group(1)})"

    def user_link(match: "re.Match[str]") -> str:
        user = match.group(1)
        # team mentions (@org/team) have no profile page
        if "/" in user:
            return match.group(0)
        return f"[@{user}]({context.host}/{user})"

    subject = ISSUE_PATTERN.sub(issue_link, subject)
    subject = USER_PATTERN.sub(user_link, subject)
    return subject, issues


def _conventional_transform(commit: ConventionalCommit, context: RenderContext) -> Optional[Dict[str, Any]]:
    """Map a commit onto its changelog entry, or None when it should be left out."""
    discard = True
    notes = []
    for note in commit.notes:
        notes.append({"title": "BREAKING CHANGES", "text": note.text})
        discard = False

    section = DEFAULT_TYPES.get(commit.type or "")
    if section and (not section.hidden or not discard):
        title = section.section
    elif discard:
        return None
    else:
        title = commit.type

    subject, issues = link_subject(commit.subject, context) if commit.subject else (commit.subject, [])

    return {
        "type": title,
        "scope": "" if commit.scope == "*" else commit.scope,
        "subject": subject,
        "header": commit.header,
        "body": commit.body,
        "hash": commit.hash,
        "shortHash": commit.hash[:7] if commit.hash else None,
        "notes": notes,
        # references already linked from the subject are not repeated
        "references": [asdict(ref) for ref in commit.references if ref.issue not in issues],
    }


def _conventional_commits() -> WriterOptions:
    return WriterOptions(
        main_template=MAIN_TEMPLATE,
        partials={"header": HEADER_TEMPLATE, "commit": COMMIT_TEMPLATE},
        transform=_conventional_transform,
        group_by="type",
        commit_group_sort=lambda group: group.title or "",
        commits_sort=lambda entry: (entry.get("scope") or "", entry.get("subject") or ""),
        note_groups_sort=lambda group: group.title,
    )


PRESETS: Dict[str, Callable[[], WriterOptions]] = {
    CONVENTIONAL_COMMITS_PRESET: _conventional_commits,
}


def load_preset(name: str) -> Preset:
    """Load a preset by name. A fresh WriterOptions is built on every call."""
    if name not in PRESETS:
        raise PresetNotFoundError(name)
    logger.debug(f"Loading changelog preset {name}")
    return Preset(name=name, writer_opts=PRESETS[name]())
