"""Jinja2 based changelog writer.

The writer consumes commits one at a time, groups the resulting entries into
commit groups and note groups, lets the caller adjust the final template
context through ``finalize_context`` and then streams the rendered template
back as text chunks.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Dict, Iterable, List, Optional

from jinja2 import DictLoader, Environment, TemplateError
from loguru import logger

from changewriter.exceptions import RenderError
from changewriter.types.base import ConventionalCommit
from changewriter.types.render import CommitGroup, NoteGroup, RenderContext, TemplateContext, WriterOptions


def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def _default_transform(commit: ConventionalCommit, context: RenderContext) -> Dict[str, Any]:
    return {
        "type": commit.type,
        "scope": commit.scope,
        "subject": commit.subject,
        "header": commit.header,
        "hash": commit.hash,
        "shortHash": commit.hash[:7] if commit.hash else None,
        "notes": [{"title": n.title, "text": n.text} for n in commit.notes],
        "references": [],
    }


def group_entries(entries: List[Dict[str, Any]], writer_options: WriterOptions) -> List[CommitGroup]:
    """Group transformed entries by ``writer_options.group_by`` and apply the configured sorts."""
    groups: Dict[Optional[str], CommitGroup] = {}
    for entry in entries:
        key = entry.get(writer_options.group_by)
        groups.setdefault(key, CommitGroup(title=key)).commits.append(entry)

    commit_groups = list(groups.values())
    if writer_options.commits_sort:
        for group in commit_groups:
            group.commits.sort(key=writer_options.commits_sort)
    if writer_options.commit_group_sort:
        commit_groups.sort(key=writer_options.commit_group_sort)
    return commit_groups


def collect_note_groups(entries: List[Dict[str, Any]], writer_options: WriterOptions) -> List[NoteGroup]:
    """Collect the notes of all entries into groups keyed by note title."""
    groups: Dict[str, NoteGroup] = {}
    for entry in entries:
        for note in entry.get("notes", []):
            groups.setdefault(note["title"], NoteGroup(title=note["title"])).notes.append({**note, "commit": entry})

    note_groups = list(groups.values())
    if writer_options.note_groups_sort:
        note_groups.sort(key=writer_options.note_groups_sort)
    return note_groups


class ConventionalChangelogWriter:
    """Default renderer backed by Jinja2 templates."""

    def __init__(self, today: Callable[[], str] = _today):
        self.today = today

    def _environment(self, writer_options: WriterOptions) -> Environment:
        templates = {"template": writer_options.main_template, **writer_options.partials}
        return Environment(
            loader=DictLoader(templates),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def build_context(
        self, entries: List[Dict[str, Any]], context: RenderContext, writer_options: WriterOptions
    ) -> TemplateContext:
        template_context = context.as_dict()
        if template_context["date"] is None:
            template_context["date"] = self.today()
        template_context["commitGroups"] = group_entries(entries, writer_options)
        template_context["noteGroups"] = collect_note_groups(entries, writer_options)

        if writer_options.finalize_context:
            template_context = writer_options.finalize_context(template_context)
        return template_context

    async def render(
        self,
        commits: Iterable[ConventionalCommit],
        context: RenderContext,
        writer_options: WriterOptions,
    ) -> AsyncIterator[str]:
        transform = writer_options.transform or _default_transform

        entries = []
        for commit in commits:
            try:
                entry = transform(commit, context)
            except Exception as e:
                raise RenderError(f"failed to transform commit {commit.hash or commit.header!r}: {e}") from e
            if entry is not None:
                entries.append(entry)
            # let other renders make progress between commits
            await asyncio.sleep(0)

        logger.debug(f"Rendering {len(entries)} changelog entries for {context.version}")
        template_context = self.build_context(entries, context, writer_options)

        try:
            template = self._environment(writer_options).get_template("template")
            for chunk in template.generate(template_context):
                yield chunk
        except TemplateError as e:
            raise RenderError(f"failed to render changelog template: {e}") from e
