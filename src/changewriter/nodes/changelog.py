"""Changelog writer node: renders commits and splices them into existing changelogs."""

import asyncio
import os
import re
from typing import List, Optional

from loguru import logger

from changewriter.exceptions import (
    AbsoluteChangelogPathError,
    MissingAlphaVersionError,
    RenderTimeoutError,
    UnsupportedTreatmentError,
)
from changewriter.files import write_file
from changewriter.models.options import ChangelogOptions
from changewriter.notifications import Notifier, default_notifier
from changewriter.rendering.preset import CONVENTIONAL_COMMITS_PRESET, load_preset
from changewriter.rendering.writer import ConventionalChangelogWriter
from changewriter.types.base import ConventionalCommit, filter_commits
from changewriter.types.release import ChangelogResult, ExperimentalChangesTreatment, PackageInfo, Versions
from changewriter.types.render import Renderer, RenderContext, TemplateContext

START_OF_LAST_RELEASE_PATTERN = re.compile(r"(^#+ \[?[0-9]+\.[0-9]+\.[0-9]+|<a name=)", re.MULTILINE)

BREAKING_CHANGES_TITLE = "BREAKING CHANGES"
EXPERIMENTAL_BREAKING_CHANGES_TITLE = "BREAKING CHANGES TO EXPERIMENTAL FEATURES"


async def write_changelogs(
    options: ChangelogOptions,
    current_version: Versions,
    new_version: Versions,
    commits: List[ConventionalCommit],
    packages: List[PackageInfo],
    *,
    renderer: Optional[Renderer] = None,
    notifier: Optional[Notifier] = None,
) -> List[ChangelogResult]:
    """Write the changelogs for a release according to the experimental changes treatment."""
    if options.skip and options.skip.changelog:
        return []

    treatment = options.experimental_changes_treatment or ExperimentalChangesTreatment.INCLUDE.value
    unstable_packages = [p for p in packages if p.unstable]
    stable_commits = filter_commits(commits, exclude_packages=[p.simplified_name for p in unstable_packages])

    logger.info(f"Writing changelogs with experimental changes treatment '{treatment}'")

    if treatment == ExperimentalChangesTreatment.INCLUDE:
        contents = await changelog(
            options, current_version.stable_version, new_version.stable_version, commits,
            renderer=renderer, notifier=notifier,
        )
        return [ChangelogResult(file_path=options.changelog_file, file_contents=contents)]

    elif treatment == ExperimentalChangesTreatment.STRIP:
        contents = await changelog(
            options, current_version.stable_version, new_version.stable_version, stable_commits,
            renderer=renderer, notifier=notifier,
        )
        return [ChangelogResult(file_path=options.changelog_file, file_contents=contents)]

    elif treatment == ExperimentalChangesTreatment.SEPARATE:
        if not current_version.alpha_version or not new_version.alpha_version:
            raise MissingAlphaVersionError()
        # package changelogs live at <package location>/<changelog file>
        if os.path.isabs(options.changelog_file):
            raise AbsoluteChangelogPathError(options.changelog_file)

        async def package_changelog(pkg: PackageInfo) -> ChangelogResult:
            pkg_commits = filter_commits(commits, include_packages=[pkg.simplified_name])
            pkg_changelog = os.path.join(pkg.location, options.changelog_file)
            pkg_options = options.model_copy(update={"changelog_file": pkg_changelog})
            contents = await changelog(
                pkg_options, current_version.alpha_version, new_version.alpha_version, pkg_commits,
                renderer=renderer, notifier=notifier,
            )
            return ChangelogResult(file_path=pkg_changelog, file_contents=contents)

        # per-package renders run concurrently but are joined before the stable one
        tasks = [asyncio.ensure_future(package_changelog(pkg)) for pkg in unstable_packages]
        try:
            changelog_results = list(await asyncio.gather(*tasks))
        except BaseException:
            # a failed render stops its siblings before they get to write
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        contents = await changelog(
            options, current_version.stable_version, new_version.stable_version, stable_commits,
            renderer=renderer, notifier=notifier,
        )
        changelog_results.append(ChangelogResult(file_path=options.changelog_file, file_contents=contents))
        return changelog_results

    else:
        raise UnsupportedTreatmentError(treatment)


def _create_changelog_if_missing(options: ChangelogOptions, notifier: Notifier) -> None:
    if not os.path.exists(options.changelog_file):
        notifier.notify(options, "created %s", [options.changelog_file])
        write_file(options, options.changelog_file, "\n")


def _read_old_content(options: ChangelogOptions) -> str:
    """Return the part of the existing changelog starting at the most recent release."""
    if options.dry_run:
        return ""
    with open(options.changelog_file, encoding="utf-8") as f:
        old_content = f.read()

    # drop the header and anything (e.g. an "Unreleased" section) above the last release
    match = START_OF_LAST_RELEASE_PATTERN.search(old_content)
    if match:
        old_content = old_content[match.start():]
    return old_content


def _render_context(options: ChangelogOptions, current_version: str, new_version: str) -> RenderContext:
    repo = options.repository
    return RenderContext(
        version=new_version,
        previous_tag=f"v{current_version}",
        current_tag=f"v{new_version}",
        host=repo.host,
        owner=repo.owner,
        repository=repo.repository,
        link_compare=True,
        is_patch=False,
    )


def _finalize_context_hook(options: ChangelogOptions):
    def finalize_context(ctx: TemplateContext) -> TemplateContext:
        # NOTE: applied to every changelog, not only the ones of experimental packages
        for note_group in ctx.get("noteGroups") or []:
            if note_group.title == BREAKING_CHANGES_TITLE:
                note_group.title = EXPERIMENTAL_BREAKING_CHANGES_TITLE
        if options.include_date_in_changelog is False:
            ctx["date"] = None
        return ctx

    return finalize_context


async def _collect(renderer: Renderer, commits: List[ConventionalCommit], context: RenderContext, writer_opts) -> str:
    content = ""
    stream = renderer.render(iter(commits), context, writer_opts)
    try:
        async for chunk in stream:
            content += chunk
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()
    return content


async def changelog(
    options: ChangelogOptions,
    current_version: str,
    new_version: str,
    commits: List[ConventionalCommit],
    *,
    renderer: Optional[Renderer] = None,
    notifier: Optional[Notifier] = None,
) -> str:
    """Render the changes between two versions and prepend them to ``options.changelog_file``.

    Returns only the newly rendered section. In dry-run mode nothing is read or
    written; the rendered section is sent to the notifier's debug channel instead.
    """
    renderer = renderer or ConventionalChangelogWriter()
    notifier = notifier or default_notifier

    _create_changelog_if_missing(options, notifier)
    old_content = _read_old_content(options)

    preset = load_preset(CONVENTIONAL_COMMITS_PRESET)
    writer_opts = preset.writer_opts
    writer_opts.finalize_context = _finalize_context_hook(options)

    context = _render_context(options, current_version, new_version)

    logger.debug(f"Rendering {len(commits)} commits into {options.changelog_file}")
    try:
        content = await asyncio.wait_for(_collect(renderer, commits, context, writer_opts), options.render_timeout)
    except asyncio.TimeoutError as e:
        raise RenderTimeoutError(options.changelog_file, options.render_timeout) from e

    notifier.notify(options, "outputting changes to %s", [options.changelog_file])
    if options.dry_run:
        notifier.debug(options, f"\n---\n{content.strip()}\n---\n")
    else:
        # collapse trailing blank lines to a single newline
        merged = (content + old_content).rstrip("\n") + "\n"
        write_file(options, options.changelog_file, options.change_log_header + "\n" + merged)

    return content
