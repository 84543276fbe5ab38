"""Command line entry point for writing release changelogs."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from changewriter.config import load_repository_identity
from changewriter.exceptions import ChangelogError
from changewriter.models.options import DEFAULT_CHANGELOG_FILE, ChangelogOptions, LifecyclesSkip, PackageRecord
from changewriter.nodes.changelog import write_changelogs
from changewriter.types.base import ConventionalCommit
from changewriter.types.release import ExperimentalChangesTreatment, PackageInfo, Versions

_commits_adapter = TypeAdapter(List[ConventionalCommit])
_packages_adapter = TypeAdapter(List[PackageRecord])


def load_commits(path: str) -> List[ConventionalCommit]:
    """Load parsed commits from a JSON file holding a list of commit objects."""
    return _commits_adapter.validate_python(json.loads(Path(path).read_text(encoding="utf-8")))


def load_packages(path: Optional[str]) -> List[PackageInfo]:
    if not path:
        return []
    records = _packages_adapter.validate_python(json.loads(Path(path).read_text(encoding="utf-8")))
    return [record.to_package_info() for record in records]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Write changelogs for a monorepo release")
    parser.add_argument("--commits", required=True, help="JSON file with the parsed commits of the release")
    parser.add_argument("--packages", help="JSON file with the packages of the monorepo")
    parser.add_argument("--current-version", required=True, help="Stable version of the previous release")
    parser.add_argument("--new-version", required=True, help="Stable version being released")
    parser.add_argument("--current-alpha-version", help="Alpha version of the previous release")
    parser.add_argument("--new-alpha-version", help="Alpha version being released")
    parser.add_argument("--changelog-file", default=DEFAULT_CHANGELOG_FILE, help="Changelog file name")
    parser.add_argument(
        "--experimental-changes-treatment",
        choices=[t.value for t in ExperimentalChangesTreatment],
        default=ExperimentalChangesTreatment.INCLUDE.value,
        help="How to handle changes to unstable packages",
    )
    parser.add_argument("--header-file", help="File with the changelog header to use")
    parser.add_argument("--no-date", action="store_true", help="Leave the release date out of the changelog")
    parser.add_argument("--skip-changelog", action="store_true", help="Do not write any changelog")
    parser.add_argument("--timeout", type=float, default=60.0, help="Seconds to wait for each render")
    parser.add_argument("--dry-run", action="store_true", help="Print the changes instead of writing them")
    parser.add_argument("--silent", action="store_true", help="Suppress notifications")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def options_from_args(args: argparse.Namespace) -> ChangelogOptions:
    options = ChangelogOptions(
        skip=LifecyclesSkip(changelog=args.skip_changelog),
        changelog_file=args.changelog_file,
        dry_run=args.dry_run,
        verbose=args.verbose,
        silent=args.silent,
        experimental_changes_treatment=args.experimental_changes_treatment,
        include_date_in_changelog=not args.no_date,
        repository=load_repository_identity(),
        render_timeout=args.timeout,
    )
    if args.header_file:
        options.change_log_header = Path(args.header_file).read_text(encoding="utf-8")
    return options


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    try:
        options = options_from_args(args)
        commits = load_commits(args.commits)
        packages = load_packages(args.packages)
    except (OSError, ValueError, ValidationError) as e:
        logger.error(f"Failed to load release inputs: {str(e)}")
        return 1

    current_version = Versions(args.current_version, args.current_alpha_version)
    new_version = Versions(args.new_version, args.new_alpha_version)

    logger.info(f"Writing changelogs for {len(commits)} commits ({args.current_version} -> {args.new_version})")
    try:
        results = asyncio.run(write_changelogs(options, current_version, new_version, commits, packages))
    except ChangelogError as e:
        logger.error(f"Failed to write changelogs: {str(e)}")
        return 1

    for result in results:
        print(result.file_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
