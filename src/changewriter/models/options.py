"""Configuration models for changelog generation."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from changewriter.types.release import ExperimentalChangesTreatment, PackageInfo

DEFAULT_CHANGELOG_FILE = "CHANGELOG.md"

DEFAULT_CHANGELOG_HEADER = (
    "# Changelog\n\n"
    "All notable changes to this project will be documented in this file. "
    "See [standard-version](https://github.com/conventional-changelog/standard-version) "
    "for commit guidelines.\n"
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LifecyclesSkip(_CamelModel):
    """Release lifecycle steps that should not run."""

    bump: bool = False
    changelog: bool = False
    commit: bool = False
    tag: bool = False


class RepositoryIdentity(_CamelModel):
    """Where links in the rendered changelog point to."""

    host: str = "https://github.com"
    owner: str = "aws"
    repository: str = "aws-cdk"


class ChangelogOptions(_CamelModel):
    """Options for writing changelogs.

    Field names follow Python conventions; camelCase aliases (``changelogFile``,
    ``experimentalChangesTreatment``, ...) are accepted when loading from JSON.
    """

    skip: Optional[LifecyclesSkip] = None
    changelog_file: str = DEFAULT_CHANGELOG_FILE
    dry_run: bool = False
    verbose: bool = False
    silent: bool = False

    # plain str so that unknown values reach the treatment dispatch and fail there
    experimental_changes_treatment: Optional[str] = ExperimentalChangesTreatment.INCLUDE.value
    change_log_header: str = DEFAULT_CHANGELOG_HEADER
    include_date_in_changelog: bool = True
    release_commit_message_format: Optional[str] = None

    repository: RepositoryIdentity = Field(default_factory=RepositoryIdentity)
    render_timeout: Optional[float] = Field(default=60.0, gt=0)


class PackageRecord(_CamelModel):
    """A package entry as listed in a release's packages file (``simplifiedName`` or ``simplified_name``)."""

    simplified_name: str
    location: str
    unstable: bool = False

    def to_package_info(self) -> PackageInfo:
        return PackageInfo(simplified_name=self.simplified_name, location=self.location, unstable=self.unstable)
