"""Types describing release units, versions and changelog output."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ExperimentalChangesTreatment(str, Enum):
    """How commits touching unstable packages end up in the changelogs."""

    INCLUDE = "include"
    STRIP = "strip"
    SEPARATE = "separate"


@dataclass(frozen=True)
class Versions:
    """Version identifiers of a release point."""

    stable_version: str
    alpha_version: Optional[str] = None


@dataclass(frozen=True)
class PackageInfo:
    """A single release unit of the monorepo."""

    simplified_name: str
    location: str
    unstable: bool = False


@dataclass(frozen=True)
class ChangelogResult:
    """A rendered changelog and the file it belongs to."""

    file_path: str
    file_contents: str
