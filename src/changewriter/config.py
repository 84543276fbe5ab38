"""Environment based configuration."""

import os

from dotenv import load_dotenv

from changewriter.models.options import RepositoryIdentity


def load_repository_identity() -> RepositoryIdentity:
    """Build the repository identity from the environment, falling back to the defaults.

    Reads CHANGEWRITER_REPO_HOST, CHANGEWRITER_REPO_OWNER and CHANGEWRITER_REPO_NAME,
    after loading a ``.env`` file if one is present.
    """
    load_dotenv()
    defaults = RepositoryIdentity()
    return RepositoryIdentity(
        host=os.getenv("CHANGEWRITER_REPO_HOST", defaults.host),
        owner=os.getenv("CHANGEWRITER_REPO_OWNER", defaults.owner),
        repository=os.getenv("CHANGEWRITER_REPO_NAME", defaults.repository),
    )
