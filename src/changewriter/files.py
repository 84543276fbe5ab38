"""File helpers honouring dry-run mode."""

from pathlib import Path

from loguru import logger

from changewriter.models.options import ChangelogOptions


def write_file(options: ChangelogOptions, file_path: str, content: str) -> None:
    """Write ``content`` to ``file_path`` unless running in dry-run mode."""
    if options.dry_run:
        return
    logger.debug(f"Writing {len(content)} characters to {file_path}")
    Path(file_path).write_text(content, encoding="utf-8")
