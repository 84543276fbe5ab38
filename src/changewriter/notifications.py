"""Notification sink used to report progress to the caller."""

from typing import Protocol, Sequence

from loguru import logger

from changewriter.models.options import ChangelogOptions


class Notifier(Protocol):
    def notify(self, options: ChangelogOptions, message: str, args: Sequence[object] = ()) -> None: ...

    def debug(self, options: ChangelogOptions, message: str) -> None: ...


class LoguruNotifier:
    """Default notifier forwarding to loguru.

    ``notify`` is silenced by ``options.silent``; ``debug`` only emits with ``options.verbose``.
    """

    def notify(self, options: ChangelogOptions, message: str, args: Sequence[object] = ()) -> None:
        if options.silent:
            return
        logger.info(message % tuple(args) if args else message)

    def debug(self, options: ChangelogOptions, message: str) -> None:
        if options.verbose:
            logger.debug(message)


default_notifier = LoguruNotifier()
