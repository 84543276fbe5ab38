"""Errors raised while generating changelogs."""


class ChangelogError(Exception):
    """Base class for all changewriter errors."""


class MissingAlphaVersionError(ChangelogError, ValueError):
    def __init__(self):
        super().__init__("unable to create 'separate' changelogs without alpha package versions")


class UnsupportedTreatmentError(ChangelogError, ValueError):
    def __init__(self, treatment):
        self.treatment = treatment
        super().__init__(f"unsupported experimentalChanges type: {treatment}")


class PresetNotFoundError(ChangelogError, LookupError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown changelog preset: {name}")


class RenderError(ChangelogError):
    """The rendering pipeline failed before completing."""


class RenderTimeoutError(ChangelogError, TimeoutError):
    def __init__(self, path: str, timeout: float):
        self.path = path
        self.timeout = timeout
        super().__init__(f"rendering {path} did not finish within {timeout}s")


class AbsoluteChangelogPathError(ChangelogError, ValueError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"unable to create 'separate' changelogs for an absolute changelog file ({path}); "
            "use a path relative to the package locations"
        )
