"""Pipeline exceptions; per-file doctest failures are results, not errors"""


class GuidecheckError(Exception):
    """Base class for failures that abort a guidecheck run."""


class BootstrapError(GuidecheckError):
    """A version environment could not be created or built."""

    def __init__(self, version: str, step: str, code: int):
        super().__init__(f"Bootstrap of '{version}' failed at '{step}' (exit {code})")
        self.version = version
        self.step = step
        self.code = code


class DiscoveryError(GuidecheckError):
    """Tracked guide files could not be listed."""
