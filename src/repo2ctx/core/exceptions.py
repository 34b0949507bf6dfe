"""Exception types raised by the repo2ctx core."""


class Repo2CtxError(Exception):
    """Base class for errors that fail a whole operation."""


class ConfigError(Repo2CtxError):
    """The configuration text could not be parsed into a Config."""


class RootPathError(Repo2CtxError):
    """The root path is missing, not a directory, or unreadable."""


class OperationCancelled(Repo2CtxError):
    """A cancellation token fired while an operation was running."""
