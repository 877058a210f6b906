"""
Exception hierarchy for the Puppet sandbox builder.

Every error raised here is user-facing and terminal for the current
converge attempt; the host decides whether to retry the whole cycle.
"""


class UserError(Exception):
    """Base class for errors the user has to fix."""


class ConfigurationError(UserError):
    """The project root or one of its descriptor files is unusable."""


class ResolverUnavailableError(UserError):
    """The librarian-puppet executable could not be found."""


class ResolverError(UserError):
    """librarian-puppet ran but failed to install the Puppetfile modules."""
