"""Exception and warning types raised by geotraverse.

Configuration errors are raised before any work is scheduled. Exceptions raised
by user transforms are never wrapped; they reach the caller unchanged.
"""


class GeoTraverseError(Exception):
    """Base class for errors raised by the package itself."""


class ConfigurationError(GeoTraverseError, ValueError):
    """A call was configured in a way that can never succeed."""


class TargetNotFoundError(ConfigurationError):
    """The requested trait target cannot be reached from the input."""

    def __init__(self, target, trait):
        self.target = target
        self.trait = trait
        super().__init__(
            f'{target!r} is not reachable from a {trait.name} geometry; '
            f'traversal bottomed out without reaching the target'
        )


class TaskCountMismatchError(ConfigurationError):
    """The number of task functors differs from the number of task units."""

    def __init__(self, nfunctors, nunits):
        self.nfunctors = nfunctors
        self.nunits = nunits
        super().__init__(f'{nfunctors} task functors supplied for {nunits} task units')


class DegenerateGeometryWarning(UserWarning):
    """A correction met a geometry it could not fix and left it unchanged."""
