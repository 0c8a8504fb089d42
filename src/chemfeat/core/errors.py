"""Exceptions raised by the feature-extraction core."""


class FeaturizationError(Exception):
    """Base class for all errors raised by chemfeat."""


class PreconditionViolation(FeaturizationError):
    """A feature was requested on a graph that skipped a mandatory step."""

    def __init__(self, operation: str, required, actual):
        self.operation = operation
        self.required = required
        self.actual = actual
        super().__init__(
            f"{operation} requires a graph at stage {required.name}, "
            f"got {actual.name}"
        )

    def __reduce__(self):
        return type(self), (self.operation, self.required, self.actual)


class DegenerateGraphError(FeaturizationError):
    """The graph is too small for the requested quantity to be defined."""


class DimensionMismatch(FeaturizationError, ValueError):
    """Two fingerprints of different bit-lengths were compared."""


class ParseError(FeaturizationError):
    """A structure record could not be turned into a molecular graph."""


class UnsupportedAtomError(FeaturizationError):
    """An atom falls outside a classification table."""
