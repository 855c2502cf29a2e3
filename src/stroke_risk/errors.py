class StrokeRiskError(Exception):
    """Base class for every pipeline failure."""


class DataError(StrokeRiskError):
    """Input is malformed, or nothing is left after cleaning."""


class InsufficientSamplesError(StrokeRiskError):
    """Minority class is too small for synthetic oversampling."""


class ConvergenceError(StrokeRiskError):
    """The model solver did not converge."""


class SchemaMismatchError(StrokeRiskError):
    """A dataset is missing columns the model (or stage) expects."""
