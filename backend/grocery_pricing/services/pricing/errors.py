"""Exceptions raised by the pricing engine."""


ALREADY_IN_PROGRESS = "Calculation already in progress"


class PricingError(Exception):
    pass


class RunAlreadyInProgress(PricingError):
    def __init__(self, started_seconds_ago: float | None = None) -> None:
        self.started_seconds_ago = started_seconds_ago
        super().__init__(ALREADY_IN_PROGRESS)


class EquivalenceRefreshFailure(PricingError):
    """Loading equivalences failed. Logged by the cache, never raised to callers."""


class TableValidationError(PricingError, ValueError):
    pass
