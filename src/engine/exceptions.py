"""Business-rule failures raised by the engine.

Raised synchronously to the caller; the engine never logs or retries them.
"""

from decimal import Decimal


class FundingError(Exception):
    """Base exception for funding engine failures."""


class InvalidInputError(FundingError):
    """Non-positive principal, non-positive term, negative rate, or similar."""


class DealNotOpenError(FundingError):
    """Investment attempted against a Closed or FullyFunded deal."""

    def __init__(self, status):
        self.status = status
        super().__init__(f"Deal is not open for investment (status: {status.value})")


class BelowMinimumError(FundingError):
    """Investment amount under the deal's minimum."""

    def __init__(self, required: Decimal):
        self.required = required
        super().__init__(f"Minimum investment is ${required:,.2f}")


class NotFoundError(FundingError):
    """Referenced proposal, deal, or investment is not in the supplied state."""
