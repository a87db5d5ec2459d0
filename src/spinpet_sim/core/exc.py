"""
Core exception types for spinpet_sim.core.

These are dependency-free and may be imported by all core modules.
"""

__all__ = [
    "AmountDomainError",
    "AmountOverflowError",
    "OrderFormatError",
    "InvariantViolation",
    "InsufficientLiquidityError",
    "SearchExhaustedError",
    "DomainBoundaryError",
]


class AmountDomainError(Exception):
    """Raised when inputs violate the non-negative domain or basic preconditions."""
    pass


class AmountOverflowError(AmountDomainError):
    """Raised when checked arithmetic leaves the u64/u128 range."""
    pass


class OrderFormatError(AmountDomainError):
    """Raised when an order record cannot be converted into a LockedSegment."""
    pass


class InvariantViolation(Exception):
    """Raised when a segment sequence or internal arithmetic breaks core invariants."""
    pass


class InsufficientLiquidityError(Exception):
    """Raised on request when a simulated trade cannot be filled completely.

    Attributes
    ----------
    requested : int
        Target amount of the simulation (raw units of the walked asset).
    filled : int
        Amount the available gaps could satisfy.
    completion : Decimal
        Completion percentage reported by the simulator.
    """

    def __init__(self, requested, filled, completion):
        super().__init__(
            f"Requested={requested} exceeds available liquidity (filled={filled}, completion={completion}%)"
        )
        self.requested = requested
        self.filled = filled
        self.completion = completion


class SearchExhaustedError(Exception):
    """Raised when an iterative search hits its iteration cap without converging."""

    def __init__(self, iterations, last_price=None, reason=""):
        super().__init__(
            f"Search exhausted after {iterations} iterations (last_price={last_price}){': ' + reason if reason else ''}"
        )
        self.iterations = iterations
        self.last_price = last_price
        self.reason = reason


class DomainBoundaryError(Exception):
    """Raised when an iterative search leaves the representable price domain."""

    def __init__(self, last_price, reason=""):
        super().__init__(f"Price domain boundary reached at {last_price}: {reason}")
        self.last_price = last_price
        self.reason = reason
