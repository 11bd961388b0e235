"""
Error taxonomy for the item / container engine.

Services raise these; routers translate them into HTTP responses and the
bulk coordinator turns them into failed rows.
"""

from typing import Optional


class ShippingError(Exception):
    """Base exception for item lifecycle errors"""
    pass


class ValidationError(ShippingError):
    """Raised when a mutation's required-field precondition is not met"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class NotFoundError(ShippingError):
    """Raised when an item or customer id does not resolve"""
    pass


class StoreError(ShippingError):
    """Raised when the underlying record store call fails"""
    pass


class AggregationInconsistency(ShippingError):
    """Container members disagree on status.

    The aggregator reports the status distribution by default and only
    raises this when asked for strict aggregation.
    """

    def __init__(self, container_number: str, status_counts: dict[str, int]):
        statuses = ", ".join(f"{k}={v}" for k, v in sorted(status_counts.items()))
        super().__init__(f"Container {container_number} has mixed statuses ({statuses})")
        self.container_number = container_number
        self.status_counts = status_counts
