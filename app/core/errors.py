"""
Domain errors raised by the accounting engine, the store and the services.

Routes translate these into HTTP responses; nothing below the route layer
swallows them.
"""


class GymError(Exception):
    """Base exception for membership and subscription errors."""


class InvalidDateError(GymError, ValueError):
    """A date could not be parsed, or dates are out of order."""


class NoSubscriptionError(GymError):
    """The operation requires a subscription that does not exist."""


class MemberNotFoundError(GymError):
    """No member row exists for the requested id."""


class PersistenceError(GymError):
    """The store failed to read or write; the transaction was rolled back."""
