class AshtaChammaError(Exception):
    """Base exception for the Ashta Chamma engine."""

    pass


class SetupError(AshtaChammaError, ValueError):
    """Raised when a game is initialised with an invalid seating or board."""

    pass


class InvariantViolation(AshtaChammaError, AssertionError):
    """Raised when engine data breaks a rule invariant (a programming defect)."""

    pass
