"""Exception hierarchy for the loan back office."""


class LoanOfficeError(Exception):
    """Base exception for all loan back office errors."""


class ValidationError(LoanOfficeError):
    """Raised for malformed or out-of-range input. Nothing was written."""


class NotFoundError(LoanOfficeError):
    """Raised when a referenced partner, loan, installment or payment does not exist."""


class ConflictError(LoanOfficeError):
    """Raised when a transaction kept failing on concurrent modification.

    The operation may be retried; the affected records should be reviewed.
    """


class IntegrityWarning(UserWarning):
    """Non-fatal data anomaly found by a repair sweep. Recorded, never raised."""

    def __init__(self, record_id: str, message: str):
        super().__init__(f"{record_id}: {message}")
        self.record_id = record_id
        self.message = message
