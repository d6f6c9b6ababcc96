"""Ledger domain errors.

All errors derive from ``ValueError`` so callers that only care about
"bad input" can keep catching that.
"""


class LedgerError(ValueError):
    """Base class for ledger, invoice and payment errors."""


# Validation errors: rejected before any write.

class ValidationError(LedgerError):
    """Request is structurally invalid."""


class UnbalancedEntryError(ValidationError):
    """Raised when a journal entry's debits and credits differ beyond tolerance."""

    def __init__(self, total_debit, total_credit):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Journal entry is not balanced: debits={total_debit}, credits={total_credit}"
        )


class InsufficientLinesError(ValidationError):
    """Raised when a journal entry has fewer than two lines."""


class InvalidLineError(ValidationError):
    """Raised when a journal line is negative or carries both a debit and a credit."""


class InactiveAccountError(ValidationError):
    """Raised when a journal line references a deactivated account."""


# State-conflict errors: rejected atomically, no partial effect.

class ConflictError(LedgerError):
    """Request conflicts with current state."""


class DuplicateCodeError(ConflictError):
    """Raised when a unique business code (account code, entry number...) is taken."""


class AlreadyPostedError(ConflictError):
    """Raised when posting a journal entry that is not in draft."""


class OverpaymentRejectedError(ConflictError):
    """Raised when a payment exceeds the invoice's outstanding balance."""

    def __init__(self, amount, balance):
        self.amount = amount
        self.balance = balance
        super().__init__(f"Payment amount {amount} exceeds invoice balance {balance}")


class NotFoundError(LedgerError):
    """Raised when a referenced record does not exist."""
