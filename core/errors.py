# =============================================================================
# core/errors.py  —  Exception taxonomy
# =============================================================================
#
# Three kinds of failure reach the dispatcher:
#   - validation errors   → never raised; returned as Invalid(...) results
#   - DomainError         → a recognised, unsatisfiable request; its message
#                           is safe to show to the caller as-is
#   - anything else       → an operational fault; logged, never echoed
#
# RegistrationError and UnknownOperationError are wiring/caller mistakes
# raised by the registries themselves.
# =============================================================================


class DomainError(Exception):
    """A recognised condition the caller can act on.

    The string form is user-safe and becomes the text of the error response.
    """


class UnsupportedCurrencyError(DomainError):
    """Raised when a currency code is not in the rate table."""

    def __init__(self, code: str, supported: list[str] | None = None):
        self.code = code
        self.supported = supported or []
        message = f"Unsupported currency: {code}"
        if self.supported:
            message += f". Supported currencies: {', '.join(self.supported)}"
        super().__init__(message)


class InvalidFormatError(DomainError):
    """Raised when a resource is requested in a format it cannot render."""

    def __init__(self, requested: str):
        self.requested = requested
        super().__init__(f"Invalid format requested: {requested}")


class DuplicatePaymentError(DomainError):
    """Raised when a payment id already exists in the user's ledger."""

    def __init__(self, user_id: str, payment_id: str):
        self.user_id = user_id
        self.payment_id = payment_id
        super().__init__(f"Payment {payment_id} already exists for user {user_id}")


class RegistrationError(Exception):
    """Raised when a tool, resource or prompt name is registered twice."""


class UnknownOperationError(LookupError):
    """Raised when a prompt or resource name has no registration."""
