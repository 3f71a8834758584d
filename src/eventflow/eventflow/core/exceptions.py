class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a requested event or participant does not exist."""


class DuplicateRegistrationError(DomainError):
    """Raised when a student id is already registered for the event."""


class SelfCheckoutRejected(ValidationError):
    """Raised when a participant may not check themselves out right now."""


class DurableWriteError(DomainError):
    """Raised when the durable store could not persist a change."""


class ConfirmationRequired(DomainError):
    """Raised when a destructive operation is issued without confirmation."""
