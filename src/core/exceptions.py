"""
Ledger and analysis-provider errors.

Ledger errors are local and recoverable: callers catch them and redirect
(login, upgrade) or show a message. Provider errors carry a stable ``code``
and a ``user_message`` suitable for a toast.
"""

from typing import Optional


# =============================================================================
# Ledger errors
# =============================================================================


class LedgerError(Exception):
    """Base class for session / quota / history errors"""
    pass


class DuplicateEmailError(LedgerError):
    """Raised when registering an email that already exists in the user table"""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Account already exists: {email}")


class InvalidCredentialsError(LedgerError):
    """Raised when no user-table row matches email + password"""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Invalid email or password")


class InvalidPasswordError(LedgerError, ValueError):
    """Raised when a registration password is empty or longer than bcrypt accepts"""
    pass


class NotAuthenticatedError(LedgerError):
    """Raised when an identity operation runs without an active session"""
    pass


class StaleSessionError(LedgerError):
    """Raised when the active session points at an email missing from the user table.

    The session has already been cleared when this is raised (forced logout).
    """

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Session for {email} is stale and was cleared")


class QuotaExceededError(LedgerError):
    """Raised before an analysis call when the daily quota is used up"""

    def __init__(self, usage: int, limit: int, requires_login: bool):
        self.usage = usage
        self.limit = limit
        # Guests are sent to login, registered accounts to the upgrade page
        self.requires_login = requires_login
        hint = "Please login." if requires_login else "Upgrade to VIP."
        super().__init__(f"Daily limit reached ({usage}/{limit}). {hint}")


class CorruptPersistedRecordError(LedgerError):
    """Raised when a persisted value cannot be decoded.

    Readers recover by treating the key as absent.
    """

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Corrupt persisted record '{key}': {reason}")


# =============================================================================
# Analysis provider errors
# =============================================================================


class AnalysisError(Exception):
    """Base class for analysis provider failures"""

    code: str = "API_ERROR"
    user_message: str = "AI Service Error: An unexpected error occurred during analysis."

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        self.status = status
        super().__init__(message or self.code)


class MissingCredentialError(AnalysisError):
    code = "MISSING_API_KEY"
    user_message = "System Error: API Key is missing. Please check configuration."


class InvalidCredentialError(AnalysisError):
    code = "INVALID_API_KEY"
    user_message = "Authentication Error: Invalid API Key. Please verify your credentials."


class RateLimitedError(AnalysisError):
    code = "RATE_LIMIT_EXCEEDED"
    user_message = "Usage Limit Exceeded: The system is busy. Please try again in a minute."


class NetworkError(AnalysisError):
    code = "NETWORK_ERROR"
    user_message = "Connection Error: Please check your internet connection and try again."


class ServiceUnavailableError(AnalysisError):
    code = "SERVER_ERROR"
    user_message = "Service Unavailable: The AI service is currently down. Please try again later."


class EmptyResultError(AnalysisError):
    code = "EMPTY_RESPONSE"
    user_message = "No Analysis Generated: Please try a different pair or timeframe."


class UnknownAnalysisError(AnalysisError):
    code = "API_ERROR"
