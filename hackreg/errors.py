# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Registration pipeline exceptions, each mapped to one HTTP status."""
from typing import Any, Dict, List, Optional


class RegistrationError(Exception):
    """Base class; ``to_dict`` is the JSON body sent back to the client."""
    status_code = 500

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class TemporalError(RegistrationError):
    """Registration attempted after the cutoff."""
    status_code = 400


class VerificationError(RegistrationError):
    """Verification token missing or rejected."""
    status_code = 400


class VerificationUnavailableError(RegistrationError):
    """Verification provider could not be reached."""
    status_code = 500


class MalformedInputError(RegistrationError):
    status_code = 400


class SchemaViolationError(RegistrationError):
    status_code = 400


class ConflictError(RegistrationError):
    status_code = 409


class PersistenceError(RegistrationError):
    status_code = 500


class NotificationError(RuntimeError):
    """Email delivery failed. Logged by the caller, never returned to the client."""
    pass
