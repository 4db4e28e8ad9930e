# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""FastAPI dependency injection wiring."""
from hackreg.core.database import engine
from hackreg.repositories.registration_repository import RegistrationRepository
from hackreg.services.email_sender import EmailSender
from hackreg.services.registration_service import RegistrationService
from hackreg.services.turnstile_client import TurnstileVerifier

_repo = RegistrationRepository(engine)
_verifier = TurnstileVerifier()
_email_sender = EmailSender()
_service = RegistrationService(_repo, _verifier, _email_sender)


def get_registration_repo() -> RegistrationRepository:
    return _repo


def get_registration_service() -> RegistrationService:
    return _service
