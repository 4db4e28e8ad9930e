# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Team registration pipeline.

Stages run in a fixed order and the first failure ends the request:
    deadline ─► verification ─► parse ─► schema ─► uniqueness ─► persist ─► notify

Uniqueness is a read followed by a write with no lock in between, so two
concurrent submissions can both pass it. The team/member writes are two
separate statements; a failed member batch is undone by deleting the team,
and if that delete also fails the team row is left behind without members.
"""
import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from hackreg.core.config import settings
from hackreg.core.logging import get_logger
from hackreg.errors import (
    ConflictError, MalformedInputError, PersistenceError, TemporalError,
)
from hackreg.metrics import (
    COMPENSATING_DELETES, PRE_REGISTRATIONS, REGISTERED_MEMBERS,
    REGISTRATION_PROCESSING, REGISTRATIONS,
)
from hackreg.repositories.registration_repository import RegistrationRepository
from hackreg.schemas import RegistrationRequest, validate_registration

logger = get_logger(__name__)


def parse_deadline(value: str) -> datetime:
    deadline = datetime.fromisoformat(value)
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    return deadline


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegistrationService:
    def __init__(self, repo: RegistrationRepository, verifier, email_sender,
                 deadline: Optional[datetime] = None,
                 clock: Callable[[], datetime] = _utcnow):
        self._repo = repo
        self._verifier = verifier
        self._email = email_sender
        self._deadline = deadline or parse_deadline(settings.REGISTRATION_DEADLINE)
        self._clock = clock

    def register(self, raw_body: bytes, token: Optional[str],
                 remote_ip: Optional[str] = None) -> Dict[str, Any]:
        with REGISTRATION_PROCESSING.time():
            try:
                result = self._register(raw_body, token, remote_ip)
            except Exception as exc:
                REGISTRATIONS.labels(outcome=type(exc).__name__).inc()
                raise
        REGISTRATIONS.labels(outcome="created").inc()
        return result

    def _register(self, raw_body: bytes, token: Optional[str],
                  remote_ip: Optional[str]) -> Dict[str, Any]:
        self.check_deadline()
        self._verifier.verify(token, remote_ip)
        request = validate_registration(self.parse_body(raw_body))
        self.check_uniqueness(request)
        team_id = self.persist(request)

        self.notify(request)
        logger.info("Team registered id=%s name=%s members=%d",
                    team_id, request.team.name, len(request.members), extra={"team_id": team_id})
        return {
            "message": "Team registered successfully",
            "teamId": team_id,
            "teamName": request.team.name,
        }

    # ── Stages ─────────────────────────────────────────────────────────

    def check_deadline(self):
        if self._clock() > self._deadline:
            raise TemporalError("Registration is closed")

    @staticmethod
    def parse_body(raw_body: bytes) -> Any:
        if not raw_body or not raw_body.strip():
            raise MalformedInputError("Request body is empty")
        try:
            return json.loads(raw_body)
        except (UnicodeDecodeError, ValueError) as exc:
            raise MalformedInputError("Malformed JSON body") from exc

    def check_uniqueness(self, request: RegistrationRequest):
        try:
            if self._repo.team_name_exists(request.team.name):
                raise ConflictError("A team with that name is already registered")
            rows = self._repo.find_member_conflicts(
                [m.dni for m in request.members],
                [m.email for m in request.members],
                [m.utp_code for m in request.members],
            )
        except SQLAlchemyError as exc:
            logger.error("Uniqueness lookup failed: %s", exc)
            raise PersistenceError("Database error") from exc

        if not rows:
            return
        taken = {
            "dni": {r["dni"] for r in rows},
            "email": {(r["email"] or "").lower() for r in rows},
            "utp_code": {(r["utp_code"] or "").upper() for r in rows},
        }
        details: List[Dict[str, str]] = []
        for idx, member in enumerate(request.members):
            for key, label in (("dni", "DNI"), ("email", "Email"), ("utp_code", "Institutional code")):
                value = getattr(member, key)
                if value in taken[key]:
                    details.append({
                        "field": f"members[{idx}].{key}",
                        "message": f"{label} {value} is already registered in another team",
                    })
        raise ConflictError("One or more members are already registered in another team", details)

    def persist(self, request: RegistrationRequest) -> str:
        team = request.team
        try:
            team_id = self._repo.insert_team(team.name, team.amount, team.description)
        except SQLAlchemyError as exc:
            logger.error("Failed to create team %s: %s", team.name, exc)
            raise PersistenceError("Could not create the team") from exc

        try:
            self._repo.insert_members(team_id, [m.model_dump() for m in request.members])
        except SQLAlchemyError as exc:
            logger.error("Member insert failed for team %s, rolling back: %s", team_id, exc)
            self.rollback_team(team_id)
            raise PersistenceError("Could not register the team members") from exc

        REGISTERED_MEMBERS.inc(len(request.members))
        return team_id

    def rollback_team(self, team_id: str):
        try:
            self._repo.delete_team(team_id)
        except SQLAlchemyError as exc:
            COMPENSATING_DELETES.labels(status="failed").inc()
            logger.error("Compensating delete failed, team %s left without members: %s", team_id, exc,
                         extra={"team_id": team_id})
            return
        COMPENSATING_DELETES.labels(status="done").inc()

    def notify(self, request: RegistrationRequest):
        recipients = [{"name": m.full_name, "email": m.email} for m in request.members]
        try:
            self._email.send_registration_emails(request.team.name, recipients)
        except Exception as exc:
            logger.warning("Registration emails for team %s not fully delivered: %s",
                           request.team.name, exc)

    # ── Interest list ──────────────────────────────────────────────────

    def pre_register(self, email: str) -> bool:
        try:
            added = self._repo.add_pre_registration(email)
        except SQLAlchemyError as exc:
            logger.error("Failed to store pre-registration: %s", exc)
            raise PersistenceError("Database error") from exc
        PRE_REGISTRATIONS.labels(status="added" if added else "duplicate").inc()
        return added
