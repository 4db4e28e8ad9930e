# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas."""
from collections import defaultdict
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hackreg import validation as rules
from hackreg.errors import SchemaViolationError


class TeamIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=rules.TEAM_NAME_MAX)
    amount: int = Field(..., ge=rules.TEAM_SIZE_MIN, le=rules.TEAM_SIZE_MAX)
    description: str = Field(..., min_length=1, max_length=rules.TEAM_DESCRIPTION_MAX)


class MemberIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    dni: str
    utp_code: str
    phone: str
    email: str = Field(..., max_length=255)
    degree: str = Field(..., min_length=1, max_length=150)

    @field_validator("dni")
    @classmethod
    def check_dni(cls, v: str) -> str:
        if not rules.is_valid_dni(v):
            raise ValueError(rules.MESSAGES[rules.DNI])
        return v

    @field_validator("utp_code")
    @classmethod
    def normalise_utp_code(cls, v: str) -> str:
        if not rules.is_valid_utp_code(v):
            raise ValueError(rules.MESSAGES[rules.UTP_CODE])
        return v.upper()

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        if not rules.is_valid_phone(v):
            raise ValueError(rules.MESSAGES[rules.PHONE])
        return v

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        if not rules.is_valid_email(v):
            raise ValueError(rules.MESSAGES[rules.EMAIL])
        return v.lower()

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}"


class RegistrationRequest(BaseModel):
    team: TeamIn
    members: List[MemberIn]


class RegistrationResponse(BaseModel):
    message: str
    teamId: str
    teamName: str


class PreRegistrationRequest(BaseModel):
    email: str = Field(..., max_length=255)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not rules.is_valid_email(v):
            raise ValueError(rules.MESSAGES[rules.EMAIL])
        return v


class MessageResponse(BaseModel):
    message: str


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[List[FieldError]] = None


# ── Validation entrypoint ──────────────────────────────────────────────────

def _format_loc(loc) -> str:
    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out or "body"


def _field_errors(exc: ValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        msg = err["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.append({"field": _format_loc(err["loc"]), "message": msg})
    return errors


def _cross_record_errors(data: Dict[str, Any]) -> List[Dict[str, str]]:
    """Checks spanning several records; run on the raw body so they are
    reported together with per-field failures."""
    errors: List[Dict[str, str]] = []
    team = data.get("team") if isinstance(data.get("team"), dict) else {}
    members = data.get("members") if isinstance(data.get("members"), list) else None
    if members is None:
        return errors

    amount = team.get("amount")
    if isinstance(amount, str) and amount.strip().isdigit():
        amount = int(amount)
    if isinstance(amount, int) and not isinstance(amount, bool) and amount != len(members):
        errors.append({
            "field": "members",
            "message": f"Team declares {amount} members but {len(members)} were submitted",
        })

    for key, label in (("dni", "DNI"), ("email", "Email")):
        seen: Dict[str, List[int]] = defaultdict(list)
        for idx, member in enumerate(members):
            if not isinstance(member, dict):
                continue
            value = str(member.get(key) or "").strip()
            if key == "email":
                value = value.lower()
            if value:
                seen[value].append(idx)
        for value, indexes in seen.items():
            if len(indexes) < 2:
                continue
            positions = ", ".join(str(i + 1) for i in indexes)
            for idx in indexes:
                errors.append({
                    "field": f"members[{idx}].{key}",
                    "message": f"{label} {value} is repeated within the team (members {positions})",
                })
    return errors


def validate_registration(data: Any) -> RegistrationRequest:
    """Validate a decoded body, raising SchemaViolationError with every failure."""
    if not isinstance(data, dict):
        raise SchemaViolationError(
            "Invalid registration data",
            [{"field": "body", "message": "Expected a JSON object with 'team' and 'members'"}],
        )

    errors: List[Dict[str, str]] = []
    parsed = None
    try:
        parsed = RegistrationRequest.model_validate(data)
    except ValidationError as exc:
        errors.extend(_field_errors(exc))
    errors.extend(_cross_record_errors(data))

    # the raw check misses amounts pydantic coerces, such as 4.0
    if parsed is not None and parsed.team.amount != len(parsed.members) \
            and not any(e["field"] == "members" for e in errors):
        errors.append({
            "field": "members",
            "message": f"Team declares {parsed.team.amount} members "
                       f"but {len(parsed.members)} were submitted",
        })

    if errors:
        raise SchemaViolationError("Invalid registration data", errors)
    return parsed
