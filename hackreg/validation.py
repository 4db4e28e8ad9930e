# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Field rules shared by the server schemas and the client form controller.

Both tiers import the same patterns and messages so the browser-side checks
can never accept something the endpoint rejects (or the other way round).
The only client-side leniency is separator stripping on phone numbers,
see ``normalize_phone``.
"""
import re
from typing import Optional

TEAM_SIZE_MIN = 4
TEAM_SIZE_MAX = 6
TEAM_NAME_MAX = 100
TEAM_DESCRIPTION_MAX = 200

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DNI_RE = re.compile(r"^\d{8}$")
UTP_CODE_RE = re.compile(r"^[A-Za-z]\d{8}$")
PHONE_RE = re.compile(r"^\d{9}$")
_PHONE_SEPARATORS_RE = re.compile(r"[\s\-()]")

# ── Field kinds ────────────────────────────────────────────────────────────
REQUIRED = "required"
EMAIL = "email"
PHONE = "phone"
DNI = "dni"
UTP_CODE = "utp_code"
NAME = "name"
TEAM_NAME = "team_name"
TEAM_SIZE = "team_size"

MESSAGES = {
    REQUIRED: "This field is required",
    EMAIL: "Enter a valid email address",
    PHONE: "Phone number must have exactly 9 digits",
    DNI: "DNI must have exactly 8 digits",
    UTP_CODE: "Institutional code must be one letter followed by 8 digits",
    NAME: "Must have at least 2 characters",
    TEAM_NAME: "Team name must have at least 3 characters",
    TEAM_SIZE: f"Team must have between {TEAM_SIZE_MIN} and {TEAM_SIZE_MAX} members",
}


def normalize_phone(value: str) -> str:
    """Drop spaces, hyphens and parentheses so '999 888-777' becomes '999888777'."""
    return _PHONE_SEPARATORS_RE.sub("", value or "")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or ""))


def is_valid_dni(value: str) -> bool:
    return bool(DNI_RE.match(value or ""))


def is_valid_utp_code(value: str) -> bool:
    return bool(UTP_CODE_RE.match(value or ""))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_RE.match(value or ""))


def is_valid_team_size(value) -> bool:
    try:
        size = int(value)
    except (TypeError, ValueError):
        return False
    return TEAM_SIZE_MIN <= size <= TEAM_SIZE_MAX


def check(kind: str, value: Optional[str], required: bool = True) -> Optional[str]:
    """Return the error message for ``value`` under rule ``kind``, or None when it passes."""
    value = (value or "").strip()
    if not value:
        return MESSAGES[REQUIRED] if required else None

    if kind == EMAIL and not is_valid_email(value):
        return MESSAGES[EMAIL]
    if kind == PHONE and not is_valid_phone(normalize_phone(value)):
        return MESSAGES[PHONE]
    if kind == DNI and not is_valid_dni(value):
        return MESSAGES[DNI]
    if kind == UTP_CODE and not is_valid_utp_code(value):
        return MESSAGES[UTP_CODE]
    if kind == NAME and len(value) < 2:
        return MESSAGES[NAME]
    if kind == TEAM_NAME and len(value) < 3:
        return MESSAGES[TEAM_NAME]
    if kind == TEAM_SIZE and not is_valid_team_size(value):
        return MESSAGES[TEAM_SIZE]
    return None
