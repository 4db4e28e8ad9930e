# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for teams, members and the pre-registration list."""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from hackreg.core.logging import get_logger

logger = get_logger(__name__)

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS teams (
        id          VARCHAR(36) PRIMARY KEY,
        name        VARCHAR(100) NOT NULL,
        amount      INTEGER NOT NULL,
        description VARCHAR(200) NOT NULL,
        created_at  TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS team_members (
        id         VARCHAR(36) PRIMARY KEY,
        team_id    VARCHAR(36) NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
        name       VARCHAR(100) NOT NULL,
        last_name  VARCHAR(100) NOT NULL,
        dni        VARCHAR(8) NOT NULL,
        utp_code   VARCHAR(9) NOT NULL,
        phone      VARCHAR(9) NOT NULL,
        email      VARCHAR(255) NOT NULL,
        degree     VARCHAR(150) NOT NULL,
        created_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS emails_pre (
        email      VARCHAR(255) PRIMARY KEY,
        created_at TIMESTAMP NOT NULL
    )
    """,
)

MEMBER_COLS = "id, team_id, name, last_name, dni, utp_code, phone, email, degree, created_at"


def _ts(value) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


class RegistrationRepository:
    """Plain parameterized SQL; multi-statement atomicity is never assumed."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def create_schema(self):
        with self._engine.begin() as conn:
            for ddl in SCHEMA:
                conn.execute(text(ddl))

    # ── Write ──────────────────────────────────────────────────────────

    def insert_team(self, name: str, amount: int, description: str) -> str:
        team_id = str(uuid.uuid4())
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO teams (id, name, amount, description, created_at)
                    VALUES (:id, :name, :amount, :description, :ts)
                """),
                {"id": team_id, "name": name, "amount": amount,
                 "description": description, "ts": datetime.now(timezone.utc)},
            )
        return team_id

    def insert_members(self, team_id: str, members: List[Dict[str, Any]]) -> List[str]:
        now = datetime.now(timezone.utc)
        ids = []
        with self._engine.begin() as conn:
            for m in members:
                member_id = str(uuid.uuid4())
                conn.execute(
                    text("""
                        INSERT INTO team_members
                            (id, team_id, name, last_name, dni, utp_code, phone, email, degree, created_at)
                        VALUES
                            (:id, :team_id, :name, :last_name, :dni, :utp_code, :phone, :email, :degree, :ts)
                    """),
                    {"id": member_id, "team_id": team_id, "name": m["name"],
                     "last_name": m["last_name"], "dni": m["dni"], "utp_code": m["utp_code"],
                     "phone": m["phone"], "email": m["email"], "degree": m["degree"], "ts": now},
                )
                ids.append(member_id)
        return ids

    def delete_team(self, team_id: str) -> int:
        """Remove a team and any of its members. Safe to call repeatedly."""
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM team_members WHERE team_id = :id"), {"id": team_id})
            result = conn.execute(text("DELETE FROM teams WHERE id = :id"), {"id": team_id})
        return result.rowcount or 0

    def add_pre_registration(self, email: str) -> bool:
        """Insert into the interest list. False when the email was already there."""
        with self._engine.begin() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM emails_pre WHERE email = :email"), {"email": email}
            ).fetchone()
            if exists:
                return False
            conn.execute(
                text("INSERT INTO emails_pre (email, created_at) VALUES (:email, :ts)"),
                {"email": email, "ts": datetime.now(timezone.utc)},
            )
        return True

    # ── Read ───────────────────────────────────────────────────────────

    def team_name_exists(self, name: str) -> bool:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT 1 FROM teams WHERE LOWER(name) = LOWER(:name)"), {"name": name}
            ).fetchone()
        return row is not None

    def find_member_conflicts(self, dnis: List[str], emails: List[str],
                              utp_codes: List[str]) -> List[Dict[str, Any]]:
        """Stored members whose dni, email or institutional code matches any given value."""
        if not (dnis or emails or utp_codes):
            return []
        params: Dict[str, Any] = {}
        clauses = []
        for col, values in (("dni", dnis), ("email", emails), ("utp_code", utp_codes)):
            if not values:
                continue
            names = []
            for i, value in enumerate(values):
                key = f"{col}_{i}"
                params[key] = value
                names.append(f":{key}")
            clauses.append(f"{col} IN ({', '.join(names)})")

        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT team_id, dni, email, utp_code FROM team_members WHERE {' OR '.join(clauses)}"),
                params,
            ).fetchall()
        return [
            {"team_id": str(r[0]), "dni": r[1], "email": r[2], "utp_code": r[3]}
            for r in rows
        ]

    def get_team(self, team_id: str) -> Optional[Dict[str, Any]]:
        """Read a team back with its members. No endpoint exposes this; it
        exists for tests and operator scripts checking what was stored."""
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT id, name, amount, description, created_at FROM teams WHERE id = :id"),
                {"id": team_id},
            ).fetchone()
            if not row:
                return None
            member_rows = conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM team_members WHERE team_id = :id ORDER BY created_at, name"),
                {"id": team_id},
            ).fetchall()
        return {
            "id": str(row[0]), "name": row[1], "amount": row[2],
            "description": row[3], "created_at": _ts(row[4]),
            "members": [
                {"id": str(m[0]), "team_id": str(m[1]), "name": m[2], "last_name": m[3],
                 "dni": m[4], "utp_code": m[5], "phone": m[6], "email": m[7],
                 "degree": m[8], "created_at": _ts(m[9])}
                for m in member_rows
            ],
        }

    def count_teams(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM teams")).scalar() or 0

    def count_members(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM team_members")).scalar() or 0

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self):
        self._engine.dispose()
