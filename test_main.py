"""
Hackathon Registration Service: Unit Tests
============================================
Run:  pytest test_main.py -v --cov=main --cov=hackreg --cov-report=term-missing
"""
import json
import logging
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import httpx
import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from main import app
from hackreg import validation as rules
from hackreg.core.config import settings
from hackreg.core.database import build_engine
from hackreg.core.logging import JSONFormatter
from hackreg.core.dependencies import get_registration_service
from hackreg.errors import (
    NotificationError, VerificationError, VerificationUnavailableError,
)
from hackreg.repositories.registration_repository import RegistrationRepository
from hackreg.services.email_sender import EmailSender, render_admin_summary, render_confirmation
from hackreg.services.registration_service import RegistrationService, parse_deadline
from hackreg.services.turnstile_client import TurnstileVerifier

DEADLINE = parse_deadline("2026-11-30T23:59:59-05:00")
BEFORE_DEADLINE = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
AFTER_DEADLINE = datetime(2026, 12, 1, 12, 0, tzinfo=timezone.utc)
AUTH = {"Authorization": "Bearer test-token"}
URL = "/api/v1/register"


# ── Helpers ──────────────────────────────────────────────────────────────
def _member(i, **overrides):
    m = {
        "name": f"Name{i}",
        "last_name": f"Surname{i}",
        "dni": f"{70000000 + i}",
        "utp_code": f"u{20000000 + i}",
        "phone": f"9{i:08d}",
        "email": f"Member{i}@UTP.edu.pe",
        "degree": "Systems Engineering",
    }
    m.update(overrides)
    return m


def _payload(name="Code Warriors", amount=4, start=1, count=None, members=None):
    if members is None:
        members = [_member(i) for i in range(start, start + (count or amount))]
    return {
        "team": {"name": name, "amount": amount, "description": "Sustainability and Environment"},
        "members": members,
    }


def _fields(response):
    return {d["field"]: d["message"] for d in response.json().get("details", [])}


# ── Fixtures ─────────────────────────────────────────────────────────────
@pytest.fixture
def repo():
    r = RegistrationRepository(build_engine("sqlite://"))
    r.create_schema()
    yield r
    r.dispose()


@pytest.fixture
def verifier():
    return MagicMock()


@pytest.fixture
def email_sender():
    sender = MagicMock()
    sender.send_registration_emails.return_value = 5
    return sender


@pytest.fixture
def clock():
    return MagicMock(return_value=BEFORE_DEADLINE)


@pytest.fixture
def service(repo, verifier, email_sender, clock):
    return RegistrationService(repo, verifier, email_sender, deadline=DEADLINE, clock=clock)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_registration_service] = lambda: service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH & METRICS
# ═══════════════════════════════════════════════════════════════════════════
class TestHealth:
    def test_health_ok(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
        assert r.json()["service"] == "hackathon-registration"

    def test_readiness_ok(self, client, repo):
        with patch("hackreg.controllers.system_controller.get_registration_repo", return_value=repo):
            r = client.get("/health/ready")
        assert r.status_code == 200
        assert r.json() == {"status": "ok", "database": "connected", "teams": 0, "members": 0}

    def test_readiness_reports_counts(self, client, repo):
        assert client.post(URL, json=_payload(amount=5), headers=AUTH).status_code == 201
        with patch("hackreg.controllers.system_controller.get_registration_repo", return_value=repo):
            r = client.get("/health/ready")
        assert r.json()["teams"] == 1
        assert r.json()["members"] == 5

    def test_readiness_fails_when_db_down(self, client):
        broken = MagicMock()
        broken.verify_connection.side_effect = SQLAlchemyError("boom")
        with patch("hackreg.controllers.system_controller.get_registration_repo", return_value=broken):
            r = client.get("/health/ready")
        assert r.status_code == 503
        assert r.json()["status"] == "degraded"

    def test_metrics_endpoint(self, client):
        client.post(URL, json=_payload(), headers=AUTH)
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "registrations_total" in r.text

    def test_request_id_propagated(self, client):
        r = client.post(URL, json=_payload(), headers={**AUTH, "X-Request-ID": "req-42"})
        assert r.headers["X-Request-ID"] == "req-42"

    def test_request_id_generated(self, client):
        r = client.get("/health")
        assert r.headers.get("X-Request-ID")


# ═══════════════════════════════════════════════════════════════════════════
# POST /api/v1/register: HAPPY PATH
# ═══════════════════════════════════════════════════════════════════════════
class TestRegister:
    def test_register_success(self, client, repo, email_sender):
        r = client.post(URL, json=_payload(), headers=AUTH)
        assert r.status_code == 201
        body = r.json()
        assert body["message"] == "Team registered successfully"
        assert body["teamName"] == "Code Warriors"

        team = repo.get_team(body["teamId"])
        assert team["amount"] == 4
        assert len(team["members"]) == 4
        stored = {m["dni"]: m for m in team["members"]}
        assert stored["70000001"]["email"] == "member1@utp.edu.pe"
        assert stored["70000001"]["utp_code"] == "U20000001"

        email_sender.send_registration_emails.assert_called_once()
        team_name, recipients = email_sender.send_registration_emails.call_args[0]
        assert team_name == "Code Warriors"
        assert {"name": "Name1 Surname1", "email": "member1@utp.edu.pe"} in recipients
        assert len(recipients) == 4

    @pytest.mark.parametrize("amount", [4, 5, 6])
    def test_allowed_team_sizes(self, client, repo, amount):
        r = client.post(URL, json=_payload(amount=amount), headers=AUTH)
        assert r.status_code == 201
        assert repo.count_members() == amount

    def test_verifier_receives_token_and_ip(self, client, verifier):
        client.post(URL, json=_payload(), headers=AUTH)
        token, remote_ip = verifier.verify.call_args[0]
        assert token == "test-token"
        assert remote_ip == "testclient"

    def test_email_failure_still_created(self, client, repo, email_sender):
        email_sender.send_registration_emails.side_effect = NotificationError("SES down")
        r = client.post(URL, json=_payload(), headers=AUTH)
        assert r.status_code == 201
        assert repo.count_teams() == 1

    def test_email_unexpected_failure_still_created(self, client, email_sender):
        email_sender.send_registration_emails.side_effect = RuntimeError("boom")
        assert client.post(URL, json=_payload(), headers=AUTH).status_code == 201


# ═══════════════════════════════════════════════════════════════════════════
# SCHEMA VALIDATION
# ═══════════════════════════════════════════════════════════════════════════
class TestSchemaValidation:
    @pytest.mark.parametrize("amount", [3, 7])
    def test_team_size_out_of_range(self, client, repo, amount):
        r = client.post(URL, json=_payload(amount=amount), headers=AUTH)
        assert r.status_code == 400
        assert "team.amount" in _fields(r)
        assert repo.count_teams() == 0

    def test_dni_seven_digits(self, client, repo):
        members = [_member(i) for i in range(1, 5)]
        members[1]["dni"] = "1234567"
        r = client.post(URL, json=_payload(members=members), headers=AUTH)
        assert r.status_code == 400
        assert _fields(r)["members[1].dni"] == rules.MESSAGES[rules.DNI]
        assert repo.count_teams() == 0

    def test_invalid_utp_code(self, client):
        members = [_member(i) for i in range(1, 5)]
        members[0]["utp_code"] = "12345678"
        r = client.post(URL, json=_payload(members=members), headers=AUTH)
        assert r.status_code == 400
        assert "members[0].utp_code" in _fields(r)

    def test_invalid_phone(self, client):
        members = [_member(i) for i in range(1, 5)]
        members[2]["phone"] = "98765"
        r = client.post(URL, json=_payload(members=members), headers=AUTH)
        assert _fields(r)["members[2].phone"] == rules.MESSAGES[rules.PHONE]

    def test_all_failures_reported_together(self, client):
        members = [_member(i) for i in range(1, 5)]
        members[0]["email"] = "not-an-email"
        members[3]["dni"] = "abc"
        r = client.post(URL, json=_payload(members=members), headers=AUTH)
        assert r.status_code == 400
        assert r.json()["error"] == "Invalid registration data"
        fields = _fields(r)
        assert "members[0].email" in fields
        assert "members[3].dni" in fields

    def test_declared_amount_mismatch(self, client):
        r = client.post(URL, json=_payload(amount=5, count=4), headers=AUTH)
        assert r.status_code == 400
        assert _fields(r)["members"] == "Team declares 5 members but 4 were submitted"

    def test_float_amount_mismatch(self, client, repo):
        payload = _payload(amount=4, count=5)
        payload["team"]["amount"] = 4.0
        r = client.post(URL, json=payload, headers=AUTH)
        assert r.status_code == 400
        assert _fields(r)["members"] == "Team declares 4 members but 5 were submitted"
        assert repo.count_teams() == 0

    def test_float_amount_matching_is_accepted(self, client, repo):
        payload = _payload(amount=4)
        payload["team"]["amount"] = 4.0
        assert client.post(URL, json=payload, headers=AUTH).status_code == 201
        assert repo.count_teams() == 1
        assert repo.count_members() == 4

    def test_duplicate_dni_within_team(self, client):
        members = [_member(i) for i in range(1, 5)]
        members[2]["dni"] = members[0]["dni"]
        r = client.post(URL, json=_payload(members=members), headers=AUTH)
        assert r.status_code == 400
        fields = _fields(r)
        assert "members 1, 3" in fields["members[0].dni"]
        assert "members 1, 3" in fields["members[2].dni"]

    def test_duplicate_email_within_team_ignores_case(self, client):
        members = [_member(i) for i in range(1, 5)]
        members[3]["email"] = "MEMBER2@utp.edu.pe"
        r = client.post(URL, json=_payload(members=members), headers=AUTH)
        assert r.status_code == 400
        assert "members[1].email" in _fields(r)
        assert "members[3].email" in _fields(r)

    def test_missing_team(self, client):
        r = client.post(URL, json={"members": [_member(i) for i in range(1, 5)]}, headers=AUTH)
        assert r.status_code == 400
        assert "team" in _fields(r)

    def test_body_not_object(self, client):
        r = client.post(URL, content="[]", headers=AUTH)
        assert r.status_code == 400
        assert "body" in _fields(r)


# ═══════════════════════════════════════════════════════════════════════════
# MALFORMED INPUT, VERIFICATION & DEADLINE
# ═══════════════════════════════════════════════════════════════════════════
class TestGates:
    def test_malformed_json(self, client):
        r = client.post(URL, content="{not json", headers=AUTH)
        assert r.status_code == 400
        assert r.json() == {"error": "Malformed JSON body"}

    def test_empty_body(self, client):
        r = client.post(URL, content="", headers=AUTH)
        assert r.status_code == 400
        assert r.json() == {"error": "Request body is empty"}

    def test_missing_token(self, repo, email_sender):
        svc = RegistrationService(repo, TurnstileVerifier(secret_key="", mode="mock"), email_sender,
                                  deadline=DEADLINE, clock=lambda: BEFORE_DEADLINE)
        app.dependency_overrides[get_registration_service] = lambda: svc
        try:
            c = TestClient(app)
            r = c.post(URL, json=_payload())
            assert r.status_code == 400
            assert r.json()["error"] == "Verification token is required"
            assert c.post(URL, json=_payload(), headers={"Authorization": "Basic abc"}).status_code == 400
            assert c.post(URL, json=_payload(), headers=AUTH).status_code == 201
        finally:
            app.dependency_overrides.clear()

    def test_verification_runs_before_parsing(self, client, verifier):
        verifier.verify.side_effect = VerificationError("Verification failed")
        r = client.post(URL, content="{not json", headers=AUTH)
        assert r.status_code == 400
        assert r.json() == {"error": "Verification failed"}

    def test_verifier_unavailable(self, client, repo, verifier):
        verifier.verify.side_effect = VerificationUnavailableError("Verification service unavailable")
        r = client.post(URL, json=_payload(), headers=AUTH)
        assert r.status_code == 500
        assert repo.count_teams() == 0

    def test_deadline_passed(self, client, clock, verifier, repo):
        clock.return_value = AFTER_DEADLINE
        r = client.post(URL, json=_payload(), headers=AUTH)
        assert r.status_code == 400
        assert r.json() == {"error": "Registration is closed"}
        verifier.verify.assert_not_called()
        assert repo.count_teams() == 0

    def test_deadline_checked_before_body(self, client, clock):
        clock.return_value = AFTER_DEADLINE
        r = client.post(URL, content="{not json", headers=AUTH)
        assert r.json() == {"error": "Registration is closed"}


# ═══════════════════════════════════════════════════════════════════════════
# UNIQUENESS
# ═══════════════════════════════════════════════════════════════════════════
class TestUniqueness:
    def test_duplicate_team_name(self, client, repo):
        assert client.post(URL, json=_payload(), headers=AUTH).status_code == 201
        r = client.post(URL, json=_payload(name="CODE WARRIORS", start=11), headers=AUTH)
        assert r.status_code == 409
        assert r.json()["error"] == "A team with that name is already registered"
        assert repo.count_teams() == 1

    def test_member_already_registered(self, client, repo):
        assert client.post(URL, json=_payload(), headers=AUTH).status_code == 201
        members = [_member(i) for i in range(11, 15)]
        members[0]["dni"] = "70000001"
        members[2]["email"] = "member3@utp.edu.pe"
        r = client.post(URL, json=_payload(name="Other Team", members=members), headers=AUTH)
        assert r.status_code == 409
        fields = _fields(r)
        assert "members[0].dni" in fields
        assert "members[2].email" in fields
        assert repo.count_teams() == 1
        assert repo.count_members() == 4

    def test_utp_code_already_registered(self, client):
        client.post(URL, json=_payload(), headers=AUTH)
        members = [_member(i) for i in range(11, 15)]
        members[1]["utp_code"] = "U20000002"
        r = client.post(URL, json=_payload(name="Other Team", members=members), headers=AUTH)
        assert r.status_code == 409
        assert "members[1].utp_code" in _fields(r)

    def test_lookup_failure(self, client, repo):
        with patch.object(repo, "team_name_exists", side_effect=SQLAlchemyError("down")):
            r = client.post(URL, json=_payload(), headers=AUTH)
        assert r.status_code == 500
        assert r.json() == {"error": "Database error"}


# ═══════════════════════════════════════════════════════════════════════════
# PERSISTENCE
# ═══════════════════════════════════════════════════════════════════════════
class TestPersistence:
    def test_team_insert_failure(self, client, repo, email_sender):
        with patch.object(repo, "insert_team", side_effect=SQLAlchemyError("down")):
            r = client.post(URL, json=_payload(), headers=AUTH)
        assert r.status_code == 500
        assert r.json() == {"error": "Could not create the team"}
        email_sender.send_registration_emails.assert_not_called()

    def test_member_failure_deletes_team(self, client, repo, email_sender):
        with patch.object(repo, "insert_members", side_effect=SQLAlchemyError("constraint")):
            r = client.post(URL, json=_payload(), headers=AUTH)
        assert r.status_code == 500
        assert r.json() == {"error": "Could not register the team members"}
        assert repo.count_teams() == 0
        assert repo.count_members() == 0
        email_sender.send_registration_emails.assert_not_called()

    def test_failed_compensating_delete_still_500(self, client, repo):
        with patch.object(repo, "insert_members", side_effect=SQLAlchemyError("constraint")), \
                patch.object(repo, "delete_team", side_effect=SQLAlchemyError("gone")):
            r = client.post(URL, json=_payload(), headers=AUTH)
        assert r.status_code == 500
        assert repo.count_teams() == 1

    def test_unexpected_error_is_generic_500(self, client, repo):
        with patch.object(repo, "team_name_exists", side_effect=RuntimeError("boom")):
            r = client.post(URL, json=_payload(), headers=AUTH)
        assert r.status_code == 500
        assert r.json() == {"error": "internal_server_error"}


# ═══════════════════════════════════════════════════════════════════════════
# POST /api/v1/registry: INTEREST LIST
# ═══════════════════════════════════════════════════════════════════════════
class TestPreRegistration:
    def test_register_then_duplicate(self, client):
        r = client.post("/api/v1/registry", json={"email": "someone@utp.edu.pe"})
        assert r.status_code == 200
        assert r.json() == {"message": "Email registered"}
        r = client.post("/api/v1/registry", json={"email": " SOMEONE@utp.edu.pe "})
        assert r.json() == {"message": "Email already registered"}

    def test_invalid_email(self, client):
        r = client.post("/api/v1/registry", json={"email": "nope"})
        assert r.status_code == 400
        assert _fields(r)["email"] == rules.MESSAGES[rules.EMAIL]

    def test_malformed_body(self, client):
        assert client.post("/api/v1/registry", content="{").status_code == 400
        assert client.post("/api/v1/registry", content="[1]").status_code == 400


# ═══════════════════════════════════════════════════════════════════════════
# REPOSITORY
# ═══════════════════════════════════════════════════════════════════════════
class TestRepository:
    def test_delete_team_is_idempotent(self, repo):
        team_id = repo.insert_team("Team", 4, "desc")
        repo.insert_members(team_id, [_member(1, email="a@b.co")])
        assert repo.delete_team(team_id) == 1
        assert repo.delete_team(team_id) == 0
        assert repo.count_members() == 0

    def test_find_member_conflicts(self, repo):
        team_id = repo.insert_team("Team", 4, "desc")
        repo.insert_members(team_id, [_member(1, email="a@b.co", utp_code="U20000001")])
        rows = repo.find_member_conflicts(["99999999"], ["a@b.co"], [])
        assert len(rows) == 1
        assert rows[0]["team_id"] == team_id
        assert repo.find_member_conflicts(["99999999"], [], ["U00000000"]) == []
        assert repo.find_member_conflicts([], [], []) == []

    def test_get_team_missing(self, repo):
        assert repo.get_team("nope") is None

    def test_team_name_case_insensitive(self, repo):
        repo.insert_team("Byte Me", 4, "desc")
        assert repo.team_name_exists("byte me")
        assert not repo.team_name_exists("byte you")


# ═══════════════════════════════════════════════════════════════════════════
# TURNSTILE VERIFIER
# ═══════════════════════════════════════════════════════════════════════════
class TestTurnstileVerifier:
    def _patched_client(self, outcome=None, error=None):
        http = MagicMock()
        if error is not None:
            http.post.side_effect = error
        else:
            http.post.return_value.json.return_value = outcome
        factory = MagicMock()
        factory.return_value.__enter__.return_value = http
        factory.return_value.__exit__.return_value = False
        return factory, http

    def test_missing_token(self):
        with pytest.raises(VerificationError):
            TurnstileVerifier(secret_key="s3cret", mode="live").verify(None)

    def test_mock_mode_accepts_without_calling_out(self):
        with patch("hackreg.services.turnstile_client.httpx.Client") as factory:
            TurnstileVerifier(secret_key="", mode="mock").verify("tok")
        factory.assert_not_called()

    def test_missing_secret_is_unavailable(self):
        with patch("hackreg.services.turnstile_client.httpx.Client") as factory:
            with pytest.raises(VerificationUnavailableError):
                TurnstileVerifier(secret_key="", mode="live").verify("any-garbage-token")
        factory.assert_not_called()

    def test_mode_read_from_settings(self):
        with patch("hackreg.services.turnstile_client.settings") as cfg:
            cfg.TURNSTILE_MODE = "live"
            cfg.TURNSTILE_SECRET_KEY = ""
            cfg.TURNSTILE_VERIFY_URL = "https://verify.test"
            cfg.TURNSTILE_TIMEOUT = 1.0
            with pytest.raises(VerificationUnavailableError):
                TurnstileVerifier().verify("tok")

    def test_unconfigured_secret_returns_500(self, repo, email_sender):
        svc = RegistrationService(repo, TurnstileVerifier(secret_key="", mode="live"), email_sender,
                                  deadline=DEADLINE, clock=lambda: BEFORE_DEADLINE)
        app.dependency_overrides[get_registration_service] = lambda: svc
        try:
            r = TestClient(app).post(URL, json=_payload(), headers=AUTH)
        finally:
            app.dependency_overrides.clear()
        assert r.status_code == 500
        assert r.json() == {"error": "Verification service unavailable"}
        assert repo.count_teams() == 0

    def test_passed(self):
        factory, http = self._patched_client({"success": True})
        with patch("hackreg.services.turnstile_client.httpx.Client", factory):
            TurnstileVerifier(secret_key="s3cret", verify_url="https://verify.test", mode="live").verify("tok", "1.2.3.4")
        url = http.post.call_args[0][0]
        form = http.post.call_args[1]["data"]
        assert url == "https://verify.test"
        assert form == {"secret": "s3cret", "response": "tok", "remoteip": "1.2.3.4"}

    def test_rejected(self):
        factory, _ = self._patched_client({"success": False, "error-codes": ["invalid-input-response"]})
        with patch("hackreg.services.turnstile_client.httpx.Client", factory):
            with pytest.raises(VerificationError) as exc:
                TurnstileVerifier(secret_key="s3cret", mode="live").verify("tok")
        assert exc.value.message == "Verification failed"

    def test_unreachable(self):
        factory, _ = self._patched_client(error=httpx.ConnectError("down"))
        with patch("hackreg.services.turnstile_client.httpx.Client", factory):
            with pytest.raises(VerificationUnavailableError):
                TurnstileVerifier(secret_key="s3cret", mode="live").verify("tok")


# ═══════════════════════════════════════════════════════════════════════════
# EMAIL SENDER
# ═══════════════════════════════════════════════════════════════════════════
MEMBERS = [
    {"name": "Ana Perez", "email": "ana@utp.edu.pe"},
    {"name": "Luis Rojas", "email": "luis@utp.edu.pe"},
]


class TestEmailSender:
    def test_mock_backend_sends_all(self):
        ses = MagicMock()
        assert EmailSender(backend="mock", client=ses).send_registration_emails("Team", MEMBERS) == 3
        ses.send_email.assert_not_called()

    def test_ses_backend(self):
        ses = MagicMock()
        sent = EmailSender(backend="ses", client=ses).send_registration_emails("Team", MEMBERS)
        assert sent == 3
        assert ses.send_email.call_count == 3
        first = ses.send_email.call_args_list[0][1]
        assert first["Destination"] == {"ToAddresses": ["ana@utp.edu.pe"]}
        assert "Html" in first["Content"]["Simple"]["Body"]
        admin = ses.send_email.call_args_list[2][1]
        assert "Text" in admin["Content"]["Simple"]["Body"]

    def test_partial_failure_attempts_everyone(self):
        ses = MagicMock()
        ses.send_email.side_effect = [
            {"MessageId": "1"},
            ClientError({"Error": {"Code": "MessageRejected", "Message": "no"}}, "SendEmail"),
            {"MessageId": "3"},
        ]
        with pytest.raises(NotificationError) as exc:
            EmailSender(backend="ses", client=ses).send_registration_emails("Team", MEMBERS)
        assert "luis@utp.edu.pe" in str(exc.value)
        assert ses.send_email.call_count == 3

    def test_confirmation_is_escaped(self):
        html = render_confirmation("Ana <b>", "Team & Co")
        assert "Ana &lt;b&gt;" in html
        assert "Team &amp; Co" in html

    def test_admin_summary(self):
        text = render_admin_summary("Team", MEMBERS)
        assert text.startswith("New team registered: Team")
        assert "- Ana Perez (ana@utp.edu.pe)" in text


# ═══════════════════════════════════════════════════════════════════════════
# SHARED FIELD RULES
# ═══════════════════════════════════════════════════════════════════════════
class TestRules:
    @pytest.mark.parametrize("kind,value,ok", [
        (rules.DNI, "12345678", True),
        (rules.DNI, "1234567", False),
        (rules.UTP_CODE, "U12345678", True),
        (rules.UTP_CODE, "u12345678", True),
        (rules.UTP_CODE, "123456789", False),
        (rules.PHONE, "987654321", True),
        (rules.PHONE, "987 654-321", True),
        (rules.PHONE, "(98) 7654321", True),
        (rules.PHONE, "98765432", False),
        (rules.EMAIL, "a@b.co", True),
        (rules.EMAIL, "a@b", False),
        (rules.NAME, "A", False),
        (rules.TEAM_NAME, "Ab", False),
        (rules.TEAM_SIZE, "4", True),
        (rules.TEAM_SIZE, "7", False),
    ])
    def test_check(self, kind, value, ok):
        assert (rules.check(kind, value) is None) == ok

    def test_required(self):
        assert rules.check(rules.EMAIL, "   ") == rules.MESSAGES[rules.REQUIRED]
        assert rules.check(rules.EMAIL, "", required=False) is None

    def test_client_phone_normalisation_matches_server(self):
        assert rules.is_valid_phone(rules.normalize_phone("987-654 321"))
        assert not rules.is_valid_phone("987-654 321")


# ═══════════════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════════════
class TestLogging:
    def _record(self, **extra):
        record = logging.LogRecord("hackreg.test", logging.INFO, __file__, 1, "hello %s", ("team",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_service_name_from_settings(self):
        line = json.loads(JSONFormatter().format(self._record()))
        assert line["service"] == settings.SERVICE_NAME
        assert line["logger"] == "hackreg.test"
        assert line["msg"] == "hello team"
        assert "request_id" not in line

    def test_context_fields(self):
        line = json.loads(JSONFormatter().format(self._record(request_id="req-1", team_id="t-9")))
        assert line["request_id"] == "req-1"
        assert line["team_id"] == "t-9"
