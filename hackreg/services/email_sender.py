# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Registration emails: per-member confirmation plus an admin summary.

Delivery goes through AWS SES v2 when ``EMAIL_BACKEND=ses``; any other
backend only logs the message, like the other mock channels.
"""
from html import escape
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from hackreg.core.config import settings
from hackreg.core.logging import get_logger
from hackreg.errors import NotificationError
from hackreg.metrics import EMAILS_SENT

logger = get_logger(__name__)

CONFIRMATION_TEMPLATE = """
<html>
  <body style="font-family: monospace; margin: 0; padding: 1rem;">
    <div style="font-weight: bold; font-size: large">Welcome to</div>
    <div style="font-weight: bold; font-size: xx-large">{event}</div>
    <br />
    <p>Hi, {user}</p>
    <p>
      This email confirms your registration<br />
      in the team: {team}<br />
      <br />
      Thanks for signing up for {event}.<br />
      We will send more details about the event soon.<br />
    </p>
    <span style="font-weight: lighter; font-size: small">
      This is an automated message, there is no need to reply.
    </span>
    <p style="color: #02c8ed">Contact: {admin}</p>
  </body>
</html>
"""


def render_confirmation(member_name: str, team_name: str) -> str:
    return CONFIRMATION_TEMPLATE.format(
        event=escape(settings.EVENT_NAME), user=escape(member_name),
        team=escape(team_name), admin=escape(settings.ADMIN_EMAIL),
    )


def render_admin_summary(team_name: str, members: List[Dict[str, str]]) -> str:
    lines = "\n".join(f"- {m['name']} ({m['email']})" for m in members)
    return f"New team registered: {team_name}\n\nMembers:\n{lines}"


class EmailSender:
    def __init__(self, backend: Optional[str] = None, client=None):
        self._backend = (backend or settings.EMAIL_BACKEND).lower()
        self._client = client

    def _ses(self):
        if self._client is None:
            self._client = boto3.client("sesv2", region_name=settings.AWS_REGION)
        return self._client

    def _deliver(self, kind: str, to: str, subject: str, body: str, html: bool) -> bool:
        if self._backend != "ses":
            logger.info("[MOCK EMAIL] To: %s | Subject: %s | Kind: %s", to, subject, kind)
            EMAILS_SENT.labels(kind=kind, status="sent").inc()
            return True

        content = {"Html": {"Data": body}} if html else {"Text": {"Data": body}}
        try:
            self._ses().send_email(
                FromEmailAddress=settings.EMAIL_FROM,
                Destination={"ToAddresses": [to]},
                Content={"Simple": {"Subject": {"Data": subject}, "Body": content}},
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("SES delivery to %s failed: %s", to, exc)
            EMAILS_SENT.labels(kind=kind, status="failed").inc()
            return False
        EMAILS_SENT.labels(kind=kind, status="sent").inc()
        return True

    def send_registration_emails(self, team_name: str, members: List[Dict[str, str]]) -> int:
        """Send every message even if some fail; raise NotificationError afterwards
        naming the recipients that did not get theirs. Returns the sent count."""
        logger.info("Sending registration emails for team %s to %s",
                    team_name, ", ".join(m["email"] for m in members))
        subject = f"Welcome to {settings.EVENT_NAME}"
        failed = []
        sent = 0
        for member in members:
            ok = self._deliver("confirmation", member["email"], subject,
                               render_confirmation(member["name"], team_name), html=True)
            if ok:
                sent += 1
            else:
                failed.append(member["email"])

        if self._deliver("admin", settings.ADMIN_EMAIL, f"New team: {team_name}",
                         render_admin_summary(team_name, members), html=False):
            sent += 1
        else:
            failed.append(settings.ADMIN_EMAIL)

        if failed:
            raise NotificationError(f"Email delivery failed for: {', '.join(failed)}")
        return sent
