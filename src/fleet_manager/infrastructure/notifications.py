"""Password recovery delivery."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from fleet_manager.application.ports.gateways import PasswordRecoveryNotifier
from fleet_manager.infrastructure.logging import get_logger, log_with_extra

RECOVERY_SUBJECT = "Password Recovery - Fleet Management"

_RECOVERY_TEXT = """\
Password Recovery

We received a request to reset your password.

Open the following link to choose a new password:
{link}

If you did not request this change you can ignore this email. The link expires in 1 hour.
"""

_RECOVERY_HTML = """\
<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <h2>Password Recovery</h2>
  <p>We received a request to reset your password.</p>
  <p><a href="{link}">Reset password</a></p>
  <p style="font-size: 12px; color: #666;">
    If you did not request this change you can ignore this email. The link expires in 1 hour.<br>
    If the button does not work, paste this link in your browser: {link}
  </p>
</body>
</html>
"""


def build_recovery_message(sender: str, recipient: str, link: str) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = RECOVERY_SUBJECT
    message["From"] = sender
    message["To"] = recipient
    message.set_content(_RECOVERY_TEXT.format(link=link))
    message.add_alternative(_RECOVERY_HTML.format(link=link), subtype="html")
    return message


class SMTPRecoveryNotifier(PasswordRecoveryNotifier):
    """Sends recovery links over SMTP with STARTTLS when credentials are configured."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: str = "noreply@fleet.local",
        timeout: float = 10.0
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def send_recovery_link(self, email: str, link: str) -> None:
        message = build_recovery_message(self._sender, email, link)
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._send, message)
        self._logger.info(f"Recovery email sent via {self._host}:{self._port}")

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as client:
            if self._username:
                client.starttls()
                client.login(self._username, self._password or "")
            client.send_message(message)


class LoggingRecoveryNotifier(PasswordRecoveryNotifier):
    """Logs recovery links instead of mailing them; used when SMTP is not configured."""

    def __init__(self):
        self._logger = get_logger(__name__)

    async def send_recovery_link(self, email: str, link: str) -> None:
        log_with_extra(
            self._logger,
            logging.INFO,
            "SMTP not configured, recovery link logged instead of mailed",
            recipient=email,
            recovery_link=link
        )
