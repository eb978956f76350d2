"""
E-mail notification service.

Handles:
- Payment confirmation e-mails after a payment is recorded
- Welcome e-mails when a family is registered
- An in-memory outbox that services publish to after commit
- A worker that drains the outbox; delivery failures are logged, never raised
- Mock/in-memory transport for testing
"""

import html
import logging
import re
import smtplib
import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from datetime import date
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Dict, Optional

from parish_ledger.config import Settings
from parish_ledger.errors import DependencyError
from parish_ledger.services.locale_service import (
    DEFAULT_CURRENCY,
    DEFAULT_LOCALE,
    format_amount,
    format_payment_date,
)
from parish_ledger.services.month_policy import MonthRangePolicy

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")


class NotificationTransport(ABC):
    """Abstract base class for e-mail transports."""

    @abstractmethod
    def send(self, to: str, subject: str, html_body: str, text_body: str | None = None) -> bool:
        """Send one e-mail.

        Args:
            to: Recipient address
            subject: Subject line
            html_body: HTML body
            text_body: Plain-text body (derived from the HTML when omitted)

        Returns:
            bool: True if the message was handed to the channel

        Raises:
            DependencyError: If the channel is unavailable
        """


class MockTransport(NotificationTransport):
    """In-memory mock transport for testing.

    Stores all messages in memory instead of sending them.
    """

    def __init__(self):
        """Initialize with empty message log."""
        self.messages: list[Dict[str, Any]] = []

    def send(self, to: str, subject: str, html_body: str, text_body: str | None = None) -> bool:
        self.messages.append(
            {
                "to": to,
                "subject": subject,
                "html": html_body,
                "text": text_body or _strip_tags(html_body),
            }
        )
        logger.debug(f"[MOCK] E-mail queued for {to}: {subject}")
        return True

    def get_messages(self, to: Optional[str] = None) -> list[Dict[str, Any]]:
        """Retrieve stored messages, optionally filtered by recipient."""
        if to is None:
            return self.messages
        return [m for m in self.messages if m["to"] == to]

    def clear(self):
        """Clear all stored messages."""
        self.messages = []


class SmtpTransport(NotificationTransport):
    """SMTP transport using smtplib (STARTTLS, or implicit TLS on port 465)."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_name: str,
        timeout: int = 20,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_name = from_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpTransport":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            from_name=settings.smtp_from_name,
            timeout=settings.smtp_timeout_seconds,
        )

    def _build_message(self, to: str, subject: str, html_body: str, text_body: str | None) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.from_name, self.username))
        message["To"] = to
        message.set_content(text_body or _strip_tags(html_body))
        message.add_alternative(html_body, subtype="html")
        return message

    def send(self, to: str, subject: str, html_body: str, text_body: str | None = None) -> bool:
        message = self._build_message(to, subject, html_body, text_body)
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                    server.login(self.username, self.password)
                    server.send_message(message)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.starttls()
                    server.login(self.username, self.password)
                    server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DependencyError(f"E-mail delivery to {to} failed: {e}") from e

        logger.info(f"E-mail sent to {to}: {subject}")
        return True


def _strip_tags(html_body: str) -> str:
    return _TAG_RE.sub("", html_body).strip()


@dataclass(frozen=True)
class PaymentRecorded:
    """Emitted after a payment upsert has been committed."""

    email: str
    head_name: str
    card_no: str
    month: str
    amount_paid: int
    payment_date: date
    remarks: str | None = None


@dataclass(frozen=True)
class FamilyRegistered:
    """Emitted after a new family has been committed."""

    email: str
    head_name: str
    card_no: str
    unit_name: str


class NotificationOutbox:
    """Thread-safe in-memory queue of notification events."""

    def __init__(self):
        self._events: deque = deque()
        self._lock = threading.Lock()

    def publish(self, event) -> None:
        with self._lock:
            self._events.append(event)

    def drain(self) -> list:
        """Remove and return every queued event, oldest first."""
        with self._lock:
            events = list(self._events)
            self._events.clear()
        return events

    def __len__(self) -> int:
        return len(self._events)


class EmailNotifier:
    """Renders notification events into e-mails and hands them to a transport."""

    def __init__(
        self,
        transport: NotificationTransport,
        policy: MonthRangePolicy,
        church_name: str = "Holy Cross Church",
        locale: str = DEFAULT_LOCALE,
        currency: str = DEFAULT_CURRENCY,
    ):
        self.transport = transport
        self.policy = policy
        self.church_name = church_name
        self.locale = locale
        self.currency = currency

    def deliver(self, event) -> bool:
        if isinstance(event, PaymentRecorded):
            return self.send_payment_confirmation(event)
        if isinstance(event, FamilyRegistered):
            return self.send_welcome(event)
        raise TypeError(f"Unsupported notification event: {type(event).__name__}")

    def send_payment_confirmation(self, event: PaymentRecorded) -> bool:
        """Send a payment receipt to the family's e-mail address."""
        month_name = self.policy.format_month(event.month)
        church = html.escape(self.church_name)
        remarks = (
            f"<p><strong>Remarks:</strong> {html.escape(event.remarks)}</p>" if event.remarks else ""
        )
        body = f"""
<html>
  <body>
    <h1>Payment Received</h1>
    <h2>Dear {html.escape(event.head_name)},</h2>
    <p>Thank you for your contribution to {church}. We have received your payment.</p>
    <div>
      <h3>Payment Details:</h3>
      <p><strong>Family Card No:</strong> {html.escape(event.card_no)}</p>
      <p><strong>Month:</strong> {month_name}</p>
      <p><strong>Amount Paid:</strong> {format_amount(event.amount_paid, self.currency, self.locale)}</p>
      <p><strong>Payment Date:</strong> {format_payment_date(event.payment_date, self.locale)}</p>
      {remarks}
    </div>
    <p><strong>In Christ,</strong><br>{church} Administration</p>
    <p>This is an automated receipt. Please keep this e-mail for your records.</p>
  </body>
</html>
"""
        subject = f"Payment Confirmation - {month_name} - {self.church_name}"
        return self.transport.send(event.email, subject, body)

    def send_welcome(self, event: FamilyRegistered) -> bool:
        """Send a registration confirmation to a newly registered family."""
        church = html.escape(self.church_name)
        body = f"""
<html>
  <body>
    <h1>Welcome to {church}</h1>
    <h2>Dear {html.escape(event.head_name)},</h2>
    <p>We are delighted to welcome your family to our church community!</p>
    <div>
      <h3>Your Family Details:</h3>
      <p><strong>Family Card No:</strong> {html.escape(event.card_no)}</p>
      <p><strong>Head of Family:</strong> {html.escape(event.head_name)}</p>
      <p><strong>Unit:</strong> {html.escape(event.unit_name)}</p>
    </div>
    <p>You will receive notifications for important updates and payment confirmations.</p>
    <p><strong>In Christ,</strong><br>{church} Administration</p>
  </body>
</html>
"""
        subject = f"Welcome to {self.church_name} - Family Registration Confirmed"
        return self.transport.send(event.email, subject, body)


class NotificationWorker:
    """Drains the outbox and delivers each event.

    Delivery is best-effort: failures are logged and dropped so that they can
    never affect the write that produced the event.
    """

    def __init__(self, outbox: NotificationOutbox, notifier: EmailNotifier):
        self.outbox = outbox
        self.notifier = notifier

    def run_pending(self) -> int:
        """Deliver every queued event.

        Returns:
            Number of events delivered successfully
        """
        delivered = 0
        for event in self.outbox.drain():
            try:
                if self.notifier.deliver(event):
                    delivered += 1
            except DependencyError as e:
                logger.error(f"Notification channel unavailable for {event.email}: {e.message}")
            except Exception:
                logger.exception(f"Failed to deliver {type(event).__name__} to {event.email}")
        return delivered


__all__ = [
    "NotificationTransport",
    "MockTransport",
    "SmtpTransport",
    "PaymentRecorded",
    "FamilyRegistered",
    "NotificationOutbox",
    "EmailNotifier",
    "NotificationWorker",
]
