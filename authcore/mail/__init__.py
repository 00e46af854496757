"""Provides a unified API for sending transactional e-mail."""

import smtplib
import logging
from abc import ABC, abstractmethod
from email.message import EmailMessage
from email.utils import make_msgid
from typing import List, NamedTuple, Optional

logger = logging.getLogger(__name__)


class SendResult(NamedTuple):
    """Outcome of an attempt to send a message."""

    delivery_id: Optional[str] = None
    """Identifier assigned to the message, if it was accepted for delivery."""

    error: Optional[str] = None
    """Why the message was not accepted, if it wasn't."""


class Mailer(ABC):
    """Best-effort outbound e-mail."""

    @abstractmethod
    def send(self, to: str, subject: str, html: str) -> SendResult:
        """
        Send an HTML message to ``to``.

        Delivery failures are reported in the returned :class:`.SendResult`
        rather than raised.
        """


class SMTPMailer(Mailer):
    """Sends mail through an SMTP relay."""

    def __init__(self, host: str = 'localhost', port: int = 25,
                 sender: str = 'no-reply@localhost', user: str = '',
                 password: str = '', timeout: int = 30) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._user = user
        self._password = password
        self._timeout = timeout

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self._host, port=self._port,
                            timeout=self._timeout)

    def send(self, to: str, subject: str, html: str) -> SendResult:
        try:
            # Header values with line breaks are refused here.
            message = EmailMessage()
            message['Subject'] = subject
            message['From'] = self._sender
            message['To'] = to
            message['Message-ID'] = make_msgid()
            message.set_content(html, subtype='html')
            with self._new_connection() as conn:
                if self._user:
                    conn.starttls()
                    conn.login(self._user, self._password)
                conn.send_message(message)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.error('Could not send mail to %s: %s', to, e)
            return SendResult(error=f'{type(e).__name__} - {e}')
        return SendResult(delivery_id=message['Message-ID'])


class SentMessage(NamedTuple):
    """A message kept by :class:`.RecordingMailer`."""

    to: str
    subject: str
    html: str
    delivery_id: str


class RecordingMailer(Mailer):
    """
    Keeps messages in memory instead of sending them.

    For development and testing. Set :attr:`.fail` to make every subsequent
    send report an error.
    """

    def __init__(self) -> None:
        self.outbox: List[SentMessage] = []
        self.fail = False

    def send(self, to: str, subject: str, html: str) -> SendResult:
        if self.fail:
            return SendResult(error='DeliveryError - mailer is failing')
        delivery_id = make_msgid()
        self.outbox.append(SentMessage(to, subject, html, delivery_id))
        logger.debug('Recorded message %s to %s', delivery_id, to)
        return SendResult(delivery_id=delivery_id)
