# vierwandt/mailer.py
from __future__ import annotations

import html
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Optional, Protocol

from .config import MailSettings, Settings
from .errors import DeliveryFailed, MissingField

logger = logging.getLogger(__name__)

SENDER_NAME = "Vierwandt Submissions"
NO_WORDS = "(none given)"

class Mailer(Protocol):
    def send(self, message: EmailMessage) -> None: ...

class SMTPMailer:
    """Sends one message per call over SMTP. The socket timeout bounds every call."""

    def __init__(self, settings: MailSettings):
        self.settings = settings

    def send(self, message: EmailMessage) -> None:
        s = self.settings
        if s.secure:
            with smtplib.SMTP_SSL(s.host, s.port, timeout=s.timeout,
                                  context=ssl.create_default_context()) as smtp:
                smtp.login(s.user, s.password)
                smtp.send_message(message)
        else:
            with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as smtp:
                smtp.starttls(context=ssl.create_default_context())
                smtp.login(s.user, s.password)
                smtp.send_message(message)

def _words_text(words: Any) -> str:
    if isinstance(words, list):
        words = "\n".join(str(w) for w in words if w is not None and w != "")
    elif words is not None and not isinstance(words, str):
        words = str(words)
    return words.strip() if words and words.strip() else NO_WORDS

def _one_line(value: str) -> str:
    return " ".join(value.split())

def build_message(author: str, category: str, words: Any,
                  mail: MailSettings) -> EmailMessage:
    words_text = _words_text(words)

    msg = EmailMessage()
    msg["From"] = formataddr((SENDER_NAME, mail.user))
    msg["To"] = str(mail.recipient)
    msg["Subject"] = f"New puzzle proposal: {_one_line(category)}"
    msg.set_content(
        "New proposal received:\n\n"
        f"Author: {author}\n"
        f"Category: {category}\n"
        "Suggested words:\n"
        f"{words_text}\n"
    )
    msg.add_alternative(
        "<h3>New puzzle proposal</h3>\n"
        f"<p><strong>Author:</strong> {html.escape(author)}</p>\n"
        f"<p><strong>Category:</strong> {html.escape(category)}</p>\n"
        "<p><strong>Suggested words:</strong></p>\n"
        f"<pre>{html.escape(words_text)}</pre>\n",
        subtype="html",
    )
    return msg

def relay(
    author: Any,
    category: Any,
    words: Any,
    settings: Settings,
    mailer: Optional[Mailer] = None,
) -> None:
    """
    Forward a puzzle proposal to the operator. One attempt, no retry.
    Raises MissingField, MailNotConfigured or DeliveryFailed.
    """
    author = author.strip() if isinstance(author, str) else ""
    category = category.strip() if isinstance(category, str) else ""
    if not author or not category:
        logger.warning("Submission rejected: missing author or category")
        raise MissingField("author and category are required")

    mail = settings.mail()
    try:
        message = build_message(author, category, words, mail)
    except ValueError as e:
        logger.error("Could not build the proposal mail: %s", e)
        raise DeliveryFailed("message could not be built") from e
    mailer = mailer or SMTPMailer(mail)

    logger.info("Sending puzzle proposal %r by %r", category, author)
    try:
        mailer.send(message)
    except Exception as e:
        logger.error("Sending the proposal failed: %s", e)
        raise DeliveryFailed("mail transport error") from e
    logger.info("Proposal sent")
