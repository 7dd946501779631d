# vierwandt/config.py
from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, EmailStr, ValidationError

from .errors import MailNotConfigured

logger = logging.getLogger(__name__)

DEFAULT_PUZZLES_PATH = Path(__file__).parent / "puzzles.json"
DEFAULT_EPOCH = "2025-04-09"           # rotation day 0, UTC
DEFAULT_FRONTEND_URL = "http://localhost:3000"

class MailSettings(BaseModel):
    host: str
    port: int = 587
    secure: bool = False               # implicit TLS (465) when true, STARTTLS otherwise
    user: str
    password: str
    recipient: EmailStr
    timeout: float = 30.0

class Settings(BaseModel):
    frontend_url: str = DEFAULT_FRONTEND_URL
    puzzles_path: Path = DEFAULT_PUZZLES_PATH
    epoch: Optional[date] = None
    email_host: Optional[str] = None
    email_port: int = 587
    email_secure: bool = False
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    recipient_email: Optional[str] = None
    email_timeout: float = 30.0
    log_level: str = "INFO"

    def mail(self) -> MailSettings:
        """Assemble SMTP settings; raise MailNotConfigured if anything is missing or invalid."""
        missing = [
            name for name, v in (
                ("EMAIL_HOST", self.email_host),
                ("EMAIL_USER", self.email_user),
                ("EMAIL_PASS", self.email_pass),
                ("RECIPIENT_EMAIL", self.recipient_email),
            ) if not v
        ]
        if missing:
            raise MailNotConfigured(f"missing {', '.join(missing)}")
        try:
            return MailSettings(
                host=self.email_host,
                port=self.email_port,
                secure=self.email_secure,
                user=self.email_user,
                password=self.email_pass,
                recipient=self.recipient_email,
                timeout=self.email_timeout,
            )
        except ValidationError as e:
            raise MailNotConfigured(str(e)) from e

def parse_epoch(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        logger.error("Invalid PUZZLE_EPOCH %r; expected YYYY-MM-DD", raw)
        return None

def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        logger.error("Invalid %s %r; using %s", name, raw, default)
        return default

def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        logger.error("Invalid %s %r; using %s", name, raw, default)
        return default

def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Read settings from the environment, after loading .env once (existing env wins)."""
    load_dotenv(dotenv_path or os.getenv("DOTENV_PATH", ".env"), override=False)
    return Settings(
        frontend_url=os.getenv("FRONTEND_URL", DEFAULT_FRONTEND_URL),
        puzzles_path=Path(os.getenv("PUZZLES_PATH") or DEFAULT_PUZZLES_PATH),
        epoch=parse_epoch(os.getenv("PUZZLE_EPOCH", DEFAULT_EPOCH)),
        email_host=os.getenv("EMAIL_HOST"),
        email_port=_int_env("EMAIL_PORT", 587),
        email_secure=os.getenv("EMAIL_SECURE", "").strip().lower() == "true",
        email_user=os.getenv("EMAIL_USER"),
        email_pass=os.getenv("EMAIL_PASS"),
        recipient_email=os.getenv("RECIPIENT_EMAIL"),
        email_timeout=_float_env("EMAIL_TIMEOUT", 30.0),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )

def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
