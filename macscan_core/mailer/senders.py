from __future__ import annotations

import json
import time
import uuid
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from macscan_core.config import Config
from macscan_core.mailer.types import DeliveryResult, EmailMessage, EmailSender
from macscan_core.errors import DeliveryError
from macscan_core.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "macscan/1.0"


class ResendEmailSender:
    backend = "resend"

    def __init__(self, *, api_key: str, api_url: str, timeout_s: float) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.timeout_s = timeout_s

    def send(self, message: EmailMessage) -> DeliveryResult:
        payload: dict[str, object] = {
            "from": message.sender,
            "to": [message.to],
            "subject": message.subject,
            "text": message.text,
        }
        if message.html:
            payload["html"] = message.html
        body = json.dumps(payload, ensure_ascii=True).encode("utf-8")
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        started = time.monotonic()
        request = Request(self.api_url, data=body, headers=headers, method="POST")
        try:
            with urlopen(request, timeout=self.timeout_s) as response:
                status_code = getattr(response, "status", None) or response.getcode()
                raw = response.read()
        except HTTPError as exc:
            reason = exc.reason if isinstance(exc.reason, str) else str(exc)
            raise DeliveryError(
                f"Email provider rejected message: HTTP {exc.code} {reason}",
                status_code=exc.code,
            ) from exc
        except URLError as exc:
            raise DeliveryError(f"Email provider unreachable: {exc.reason}") from exc

        if not 200 <= status_code < 300:
            raise DeliveryError(
                f"Email provider returned HTTP {status_code}",
                status_code=status_code,
            )

        message_id = _message_id(raw)
        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Email delivered",
            extra={
                "email_backend": self.backend,
                "message_id": message_id,
                "duration_ms": duration_ms,
                "status": "sent",
            },
        )
        return DeliveryResult(
            backend=self.backend,
            to=message.to,
            status="sent",
            message_id=message_id,
            duration_ms=duration_ms,
            status_code=status_code,
        )


class LogEmailSender:
    backend = "log"

    def send(self, message: EmailMessage) -> DeliveryResult:
        message_id = str(uuid.uuid4())
        logger.info(
            f"Email not sent (log backend): {message.subject}",
            extra={
                "email_backend": self.backend,
                "message_id": message_id,
                "status": "logged",
            },
        )
        return DeliveryResult(
            backend=self.backend,
            to=message.to,
            status="logged",
            message_id=message_id,
            duration_ms=0,
        )


def build_sender(config: Config) -> EmailSender:
    if config.email_backend == "resend":
        if not config.resend_api_key:
            raise ValueError("RESEND_API_KEY is required for the resend backend")
        return ResendEmailSender(
            api_key=config.resend_api_key,
            api_url=config.resend_api_url,
            timeout_s=config.email_timeout_s,
        )
    return LogEmailSender()


def _message_id(raw: bytes) -> str | None:
    if not raw:
        return None
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if isinstance(payload, dict) and payload.get("id"):
        return str(payload["id"])
    return None
