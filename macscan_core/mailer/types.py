from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    text: str
    sender: str
    html: str | None = None


@dataclass(frozen=True)
class DeliveryResult:
    backend: str
    to: str
    status: str
    message_id: str | None
    duration_ms: int
    status_code: int | None = None


class EmailSender(Protocol):
    backend: str

    def send(self, message: EmailMessage) -> DeliveryResult: ...
