from macscan_core.mailer.senders import LogEmailSender, ResendEmailSender, build_sender
from macscan_core.mailer.types import DeliveryResult, EmailMessage, EmailSender

__all__ = [
    "DeliveryResult",
    "EmailMessage",
    "EmailSender",
    "LogEmailSender",
    "ResendEmailSender",
    "build_sender",
]
