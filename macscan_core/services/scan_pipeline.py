from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping

from macscan_core.config import Config
from macscan_core.diagnostics import Analysis, ScanRecord, evaluate, scan_record_from_dict
from macscan_core.errors import ValidationError
from macscan_core.logging import get_logger
from macscan_core.mailer import DeliveryResult, EmailMessage, EmailSender
from macscan_core.reports import (
    Report,
    build_advisor_report,
    build_client_report,
    render_html,
    render_text,
)

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")
EMAIL_FIELDS: tuple[str, ...] = ("clientEmail", "email")


@dataclass(frozen=True)
class ScanOutcome:
    record: ScanRecord
    analysis: Analysis
    client_report: Report
    advisor_report: Report
    deliveries: tuple[DeliveryResult, ...]


def resolve_client_email(payload: Mapping[str, Any]) -> str:
    for field in EMAIL_FIELDS:
        value = payload.get(field)
        if value is None:
            continue
        candidate = str(value).strip()
        if candidate:
            if EMAIL_PATTERN.match(candidate):
                return candidate
            break
    raise ValidationError("Missing or invalid client email")


def report_message(report: Report, *, to: str, sender: str) -> EmailMessage:
    return EmailMessage(
        to=to,
        subject=report.subject,
        text=render_text(report),
        html=render_html(report),
        sender=sender,
    )


def process_scan(
    payload: Mapping[str, Any],
    *,
    config: Config,
    sender: EmailSender,
    now: datetime | None = None,
    request_id: str | None = None,
) -> ScanOutcome:
    client_email = resolve_client_email(payload)
    record = replace(scan_record_from_dict(payload), client_email=client_email)
    analysis = evaluate(record, now)
    client_report = build_client_report(
        record, analysis, business_name=config.business_name
    )
    advisor_report = build_advisor_report(
        record, analysis, business_name=config.business_name
    )
    logger.info(
        "Scan evaluated",
        extra={
            "request_id": request_id,
            "priority_level": analysis.priority_level.value,
            "system_health": analysis.system_health.value,
            "priority_score": analysis.priority_score,
            "flag_count": len(analysis.flags),
            "opportunity_value": analysis.opportunity_value,
        },
    )

    # No rollback: if the advisor send fails, the client email has already gone out.
    deliveries: list[DeliveryResult] = []
    for role, report, recipient in (
        ("client", client_report, client_email),
        ("advisor", advisor_report, config.advisor_email),
    ):
        result = sender.send(
            report_message(report, to=recipient, sender=config.email_from)
        )
        logger.info(
            "Report dispatched",
            extra={
                "request_id": request_id,
                "recipient_role": role,
                "email_backend": result.backend,
                "message_id": result.message_id,
                "status": result.status,
            },
        )
        deliveries.append(result)

    return ScanOutcome(
        record=record,
        analysis=analysis,
        client_report=client_report,
        advisor_report=advisor_report,
        deliveries=tuple(deliveries),
    )
