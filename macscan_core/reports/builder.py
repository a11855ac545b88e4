from __future__ import annotations

from datetime import datetime

from macscan_core.config import DEFAULT_BUSINESS_NAME
from macscan_core.diagnostics.hardware import is_apple_silicon, is_intel
from macscan_core.diagnostics.types import (
    Analysis,
    Flag,
    PriorityLevel,
    ScanRecord,
    Severity,
    SystemHealth,
)
from macscan_core.reports.types import (
    AUDIENCE_ADVISOR,
    AUDIENCE_CLIENT,
    Report,
    ReportSection,
)

NOT_REPORTED = "Not reported"

_MODEL_FAMILIES: tuple[tuple[str, str], ...] = (
    ("MacBookPro", "MacBook Pro"),
    ("MacBookAir", "MacBook Air"),
    ("MacBook", "MacBook"),
    ("iMacPro", "iMac Pro"),
    ("iMac", "iMac"),
    ("Macmini", "Mac mini"),
    ("MacPro", "Mac Pro"),
)

_HEALTH_HEADLINES: dict[SystemHealth, str] = {
    SystemHealth.EXCELLENT: "Your Mac is in excellent shape.",
    SystemHealth.GOOD: "Your Mac is in good shape overall.",
    SystemHealth.MODERATE: "Your Mac is working, but a few issues need attention.",
    SystemHealth.NEEDS_ATTENTION: (
        "Your Mac has several issues that are affecting reliability."
    ),
    SystemHealth.CRITICAL: (
        "Your Mac has serious issues that put your work and data at risk."
    ),
}

_READINESS_HEADLINES: dict[str, str] = {
    "well positioned": "Your system is well prepared for modern AI tools.",
    "ready": "Your system can handle AI tools with some limitations.",
    "limited": "Your system has notable limitations for AI workloads.",
    "not ready": "Your system is not prepared for modern AI workloads.",
}

_FOLLOW_UP: dict[PriorityLevel, str] = {
    PriorityLevel.HOT: "Follow up within 24 hours while the result is fresh.",
    PriorityLevel.WARM: "Follow up within 48-72 hours.",
    PriorityLevel.COLD: "Add to the nurture list and check in next quarter.",
}

SUGGESTED_FRAMING = (
    "Suggested framing: \"Your Mac is still usable today, but it's approaching "
    "a point where options become limited. I can help you decide the smartest "
    "path before that happens.\""
)
CAPACITY_NOTE = "Single-operator business. Prioritize HOT leads, then WARM."


def human_model_name(record: ScanRecord) -> str:
    model = record.mac_model
    if not model:
        return NOT_REPORTED
    for token, display in _MODEL_FAMILIES:
        rest = model[len(token):]
        if model.startswith(token) and (not rest or rest[0].isdigit()):
            if is_apple_silicon(record.cpu_brand):
                return f"{display} (Apple Silicon)"
            if is_intel(record.architecture) or "intel" in (
                record.cpu_brand or ""
            ).lower():
                return f"{display} (Intel-based)"
            return display
    return model


def readiness_headline(tier: str | None) -> str:
    key = (tier or "").strip().lower()
    return _READINESS_HEADLINES.get(key, "AI readiness assessment completed.")


def urgency_note(tier: str | None) -> str:
    if (tier or "").strip().lower() in {"not ready", "limited"}:
        return (
            "Waiting reduces your options and increases the likelihood of forced "
            "replacement."
        )
    return "Planning ahead preserves flexibility and avoids rushed decisions."


def health_label(health: SystemHealth) -> str:
    return health.value.replace("_", " ").title()


def date_label(value: datetime) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def build_client_report(
    record: ScanRecord,
    analysis: Analysis,
    *,
    business_name: str = DEFAULT_BUSINESS_NAME,
) -> Report:
    label = health_label(analysis.system_health)
    sections: list[ReportSection] = [
        ReportSection(
            heading="Your System Overview",
            paragraphs=(
                f"We ran a system check on your Mac on "
                f"{date_label(analysis.evaluated_at)} to see how well it supports "
                "your work, modern software and future macOS updates.",
            ),
            items=_snapshot_items(record, analysis),
        )
    ]

    summary = [_HEALTH_HEADLINES[analysis.system_health]]
    top = analysis.top_flag()
    if top is not None:
        summary.append(f"Most important issue: {top.client_text}")
    sections.append(
        ReportSection(
            heading="Health Summary",
            paragraphs=tuple(summary),
            items=(f"Overall health: {label}", f"Grade: {analysis.letter_grade}"),
        )
    )

    findings = analysis.flags_with(Severity.CRITICAL, Severity.MODERATE, Severity.INFO)
    if findings:
        sections.append(
            ReportSection(
                heading="What We Found",
                items=tuple(
                    f"{flag.client_text} Recommendation: {flag.recommendation}"
                    for flag in findings
                ),
            )
        )
    else:
        sections.append(
            ReportSection(
                heading="What We Found",
                paragraphs=("We did not find anything that needs attention.",),
            )
        )

    positives = analysis.flags_with(Severity.POSITIVE)
    if positives:
        sections.append(
            ReportSection(
                heading="What's Working Well",
                items=tuple(flag.client_text for flag in positives),
            )
        )

    if record.ai_readiness_tier:
        sections.append(
            ReportSection(
                heading="AI Readiness",
                paragraphs=(
                    readiness_headline(record.ai_readiness_tier),
                    urgency_note(record.ai_readiness_tier),
                ),
                items=(f"Status: {record.ai_readiness_tier}",),
            )
        )

    if analysis.priority_level == PriorityLevel.COLD:
        next_step = "Your Mac is in good shape. A yearly check keeps it that way."
    else:
        next_step = (
            "Many clients in your situation choose to review optimization, "
            "upgrade, or replacement options before problems escalate."
        )
    sections.append(
        ReportSection(
            heading="Recommended Next Steps",
            paragraphs=(
                next_step,
                "If you'd like help deciding what makes sense for you, just reply "
                "to this email.",
                f"Thank you, {business_name}",
            ),
        )
    )

    return Report(
        audience=AUDIENCE_CLIENT,
        subject=f"Your Mac health report: {label}",
        title="Your Mac Health Report",
        sections=tuple(sections),
    )


def build_advisor_report(
    record: ScanRecord,
    analysis: Analysis,
    *,
    business_name: str = DEFAULT_BUSINESS_NAME,
) -> Report:
    priority = analysis.priority_level.value
    sections: list[ReportSection] = [
        ReportSection(
            heading="Client Summary",
            items=(
                f"Email: {record.client_email or NOT_REPORTED}",
                f"Mac model: {record.mac_model or NOT_REPORTED}",
                f"Year: {analysis.year if analysis.year is not None else 'unknown'}",
                f"CPU: {record.cpu_brand or NOT_REPORTED}",
                f"Architecture: {record.architecture or NOT_REPORTED}",
                f"RAM: {_gb(record.total_ram_gb)}"
                + (" (soldered)" if analysis.soldered else ""),
                f"Storage: {record.storage_type or NOT_REPORTED}",
                f"Free storage: {_percent(analysis.free_storage_percent)}",
                f"Battery: {_battery(record)}",
                f"Last backup: {_backup(record, analysis)}",
            ),
        ),
        ReportSection(
            heading="Lead Assessment",
            items=(
                f"Priority: {priority}",
                f"Priority score: {analysis.priority_score}",
                f"System health: {health_label(analysis.system_health)}",
                f"Grade: {analysis.letter_grade}",
                f"Flags: {analysis.critical_count} critical, "
                f"{analysis.moderate_count} moderate, {analysis.info_count} info, "
                f"{analysis.positive_count} positive",
                f"Opportunity: {_money(analysis.opportunity_value)}",
            ),
        ),
    ]

    top = analysis.top_flag()
    sections.append(
        ReportSection(
            heading="Top Issue",
            paragraphs=(
                f"[{top.severity.value}] {top.category.value}: {top.internal_text}"
                if top is not None
                else "No critical or moderate issues.",
            ),
        )
    )

    findings = analysis.flags_with(Severity.CRITICAL, Severity.MODERATE, Severity.INFO)
    if findings:
        sections.append(
            ReportSection(
                heading="Findings",
                items=tuple(_finding_line(flag) for flag in findings),
            )
        )

    upsells = [
        f"{flag.upsell}: {_money(flag.value)}"
        for flag in analysis.flags
        if flag.upsell and flag.value > 0
    ]
    unflagged = analysis.opportunity_value - sum(flag.value for flag in analysis.flags)
    if unflagged > 0:
        upsells.append(f"Replacement consultation: {_money(unflagged)}")
    if upsells:
        sections.append(
            ReportSection(heading="Upsell Opportunities", items=tuple(upsells))
        )

    if record.ai_readiness_tier:
        sections.append(
            ReportSection(
                heading="AI Preparedness",
                paragraphs=(
                    (record.ai_readiness_explanation,)
                    if record.ai_readiness_explanation
                    else ()
                ),
                items=(
                    f"Overall tier: {record.ai_readiness_tier}",
                    f"Upgrade ceiling: {record.upgrade_ceiling or NOT_REPORTED}",
                ),
            )
        )

    action = [_FOLLOW_UP[analysis.priority_level]]
    if analysis.priority_level != PriorityLevel.COLD:
        action.append(SUGGESTED_FRAMING)
    sections.append(ReportSection(heading="Recommended Action", paragraphs=tuple(action)))
    sections.append(ReportSection(heading="Capacity Note", paragraphs=(CAPACITY_NOTE,)))

    model = record.mac_model or "Unknown Mac"
    return Report(
        audience=AUDIENCE_ADVISOR,
        subject=f"[{priority}] New scan received - {model}",
        title=f"{business_name} Lead Briefing",
        sections=tuple(sections),
    )


def _snapshot_items(record: ScanRecord, analysis: Analysis) -> tuple[str, ...]:
    items = [
        f"Mac model: {human_model_name(record)}",
        f"Processor: {record.cpu_brand or NOT_REPORTED}",
        f"Memory (RAM): {_gb(record.total_ram_gb)}",
        f"Storage type: {record.storage_type or NOT_REPORTED}",
        f"Free storage available: {_percent(analysis.free_storage_percent)}",
    ]
    if record.macos_version:
        items.append(f"macOS: {record.macos_version}")
    return tuple(items)


def _finding_line(flag: Flag) -> str:
    line = f"[{flag.severity.value}] {flag.category.value}: {flag.internal_text}"
    if flag.upsell:
        line += f" Upsell: {flag.upsell} ({_money(flag.value)})"
    return line


def _number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def _gb(value: float | None) -> str:
    if value is None:
        return NOT_REPORTED
    return f"{_number(value)} GB"


def _percent(value: float | None) -> str:
    if value is None:
        return NOT_REPORTED
    return f"{_number(value)}%"


def _money(value: int) -> str:
    return f"${value:,}"


def _battery(record: ScanRecord) -> str:
    if record.battery_capacity is None and record.battery_cycles is None:
        return NOT_REPORTED
    parts = []
    if record.battery_capacity is not None:
        parts.append(f"{_number(record.battery_capacity)}% capacity")
    if record.battery_cycles is not None:
        parts.append(f"{record.battery_cycles} cycles")
    return ", ".join(parts)


def _backup(record: ScanRecord, analysis: Analysis) -> str:
    if analysis.backup_age_days is not None:
        return f"{analysis.backup_age_days} days ago"
    return record.last_backup or NOT_REPORTED
