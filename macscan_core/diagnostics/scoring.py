from __future__ import annotations

from collections import Counter
from typing import Iterable

from macscan_core.diagnostics.types import (
    Analysis,
    Flag,
    PriorityLevel,
    RuleContext,
    Severity,
    SystemHealth,
)


def severity_counts(flags: Iterable[Flag]) -> dict[Severity, int]:
    counts = Counter(flag.severity for flag in flags)
    return {severity: counts.get(severity, 0) for severity in Severity}


def priority_level(critical: int, score: int) -> PriorityLevel:
    if critical >= 3 or score >= 8:
        return PriorityLevel.HOT
    if critical >= 1 or score >= 4:
        return PriorityLevel.WARM
    return PriorityLevel.COLD


def system_health(
    critical: int,
    moderate: int,
    positive: int,
    score: int,
) -> SystemHealth:
    if critical >= 3 or score >= 8:
        return SystemHealth.CRITICAL
    if critical >= 2 or score >= 6:
        return SystemHealth.NEEDS_ATTENTION
    if critical >= 1 or score >= 4:
        return SystemHealth.MODERATE
    if positive >= 2 and moderate <= 1:
        return SystemHealth.EXCELLENT
    return SystemHealth.GOOD


def letter_grade(
    score: int,
    critical: int,
    moderate: int,
    ram_gb: float | None,
) -> str:
    ram = ram_gb or 0
    if score == 0 and critical == 0 and moderate == 0 and ram >= 32:
        return "A+"
    if score >= 12 or critical >= 4:
        return "D-"
    if score >= 10 or critical >= 3:
        return "D+"
    if score >= 7 or critical >= 2:
        return "C-"
    if score >= 5 or critical >= 1:
        return "C+"
    if score >= 3 or moderate >= 2:
        return "B-"
    if score >= 1:
        return "B+"
    if ram >= 16:
        return "A"
    return "B"


def summarize(
    flags: Iterable[Flag],
    *,
    score: int,
    opportunity: int,
    ram_gb: float | None,
    context: RuleContext,
) -> Analysis:
    ordered = tuple(flags)
    counts = severity_counts(ordered)
    critical = counts[Severity.CRITICAL]
    moderate = counts[Severity.MODERATE]
    positive = counts[Severity.POSITIVE]
    return Analysis(
        flags=ordered,
        priority_score=score,
        priority_level=priority_level(critical, score),
        system_health=system_health(critical, moderate, positive, score),
        letter_grade=letter_grade(score, critical, moderate, ram_gb),
        critical_count=critical,
        moderate_count=moderate,
        info_count=counts[Severity.INFO],
        positive_count=positive,
        opportunity_value=opportunity,
        evaluated_at=context.now,
        year=context.year,
        soldered=context.soldered,
        backup_age_days=context.backup_age_days,
        free_storage_percent=context.free_storage_percent,
    )
