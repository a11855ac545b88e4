from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    MODERATE = "MODERATE"
    INFO = "INFO"
    POSITIVE = "POSITIVE"

    @property
    def rank(self) -> int:
        return {
            Severity.CRITICAL: 3,
            Severity.MODERATE: 2,
            Severity.INFO: 1,
            Severity.POSITIVE: 0,
        }[self]


class Category(str, Enum):
    HARDWARE_AGE = "Hardware Age"
    BATTERY = "Battery"
    DATA_PROTECTION = "Data Protection"
    SECURITY = "Security"
    STORAGE = "Storage"
    MEMORY = "Memory"
    PERFORMANCE = "Performance"
    SOFTWARE = "Software"
    NETWORK = "Network"
    MAINTENANCE = "Maintenance"
    DISPLAY = "Display"
    HARDWARE = "Hardware"


class PriorityLevel(str, Enum):
    COLD = "COLD"
    WARM = "WARM"
    HOT = "HOT"


class SystemHealth(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    MODERATE = "MODERATE"
    NEEDS_ATTENTION = "NEEDS_ATTENTION"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class ScanRecord:
    mac_model: str | None = None
    cpu_brand: str | None = None
    architecture: str | None = None
    total_ram_gb: float | None = None
    total_storage_gb: float | None = None
    free_storage_gb: float | None = None
    free_storage_percent: float | None = None
    storage_type: str | None = None
    battery_capacity: float | None = None
    battery_cycles: int | None = None
    firewall_enabled: bool | None = None
    encryption_enabled: bool | None = None
    last_backup: str | None = None
    login_items: int | None = None
    memory_pressure: str | None = None
    ram_speed_mhz: float | None = None
    software_updates: str | None = None
    wifi_signal: str | None = None
    external_monitors: int | None = None
    macos_version: str | None = None
    client_email: str | None = None
    ai_readiness_tier: str | None = None
    upgrade_ceiling: str | None = None
    ai_readiness_explanation: str | None = None


@dataclass(frozen=True)
class Flag:
    severity: Severity
    category: Category
    client_text: str
    internal_text: str
    recommendation: str
    upsell: str | None = None
    value: int = 0
    weight: int = 0


@dataclass(frozen=True)
class RuleOutcome:
    flags: tuple[Flag, ...] = ()
    score: int = 0
    opportunity: int = 0


NO_OUTCOME = RuleOutcome()


@dataclass(frozen=True)
class RuleContext:
    now: datetime
    year: int | None
    soldered: bool
    backup_age_days: int | None
    free_storage_percent: float | None = None


@dataclass(frozen=True)
class Analysis:
    flags: tuple[Flag, ...]
    priority_score: int
    priority_level: PriorityLevel
    system_health: SystemHealth
    letter_grade: str
    critical_count: int
    moderate_count: int
    info_count: int
    positive_count: int
    opportunity_value: int
    evaluated_at: datetime
    year: int | None = None
    soldered: bool = False
    backup_age_days: int | None = None
    free_storage_percent: float | None = None

    def first_flag(self, severity: Severity) -> Flag | None:
        for flag in self.flags:
            if flag.severity == severity:
                return flag
        return None

    def top_flag(self) -> Flag | None:
        return self.first_flag(Severity.CRITICAL) or self.first_flag(
            Severity.MODERATE
        )

    def flags_with(self, *severities: Severity) -> tuple[Flag, ...]:
        wanted = set(severities)
        return tuple(flag for flag in self.flags if flag.severity in wanted)


def flag_to_dict(flag: Flag) -> dict[str, object]:
    return {
        "severity": flag.severity.value,
        "category": flag.category.value,
        "client_text": flag.client_text,
        "internal_text": flag.internal_text,
        "recommendation": flag.recommendation,
        "upsell": flag.upsell,
        "value": flag.value,
        "weight": flag.weight,
    }


def analysis_to_dict(analysis: Analysis) -> dict[str, object]:
    return {
        "flags": [flag_to_dict(flag) for flag in analysis.flags],
        "priority_score": analysis.priority_score,
        "priority_level": analysis.priority_level.value,
        "system_health": analysis.system_health.value,
        "letter_grade": analysis.letter_grade,
        "counts": {
            "critical": analysis.critical_count,
            "moderate": analysis.moderate_count,
            "info": analysis.info_count,
            "positive": analysis.positive_count,
        },
        "opportunity_value": analysis.opportunity_value,
        "evaluated_at": analysis.evaluated_at.isoformat(),
        "year": analysis.year,
        "soldered": analysis.soldered,
        "backup_age_days": analysis.backup_age_days,
        "free_storage_percent": analysis.free_storage_percent,
    }
