from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable

from macscan_core.diagnostics.backup import (
    backup_age_days,
    ensure_utc,
    is_never,
    parse_timestamp,
)
from macscan_core.diagnostics.hardware import (
    extract_year,
    is_apple_silicon,
    is_intel,
    is_soldered,
    is_soldered_model,
)
from macscan_core.diagnostics.scoring import summarize
from macscan_core.diagnostics.types import (
    NO_OUTCOME,
    Analysis,
    Category,
    Flag,
    RuleContext,
    RuleOutcome,
    ScanRecord,
    Severity,
)

# Service prices in whole dollars.
BATTERY_REPLACEMENT = 199
BACKUP_SETUP = 149
FIREWALL_SETUP = 49
ENCRYPTION_SETUP = 79
SSD_UPGRADE = 249
RAM_UPGRADE = 200
RAM_UPGRADE_LOW_MEMORY = 300
STARTUP_OPTIMIZATION = 79
MAINTENANCE_PLAN = 49
REPLACEMENT_CONSULTATION = 150
SOFTWARE_UPDATE_SERVICE = 49
WIFI_OPTIMIZATION = 99

LEGACY_YEAR = 2015
AGING_YEARS = (2016, 2017)
BACKUP_CRITICAL_DAYS = 90
BACKUP_MODERATE_DAYS = 30
BACKUP_RECENT_DAYS = 7
LOGIN_ITEMS_LIMIT = 20
RAM_SPEED_FLOOR_MHZ = 2400
MANUAL_UPDATE_STATUS = "manual check required"
CPU_ERA_TOKENS: tuple[str, ...] = ("2014", "2015", "2016")

ELEVATED_PRESSURE = {"warning", "critical", "high", "elevated", "yellow", "red"}
NORMAL_PRESSURE = {"normal", "green"}
IDLE_UPDATE_STATUSES = {"up to date", "unknown"}
WEAK_WIFI = {"weak", "fair"}
MECHANICAL_MARKERS: tuple[str, ...] = (
    "hdd",
    "rotational",
    "hard disk",
    "spinning",
    "fusion",
)

_LEADING_INT = re.compile(r"\s*(\d+)")

RuleCheck = Callable[[ScanRecord, RuleContext], RuleOutcome]


@dataclass(frozen=True)
class DiagnosticRule:
    name: str
    check: RuleCheck


def build_context(record: ScanRecord, now: datetime) -> RuleContext:
    year = extract_year(record.mac_model)
    backup_age: int | None = None
    if parse_timestamp(record.last_backup) is not None:
        backup_age = backup_age_days(record.last_backup, now)
    return RuleContext(
        now=now,
        year=year,
        soldered=is_soldered(record.mac_model, year),
        backup_age_days=backup_age,
        free_storage_percent=_free_storage_percent(record),
    )


def check_system_age(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    year = context.year
    if year is None:
        return NO_OUTCOME
    if year <= LEGACY_YEAR:
        flags = [
            Flag(
                severity=Severity.CRITICAL,
                category=Category.HARDWARE_AGE,
                client_text=(
                    f"Your Mac dates from {year}. It no longer receives full macOS "
                    "support and is at the end of its practical life."
                ),
                internal_text=f"{year} hardware, outside current macOS support.",
                recommendation=(
                    "Plan a replacement before a failure forces a rushed decision."
                ),
                weight=4,
            )
        ]
        if is_soldered_model(record.mac_model):
            flags.append(
                Flag(
                    severity=Severity.CRITICAL,
                    category=Category.MEMORY,
                    client_text=(
                        f"The memory in this Mac{_ram_suffix(record)} is soldered "
                        "to the logic board and cannot be upgraded."
                    ),
                    internal_text=(
                        "Soldered RAM, fixed and non-upgradeable. No RAM upsell; "
                        "position replacement."
                    ),
                    recommendation=(
                        "Treat the fixed memory as a ceiling when planning a "
                        "replacement."
                    ),
                    weight=2,
                )
            )
        return _outcome(flags)
    if year in AGING_YEARS:
        return _outcome(
            [
                Flag(
                    severity=Severity.MODERATE,
                    category=Category.HARDWARE_AGE,
                    client_text=(
                        f"Your Mac dates from {year} and is approaching the end "
                        "of its supported life."
                    ),
                    internal_text=f"{year} hardware, aging. Open replacement talk.",
                    recommendation="Budget for a replacement within 12-18 months.",
                    weight=2,
                )
            ]
        )
    return NO_OUTCOME


def check_battery(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    capacity = record.battery_capacity
    cycles = record.battery_cycles
    if capacity is None or cycles is None:
        return NO_OUTCOME
    detail = f"{_number(capacity)}% capacity, {cycles} cycles"
    if capacity < 70 or cycles > 1200:
        return _outcome(
            [
                Flag(
                    severity=Severity.CRITICAL,
                    category=Category.BATTERY,
                    client_text=(
                        "Your battery is heavily worn and may shut down "
                        "unexpectedly or swell."
                    ),
                    internal_text=f"Battery failing ({detail}).",
                    recommendation="Replace the battery as soon as possible.",
                    upsell="Battery replacement",
                    value=BATTERY_REPLACEMENT,
                    weight=3,
                )
            ]
        )
    if capacity < 85 or cycles > 800:
        return _outcome(
            [
                Flag(
                    severity=Severity.MODERATE,
                    category=Category.BATTERY,
                    client_text="Your battery is showing noticeable wear.",
                    internal_text=f"Battery worn ({detail}).",
                    recommendation="Plan a battery replacement in the coming months.",
                    upsell="Battery replacement",
                    value=BATTERY_REPLACEMENT,
                    weight=2,
                )
            ]
        )
    return NO_OUTCOME


def check_backup(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    if is_never(record.last_backup):
        return _outcome(
            [
                Flag(
                    severity=Severity.CRITICAL,
                    category=Category.DATA_PROTECTION,
                    client_text=(
                        "No backup was found. A single drive failure would lose "
                        "everything on this Mac."
                    ),
                    internal_text="No backup ever taken.",
                    recommendation="Set up automatic Time Machine or cloud backups.",
                    upsell="Backup setup",
                    value=BACKUP_SETUP,
                    weight=3,
                )
            ]
        )
    age = context.backup_age_days
    if age is None:
        return NO_OUTCOME
    if age > BACKUP_CRITICAL_DAYS:
        return _outcome(
            [
                Flag(
                    severity=Severity.CRITICAL,
                    category=Category.DATA_PROTECTION,
                    client_text=(
                        f"Your last backup was {age} days ago. Recent work is "
                        "not protected."
                    ),
                    internal_text=f"Backup critically outdated ({age} days).",
                    recommendation="Restore automatic backups and verify a restore.",
                    upsell="Backup setup",
                    value=BACKUP_SETUP,
                    weight=3,
                )
            ]
        )
    if age > BACKUP_MODERATE_DAYS:
        return _outcome(
            [
                Flag(
                    severity=Severity.MODERATE,
                    category=Category.DATA_PROTECTION,
                    client_text=f"Your last backup was {age} days ago.",
                    internal_text=f"Backup stale ({age} days).",
                    recommendation="Check that automatic backups are still running.",
                    upsell="Backup setup",
                    value=BACKUP_SETUP,
                    weight=2,
                )
            ]
        )
    return NO_OUTCOME


def check_firewall(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    if record.firewall_enabled is not False:
        return NO_OUTCOME
    return _outcome(
        [
            Flag(
                severity=Severity.MODERATE,
                category=Category.SECURITY,
                client_text="The macOS firewall is turned off.",
                internal_text="Firewall disabled.",
                recommendation="Turn on the firewall and review sharing settings.",
                upsell="Security hardening",
                value=FIREWALL_SETUP,
                weight=1,
            )
        ]
    )


def check_encryption(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    if record.encryption_enabled is not False:
        return NO_OUTCOME
    return _outcome(
        [
            Flag(
                severity=Severity.INFO,
                category=Category.SECURITY,
                client_text=(
                    "Disk encryption (FileVault) is off, so a lost or stolen Mac "
                    "exposes your files."
                ),
                internal_text="FileVault disabled.",
                recommendation="Enable FileVault and store the recovery key safely.",
                upsell="FileVault encryption setup",
                value=ENCRYPTION_SETUP,
                weight=0,
            )
        ]
    )


def check_free_storage(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    percent = context.free_storage_percent
    if percent is None:
        return NO_OUTCOME
    shown = _number(round(percent, 1))
    if percent < 10:
        return _outcome(
            [
                Flag(
                    severity=Severity.CRITICAL,
                    category=Category.STORAGE,
                    client_text=(
                        f"Only {shown}% of your storage is free. macOS slows down "
                        "and updates can fail."
                    ),
                    internal_text=f"Storage critically full ({shown}% free).",
                    recommendation="Book a storage cleanup consultation.",
                    weight=3,
                )
            ]
        )
    if percent < 20:
        return _outcome(
            [
                Flag(
                    severity=Severity.MODERATE,
                    category=Category.STORAGE,
                    client_text=f"Storage is getting tight ({shown}% free).",
                    internal_text=f"Storage low ({shown}% free).",
                    recommendation="Clear large files or move them to external storage.",
                    weight=2,
                )
            ]
        )
    if percent >= 50:
        return _outcome(
            [
                Flag(
                    severity=Severity.POSITIVE,
                    category=Category.STORAGE,
                    client_text=f"Plenty of free storage ({shown}% free).",
                    internal_text=f"Storage healthy ({shown}% free).",
                    recommendation="No action needed.",
                )
            ]
        )
    return NO_OUTCOME


def check_storage_medium(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    medium = (record.storage_type or "").lower()
    if not any(marker in medium for marker in MECHANICAL_MARKERS):
        return NO_OUTCOME
    return _outcome(
        [
            Flag(
                severity=Severity.MODERATE,
                category=Category.STORAGE,
                client_text=(
                    "Your Mac uses a mechanical hard drive, the biggest single "
                    "cause of slow startups and app launches."
                ),
                internal_text=f"Mechanical drive ({record.storage_type}).",
                recommendation="Upgrade to a solid-state drive.",
                upsell="SSD upgrade",
                value=SSD_UPGRADE,
                weight=2,
            )
        ]
    )


def check_ram(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    ram = record.total_ram_gb
    if ram is None or context.soldered:
        return NO_OUTCOME
    pressure = (record.memory_pressure or "").strip().lower()
    if ram <= 8:
        value = RAM_UPGRADE_LOW_MEMORY if ram <= 4 else RAM_UPGRADE
        return _outcome(
            [
                Flag(
                    severity=Severity.CRITICAL,
                    category=Category.MEMORY,
                    client_text=(
                        f"Your Mac has {_number(ram)} GB of memory, too little for "
                        "modern apps and browsers."
                    ),
                    internal_text=f"{_number(ram)} GB RAM, upgradeable.",
                    recommendation="Upgrade the memory to at least 16 GB.",
                    upsell="RAM upgrade",
                    value=value,
                    weight=3,
                )
            ]
        )
    if ram < 16 and pressure in ELEVATED_PRESSURE:
        return _outcome(
            [
                Flag(
                    severity=Severity.MODERATE,
                    category=Category.MEMORY,
                    client_text=(
                        "Your Mac is running short of memory during normal use."
                    ),
                    internal_text=(
                        f"{_number(ram)} GB RAM under {record.memory_pressure} "
                        "pressure."
                    ),
                    recommendation="Add memory to remove the slowdown.",
                    upsell="RAM upgrade",
                    value=RAM_UPGRADE,
                    weight=2,
                )
            ]
        )
    if ram >= 16 and pressure in NORMAL_PRESSURE:
        return _outcome(
            [
                Flag(
                    severity=Severity.POSITIVE,
                    category=Category.MEMORY,
                    client_text=f"{_number(ram)} GB of memory with no pressure.",
                    internal_text=f"{_number(ram)} GB RAM, normal pressure.",
                    recommendation="No action needed.",
                )
            ]
        )
    return NO_OUTCOME


def check_login_items(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    count = record.login_items
    if count is None or count <= LOGIN_ITEMS_LIMIT:
        return NO_OUTCOME
    return _outcome(
        [
            Flag(
                severity=Severity.MODERATE,
                category=Category.PERFORMANCE,
                client_text=f"{count} apps launch at login and slow your startup.",
                internal_text=f"{count} login items.",
                recommendation="Trim login items and background helpers.",
                upsell="Startup optimization",
                value=STARTUP_OPTIMIZATION,
                weight=1,
            )
        ]
    )


def check_update_configuration(
    record: ScanRecord, context: RuleContext
) -> RuleOutcome:
    status = (record.software_updates or "").strip().lower()
    if status != MANUAL_UPDATE_STATUS:
        return NO_OUTCOME
    return _outcome(
        [
            Flag(
                severity=Severity.MODERATE,
                category=Category.MAINTENANCE,
                client_text="Software updates have to be checked for by hand.",
                internal_text="Automatic update checks off.",
                recommendation="Turn on automatic updates or set up a maintenance plan.",
                upsell="Maintenance plan",
                value=MAINTENANCE_PLAN,
                weight=1,
            )
        ]
    )


def check_replacement_consultation(
    record: ScanRecord, context: RuleContext
) -> RuleOutcome:
    # Opportunity only; the age flag already tells the story.
    if context.year is None or context.year > LEGACY_YEAR:
        return NO_OUTCOME
    return RuleOutcome(opportunity=REPLACEMENT_CONSULTATION)


def check_cpu_era(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    cpu = record.cpu_brand or ""
    if not is_intel(record.architecture):
        return NO_OUTCOME
    if not any(token in cpu for token in CPU_ERA_TOKENS):
        return NO_OUTCOME
    return _outcome(
        [
            Flag(
                severity=Severity.CRITICAL,
                category=Category.HARDWARE,
                client_text=(
                    "Your processor is an older Intel generation that struggles "
                    "with current software."
                ),
                internal_text=f"Legacy Intel CPU ({cpu}).",
                recommendation="Consider moving to Apple Silicon.",
                weight=2,
            )
        ]
    )


def check_pending_updates(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    status = (record.software_updates or "").strip()
    if not status or status.lower() in IDLE_UPDATE_STATUSES:
        return NO_OUTCOME
    match = _LEADING_INT.match(status)
    if not match:
        return NO_OUTCOME
    pending = int(match.group(1))
    if pending <= 0:
        return NO_OUTCOME
    return _outcome(
        [
            Flag(
                severity=Severity.MODERATE,
                category=Category.SOFTWARE,
                client_text=f"{pending} software updates are waiting to be installed.",
                internal_text=f"{pending} pending updates.",
                recommendation="Install pending updates, security fixes first.",
                upsell="Software update service",
                value=SOFTWARE_UPDATE_SERVICE,
                weight=1,
            )
        ]
    )


def check_wifi(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    signal = (record.wifi_signal or "").strip().lower()
    if signal not in WEAK_WIFI:
        return NO_OUTCOME
    return _outcome(
        [
            Flag(
                severity=Severity.MODERATE,
                category=Category.NETWORK,
                client_text=f"Your Wi-Fi signal is {signal}, which slows everything online.",
                internal_text=f"Wi-Fi signal {record.wifi_signal}.",
                recommendation="Review router placement or add a mesh node.",
                upsell="Wi-Fi optimization",
                value=WIFI_OPTIMIZATION,
                weight=1,
            )
        ]
    )


def check_ram_speed(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    speed = record.ram_speed_mhz
    if speed is None or not 0 < speed < RAM_SPEED_FLOOR_MHZ:
        return NO_OUTCOME
    if not is_intel(record.architecture) or context.soldered:
        return NO_OUTCOME
    return _outcome(
        [
            Flag(
                severity=Severity.MODERATE,
                category=Category.MEMORY,
                client_text="Your memory runs at an older, slower speed.",
                internal_text=f"RAM at {_number(speed)} MHz.",
                recommendation="Factor memory speed into any upgrade decision.",
                weight=1,
            )
        ]
    )


def check_positives(record: ScanRecord, context: RuleContext) -> RuleOutcome:
    flags: list[Flag] = []
    if record.external_monitors is not None and record.external_monitors > 0:
        flags.append(
            _positive(
                Category.DISPLAY,
                f"{record.external_monitors} external display(s) connected and working.",
                f"{record.external_monitors} external monitor(s).",
            )
        )
    if record.total_ram_gb is not None and record.total_ram_gb >= 32:
        flags.append(
            _positive(
                Category.MEMORY,
                f"{_number(record.total_ram_gb)} GB of memory leaves lots of headroom.",
                f"{_number(record.total_ram_gb)} GB RAM.",
            )
        )
    if is_apple_silicon(record.cpu_brand):
        flags.append(
            _positive(
                Category.HARDWARE,
                "Apple Silicon processor, fast and efficient.",
                f"Apple Silicon ({record.cpu_brand}).",
            )
        )
    age = context.backup_age_days
    if age is not None and age <= BACKUP_RECENT_DAYS:
        flags.append(
            _positive(
                Category.DATA_PROTECTION,
                "Your backups are current.",
                f"Backup {age} days old.",
            )
        )
    capacity = record.battery_capacity
    cycles = record.battery_cycles
    if capacity is not None and cycles is not None:
        if capacity >= 90 and cycles < 500:
            flags.append(
                _positive(
                    Category.BATTERY,
                    "Your battery is in great shape.",
                    f"Battery {_number(capacity)}%, {cycles} cycles.",
                )
            )
    return _outcome(flags)


DEFAULT_RULES: tuple[DiagnosticRule, ...] = (
    DiagnosticRule(name="system_age", check=check_system_age),
    DiagnosticRule(name="battery", check=check_battery),
    DiagnosticRule(name="backup", check=check_backup),
    DiagnosticRule(name="firewall", check=check_firewall),
    DiagnosticRule(name="encryption", check=check_encryption),
    DiagnosticRule(name="free_storage", check=check_free_storage),
    DiagnosticRule(name="storage_medium", check=check_storage_medium),
    DiagnosticRule(name="ram", check=check_ram),
    DiagnosticRule(name="login_items", check=check_login_items),
    DiagnosticRule(name="update_configuration", check=check_update_configuration),
    DiagnosticRule(
        name="replacement_consultation", check=check_replacement_consultation
    ),
    DiagnosticRule(name="cpu_era", check=check_cpu_era),
    DiagnosticRule(name="pending_updates", check=check_pending_updates),
    DiagnosticRule(name="wifi", check=check_wifi),
    DiagnosticRule(name="ram_speed", check=check_ram_speed),
    DiagnosticRule(name="positives", check=check_positives),
)


def evaluate(
    record: ScanRecord,
    now: datetime | None = None,
    *,
    rules: Iterable[DiagnosticRule] = DEFAULT_RULES,
) -> Analysis:
    current = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    context = build_context(record, current)
    flags: list[Flag] = []
    score = 0
    opportunity = 0
    for rule in rules:
        outcome = rule.check(record, context)
        flags.extend(outcome.flags)
        score += outcome.score
        opportunity += outcome.opportunity
    return summarize(
        flags,
        score=score,
        opportunity=opportunity,
        ram_gb=record.total_ram_gb,
        context=context,
    )


def _outcome(flags: list[Flag]) -> RuleOutcome:
    if not flags:
        return NO_OUTCOME
    return RuleOutcome(
        flags=tuple(flags),
        score=sum(flag.weight for flag in flags),
        opportunity=sum(flag.value for flag in flags),
    )


def _positive(category: Category, client_text: str, internal_text: str) -> Flag:
    return Flag(
        severity=Severity.POSITIVE,
        category=category,
        client_text=client_text,
        internal_text=internal_text,
        recommendation="No action needed.",
    )


def _free_storage_percent(record: ScanRecord) -> float | None:
    if record.free_storage_percent is not None:
        return record.free_storage_percent
    total = record.total_storage_gb
    free = record.free_storage_gb
    if total is None or free is None or total <= 0:
        return None
    return free / total * 100


def _number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _ram_suffix(record: ScanRecord) -> str:
    if record.total_ram_gb is None:
        return ""
    return f" ({_number(record.total_ram_gb)} GB)"
