from __future__ import annotations

import math
import re
from typing import Any, Mapping

from macscan_core.diagnostics.types import ScanRecord

# Keys the scanner agent emits, first match wins. Snake-case field names are
# accepted as well.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "mac_model": ("macModel",),
    "cpu_brand": ("cpuBrand",),
    "architecture": ("architecture", "arch"),
    "total_ram_gb": ("totalRAM",),
    "total_storage_gb": ("totalStorage",),
    "free_storage_gb": ("freeStorage",),
    "free_storage_percent": ("freeStoragePercent",),
    "storage_type": ("storageType",),
    "battery_capacity": ("batteryCapacity", "batteryHealth"),
    "battery_cycles": ("batteryCycles", "batteryCycleCount"),
    "firewall_enabled": ("firewallEnabled",),
    "encryption_enabled": ("fileVaultEnabled", "diskEncryption", "encryptionEnabled"),
    "last_backup": ("lastBackupDate", "lastBackup"),
    "login_items": ("loginItems", "loginItemsCount"),
    "memory_pressure": ("memoryPressure",),
    "ram_speed_mhz": ("ramSpeed",),
    "software_updates": ("softwareUpdates", "updateStatus"),
    "wifi_signal": ("wifiSignal",),
    "external_monitors": ("externalMonitors",),
    "macos_version": ("macosVersion", "osVersion"),
    "client_email": ("clientEmail", "email"),
    "ai_readiness_tier": ("aiPreparednessTier",),
    "upgrade_ceiling": ("upgradeCeiling",),
    "ai_readiness_explanation": ("aiPreparednessExplanation",),
}

_FLOAT_FIELDS = {
    "total_ram_gb",
    "total_storage_gb",
    "free_storage_gb",
    "free_storage_percent",
    "battery_capacity",
    "ram_speed_mhz",
}
_INT_FIELDS = {"battery_cycles", "login_items", "external_monitors"}
_BOOL_FIELDS = {"firewall_enabled", "encryption_enabled"}

_TRUE_VALUES = {"true", "yes", "y", "on", "enabled", "1"}
_FALSE_VALUES = {"false", "no", "n", "off", "disabled", "0"}

_NUMBER_PATTERN = re.compile(
    r"\s*(-?\d+(?:\.\d+)?)\s*(?:gb|%|mhz|cycles)?\s*", re.IGNORECASE
)


def scan_record_from_dict(payload: object) -> ScanRecord:
    if not isinstance(payload, Mapping):
        return ScanRecord()
    values: dict[str, Any] = {}
    for field, aliases in FIELD_ALIASES.items():
        raw = _lookup(payload, (*aliases, field))
        if field in _FLOAT_FIELDS:
            values[field] = _coerce_float(raw)
        elif field in _INT_FIELDS:
            values[field] = _coerce_int(raw)
        elif field in _BOOL_FIELDS:
            values[field] = _coerce_bool(raw)
        else:
            values[field] = _coerce_optional_str(raw)
    return ScanRecord(**values)


def _lookup(payload: Mapping[str, Any], keys: tuple[str, ...]) -> object:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _coerce_optional_str(value: object) -> str | None:
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    text = str(value).strip()
    return text or None


def _coerce_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        match = _NUMBER_PATTERN.fullmatch(value)
        if not match:
            return None
        number = float(match.group(1))
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _coerce_int(value: object) -> int | None:
    number = _coerce_float(value)
    if number is None:
        return None
    return int(number)


def _coerce_bool(value: object) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    return None
