from __future__ import annotations

from datetime import datetime, timezone

NEVER = "never"
UNKNOWN = "unknown"

DAY_MS = 24 * 60 * 60 * 1000

_FALLBACK_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d-%H%M%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y",
)


def is_never(value: str | None) -> bool:
    return isinstance(value, str) and value.strip().lower() == NEVER


def parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or text.lower() in {NEVER, UNKNOWN}:
        return None
    parsed = _parse_iso(text)
    if parsed is None:
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    try:
        return ensure_utc(parsed)
    except (OverflowError, ValueError):
        return None


def backup_age_days(value: object, now: datetime) -> int:
    timestamp = parse_timestamp(value)
    if timestamp is None:
        return 0
    try:
        delta = abs(ensure_utc(now) - timestamp)
    except (OverflowError, ValueError):
        return 0
    elapsed_ms = (
        delta.days * DAY_MS + delta.seconds * 1000 + delta.microseconds // 1000
    )
    return -(-elapsed_ms // DAY_MS)


def _parse_iso(text: str) -> datetime | None:
    if text.endswith("Z") or text.endswith("z"):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
