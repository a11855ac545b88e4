from __future__ import annotations

import re

# Model-identifier tokens as reported by the scanner agent (e.g. "MacBookPro11,1").
# Checked top to bottom; minor-revision tokens come before their family token.
MODEL_YEARS: tuple[tuple[str, int], ...] = (
    ("MacBookPro18", 2021),
    ("MacBookPro17", 2020),
    ("MacBookPro16", 2019),
    ("MacBookPro15", 2018),
    ("MacBookPro14", 2017),
    ("MacBookPro13", 2016),
    ("MacBookPro12", 2015),
    ("MacBookPro11,5", 2015),
    ("MacBookPro11,4", 2015),
    ("MacBookPro11", 2013),
    ("MacBookPro10", 2012),
    ("MacBookPro9", 2012),
    ("MacBookPro8", 2011),
    ("MacBookPro7", 2010),
    ("MacBookPro6", 2010),
    ("MacBookPro5", 2008),
    ("MacBookAir10", 2020),
    ("MacBookAir9", 2020),
    ("MacBookAir8", 2018),
    ("MacBookAir7", 2015),
    ("MacBookAir6", 2013),
    ("MacBookAir5", 2012),
    ("MacBookAir4", 2011),
    ("MacBookAir3", 2010),
    ("MacBook10", 2017),
    ("MacBook9", 2016),
    ("MacBook8", 2015),
    ("MacBook7", 2010),
    ("iMacPro1", 2017),
    ("iMac21", 2021),
    ("iMac20", 2020),
    ("iMac19", 2019),
    ("iMac18", 2017),
    ("iMac17", 2015),
    ("iMac16", 2015),
    ("iMac15", 2014),
    ("iMac14", 2013),
    ("iMac13", 2012),
    ("iMac12", 2011),
    ("Macmini9", 2020),
    ("Macmini8", 2018),
    ("Macmini7", 2014),
    ("Macmini6", 2012),
    ("Macmini5", 2011),
    ("MacPro7", 2019),
    ("MacPro6", 2013),
    ("MacPro5", 2010),
    ("Mac16", 2024),
    ("Mac15", 2023),
    ("Mac14", 2022),
    ("Mac13", 2022),
)

# Families whose memory is soldered to the logic board.
SOLDERED_FAMILIES: tuple[str, ...] = (
    "MacBookAir",
    "MacBookPro10",
    "MacBookPro11",
    "MacBookPro12",
    "MacBookPro13",
    "MacBookPro14",
    "MacBookPro15",
    "MacBookPro16",
    "MacBookPro17",
    "MacBookPro18",
    "MacBook8",
    "MacBook9",
    "MacBook10",
    "Macmini7",
    "Macmini9",
    "iMac21",
    "Mac13",
    "Mac14",
    "Mac15",
    "Mac16",
)

INTEL_MARKERS: tuple[str, ...] = ("intel", "x86", "i386", "amd64")

_YEAR_PATTERN = re.compile(r"20\d{2}")
_APPLE_SILICON_PATTERN = re.compile(r"\bApple M\d", re.IGNORECASE)


def _token_pattern(token: str) -> re.Pattern[str]:
    suffix = r"(?!\d)" if token[-1].isdigit() else ""
    return re.compile(r"(?<![A-Za-z])" + re.escape(token) + suffix)


_MODEL_YEAR_PATTERNS: tuple[tuple[re.Pattern[str], int], ...] = tuple(
    (_token_pattern(token), year) for token, year in MODEL_YEARS
)
_SOLDERED_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    _token_pattern(token) for token in SOLDERED_FAMILIES
)


def extract_year(model: object) -> int | None:
    if not isinstance(model, str) or not model:
        return None
    match = _YEAR_PATTERN.search(model)
    if match:
        return int(match.group(0))
    for pattern, year in _MODEL_YEAR_PATTERNS:
        if pattern.search(model):
            return year
    return None


def is_soldered_model(model: object) -> bool:
    if not isinstance(model, str) or not model:
        return False
    return any(pattern.search(model) for pattern in _SOLDERED_PATTERNS)


def is_soldered(model: object, year: int | None) -> bool:
    if is_soldered_model(model):
        return True
    return year is not None and year <= 2015


def is_intel(architecture: str | None) -> bool:
    if not architecture:
        return False
    lowered = architecture.lower()
    return any(marker in lowered for marker in INTEL_MARKERS)


def is_apple_silicon(cpu_brand: str | None) -> bool:
    if not cpu_brand:
        return False
    return _APPLE_SILICON_PATTERN.search(cpu_brand) is not None
