from __future__ import annotations

import pytest

from macscan_core.diagnostics.scoring import (
    letter_grade,
    priority_level,
    severity_counts,
    system_health,
)
from macscan_core.diagnostics.types import (
    Category,
    Flag,
    PriorityLevel,
    Severity,
    SystemHealth,
)


@pytest.mark.core
@pytest.mark.parametrize(
    "critical, score, expected",
    [
        (3, 0, PriorityLevel.HOT),
        (0, 8, PriorityLevel.HOT),
        (2, 0, PriorityLevel.WARM),
        (0, 6, PriorityLevel.WARM),
        (1, 0, PriorityLevel.WARM),
        (0, 4, PriorityLevel.WARM),
        (0, 3, PriorityLevel.COLD),
    ],
)
def test_priority_level(critical, score, expected):
    assert priority_level(critical, score) == expected


@pytest.mark.core
@pytest.mark.parametrize(
    "critical, moderate, positive, score, expected",
    [
        (3, 0, 0, 0, SystemHealth.CRITICAL),
        (0, 0, 0, 8, SystemHealth.CRITICAL),
        (2, 0, 0, 0, SystemHealth.NEEDS_ATTENTION),
        (0, 3, 0, 6, SystemHealth.NEEDS_ATTENTION),
        (1, 0, 5, 0, SystemHealth.MODERATE),
        (0, 2, 0, 4, SystemHealth.MODERATE),
        (0, 1, 2, 1, SystemHealth.EXCELLENT),
        (0, 2, 3, 2, SystemHealth.GOOD),
        (0, 0, 1, 0, SystemHealth.GOOD),
    ],
)
def test_system_health(critical, moderate, positive, score, expected):
    assert system_health(critical, moderate, positive, score) == expected


@pytest.mark.core
@pytest.mark.parametrize(
    "score, critical, moderate, ram, expected",
    [
        (0, 0, 0, 32, "A+"),
        (0, 0, 0, 16, "A"),
        (0, 0, 0, 8, "B"),
        (0, 0, 0, None, "B"),
        (12, 0, 0, 64, "D-"),
        (0, 4, 0, 64, "D-"),
        (10, 0, 0, 8, "D+"),
        (2, 3, 0, 8, "D+"),
        (7, 0, 0, 8, "C-"),
        (4, 2, 0, 8, "C-"),
        (5, 0, 0, 8, "C+"),
        (3, 1, 0, 8, "C+"),
        (3, 0, 1, 8, "B-"),
        (2, 0, 2, 8, "B-"),
        (1, 0, 1, 32, "B+"),
    ],
)
def test_letter_grade(score, critical, moderate, ram, expected):
    assert letter_grade(score, critical, moderate, ram) == expected


@pytest.mark.core
def test_second_and_third_warm_branches_split_health():
    # Both are WARM leads, but health distinguishes them.
    assert priority_level(2, 0) == priority_level(1, 0) == PriorityLevel.WARM
    assert system_health(2, 0, 0, 0) == SystemHealth.NEEDS_ATTENTION
    assert system_health(1, 0, 0, 0) == SystemHealth.MODERATE


@pytest.mark.core
def test_severity_counts_cover_every_severity():
    flags = [
        Flag(Severity.CRITICAL, Category.BATTERY, "c", "i", "r", weight=3),
        Flag(Severity.POSITIVE, Category.DISPLAY, "c", "i", "r"),
        Flag(Severity.POSITIVE, Category.MEMORY, "c", "i", "r"),
    ]
    counts = severity_counts(flags)
    assert counts == {
        Severity.CRITICAL: 1,
        Severity.MODERATE: 0,
        Severity.INFO: 0,
        Severity.POSITIVE: 2,
    }


@pytest.mark.core
def test_severity_rank_orders_critical_first():
    ranked = sorted(Severity, key=lambda item: item.rank, reverse=True)
    assert ranked == [
        Severity.CRITICAL,
        Severity.MODERATE,
        Severity.INFO,
        Severity.POSITIVE,
    ]
