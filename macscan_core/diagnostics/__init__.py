from macscan_core.diagnostics.backup import backup_age_days, parse_timestamp
from macscan_core.diagnostics.hardware import (
    MODEL_YEARS,
    SOLDERED_FAMILIES,
    extract_year,
    is_soldered,
    is_soldered_model,
)
from macscan_core.diagnostics.record import scan_record_from_dict
from macscan_core.diagnostics.rules import (
    DEFAULT_RULES,
    DiagnosticRule,
    build_context,
    evaluate,
)
from macscan_core.diagnostics.scoring import (
    letter_grade,
    priority_level,
    summarize,
    system_health,
)
from macscan_core.diagnostics.types import (
    Analysis,
    Category,
    Flag,
    PriorityLevel,
    RuleContext,
    RuleOutcome,
    ScanRecord,
    Severity,
    SystemHealth,
    analysis_to_dict,
    flag_to_dict,
)

__all__ = [
    "Analysis",
    "Category",
    "DEFAULT_RULES",
    "DiagnosticRule",
    "Flag",
    "MODEL_YEARS",
    "PriorityLevel",
    "RuleContext",
    "RuleOutcome",
    "SOLDERED_FAMILIES",
    "ScanRecord",
    "Severity",
    "SystemHealth",
    "analysis_to_dict",
    "backup_age_days",
    "build_context",
    "evaluate",
    "extract_year",
    "flag_to_dict",
    "is_soldered",
    "is_soldered_model",
    "letter_grade",
    "parse_timestamp",
    "priority_level",
    "scan_record_from_dict",
    "summarize",
    "system_health",
]
