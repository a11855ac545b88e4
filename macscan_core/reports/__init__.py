from macscan_core.reports.builder import (
    build_advisor_report,
    build_client_report,
    human_model_name,
    readiness_headline,
    urgency_note,
)
from macscan_core.reports.render import render, render_html, render_text
from macscan_core.reports.types import (
    AUDIENCE_ADVISOR,
    AUDIENCE_CLIENT,
    Report,
    ReportSection,
    report_to_dict,
)

__all__ = [
    "AUDIENCE_ADVISOR",
    "AUDIENCE_CLIENT",
    "Report",
    "ReportSection",
    "build_advisor_report",
    "build_client_report",
    "human_model_name",
    "readiness_headline",
    "render",
    "render_html",
    "render_text",
    "report_to_dict",
    "urgency_note",
]
