from __future__ import annotations

from dataclasses import dataclass

AUDIENCE_CLIENT = "client"
AUDIENCE_ADVISOR = "advisor"


@dataclass(frozen=True)
class ReportSection:
    heading: str
    paragraphs: tuple[str, ...] = ()
    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class Report:
    audience: str
    subject: str
    title: str
    sections: tuple[ReportSection, ...]

    def section(self, heading: str) -> ReportSection | None:
        for section in self.sections:
            if section.heading == heading:
                return section
        return None


def report_to_dict(report: Report) -> dict[str, object]:
    return {
        "audience": report.audience,
        "subject": report.subject,
        "title": report.title,
        "sections": [
            {
                "heading": section.heading,
                "paragraphs": list(section.paragraphs),
                "items": list(section.items),
            }
            for section in report.sections
        ],
    }
