from __future__ import annotations

from html import escape

from macscan_core.reports.types import Report


def render_text(report: Report) -> str:
    lines: list[str] = [report.title, ""]
    for section in report.sections:
        lines.append(section.heading)
        lines.append("")
        for paragraph in section.paragraphs:
            lines.append(paragraph)
            lines.append("")
        if section.items:
            lines.extend(f"- {item}" for item in section.items)
            lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def render_html(report: Report) -> str:
    parts: list[str] = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{escape(report.subject)}</title>",
        "</head>",
        '<body style="font-family: -apple-system, Helvetica, Arial, sans-serif;">',
        f"<h1>{escape(report.title)}</h1>",
    ]
    for section in report.sections:
        parts.append(f"<h2>{escape(section.heading)}</h2>")
        for paragraph in section.paragraphs:
            parts.append(f"<p>{escape(paragraph)}</p>")
        if section.items:
            parts.append("<ul>")
            parts.extend(f"<li>{escape(item)}</li>" for item in section.items)
            parts.append("</ul>")
    parts.extend(["</body>", "</html>"])
    return "\n".join(parts) + "\n"


RENDERERS = {
    "text": render_text,
    "html": render_html,
}


def render(report: Report, fmt: str = "text") -> str:
    try:
        renderer = RENDERERS[fmt]
    except KeyError as exc:
        allowed = ", ".join(sorted(RENDERERS))
        raise ValueError(f"Unsupported report format: {fmt} (expected {allowed})") from exc
    return renderer(report)
