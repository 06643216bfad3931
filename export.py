from __future__ import annotations

import io
import json
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from typing import Any

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from aps import APSResult
from logic import field_value

CSV_COLUMNS = [
    "program_code",
    "abbreviation",
    "program_name",
    "faculty",
    "aps_required",
    "total_aps",
    "aps_gap",
    "eligible",
    "match_percentage",
    "recommendation",
]


def _safe_text(value: Any) -> str:
    if value is None:
        return "-"
    return str(value)


def _json_default(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return str(value)


def build_pdf_report(
    profile: list[Any],
    aps_result: APSResult,
    evaluations: list[dict[str, Any]],
    disclaimers: list[str],
) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title="APS Eligibility Report")
    styles = getSampleStyleSheet()
    normal = styles["BodyText"]
    heading = styles["Heading2"]

    story = []
    story.append(Paragraph("APS Eligibility Report", styles["Title"]))
    story.append(Paragraph(f"Generated: {datetime.now(timezone.utc).isoformat()}", normal))
    story.append(Spacer(1, 12))

    story.append(Paragraph("Subjects", heading))
    for subject in profile:
        story.append(
            Paragraph(
                f"{_safe_text(field_value(subject, 'name'))}: Level {_safe_text(field_value(subject, 'level'))}"
                f" / {_safe_text(field_value(subject, 'marks'))}%",
                normal,
            )
        )
    story.append(Spacer(1, 8))

    story.append(Paragraph("APS Summary", heading))
    story.append(Paragraph(f"Total APS: {aps_result.total_score}", normal))
    counted = ", ".join(f"{s['name']} ({s['points']})" for s in aps_result.counted_subjects)
    story.append(Paragraph(f"Counted: {counted or '-'}", normal))
    story.append(Paragraph(f"Not counted: {', '.join(aps_result.excluded_subjects) or '-'}", normal))
    if not aps_result.is_valid:
        story.append(Paragraph("Fewer than six subjects were counted; the total is provisional.", normal))
    story.append(Spacer(1, 8))

    eligible = [e for e in evaluations if e.get("eligible")]
    story.append(Paragraph(f"Eligible Programs ({len(eligible)} of {len(evaluations)})", heading))
    for idx, item in enumerate(evaluations, start=1):
        status = "Eligible" if item.get("eligible") else "Not eligible"
        story.append(
            Paragraph(
                f"{idx}. {_safe_text(item.get('program_name'))} @ {_safe_text(item.get('abbreviation'))} [{status}]",
                styles["Heading3"],
            )
        )
        story.append(
            Paragraph(
                f"APS required: {_safe_text(item.get('aps_required'))} | Subject match: {_safe_text(item.get('match_percentage'))}%",
                normal,
            )
        )
        story.append(Paragraph(_safe_text(item.get("recommendation")), normal))
        missing = ", ".join(item.get("missing_subjects", []))
        if missing:
            story.append(Paragraph(f"Missing subjects: {missing}", normal))
        story.append(Spacer(1, 6))

    story.append(Spacer(1, 12))
    story.append(Paragraph("Disclaimers", heading))
    for text in disclaimers:
        story.append(Paragraph(f"- {_safe_text(text)}", normal))

    doc.build(story)
    buffer.seek(0)
    return buffer.read()


def build_json_summary(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, indent=2, ensure_ascii=True, default=_json_default).encode("utf-8")


def build_programs_csv(evaluations: list[dict[str, Any]]) -> bytes:
    frame = pd.DataFrame(evaluations, columns=CSV_COLUMNS)
    return frame.to_csv(index=False).encode("utf-8")
