"""
APS (Admission Point Score) calculation.

NSC percentages map to 1-7 points; Life Orientation never counts toward the
total and at most six subjects do.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from logic import ENGLISH_VARIANTS, field_value
from subjects import is_life_orientation, is_valid_subject_name, normalize_subject_name

APS_SUBJECT_COUNT = 6

# (minimum percentage, points), highest band first.
POINT_BANDS = [(80, 7), (70, 6), (60, 5), (50, 4), (40, 3), (30, 2)]


@dataclass
class APSResult:
    total_score: int
    counted_subjects: list[dict[str, Any]] = field(default_factory=list)
    excluded_subjects: list[str] = field(default_factory=list)
    is_valid: bool = False


def convert_percentage_to_points(marks: Any) -> int:
    if isinstance(marks, bool) or not isinstance(marks, (int, float)):
        return 0
    if marks < 0 or marks > 100:
        return 0
    for minimum, points in POINT_BANDS:
        if marks >= minimum:
            return points
    return 1


def subject_points(subject: Any) -> int:
    points = field_value(subject, "points")
    if isinstance(points, int) and not isinstance(points, bool) and 1 <= points <= 7:
        return points
    return convert_percentage_to_points(field_value(subject, "marks"))


def calculate_aps(subjects: list[Any]) -> APSResult:
    counted: list[dict[str, Any]] = []
    excluded: list[str] = []

    for subject in subjects or []:
        name = str(field_value(subject, "name", "") or "")
        if is_life_orientation(name):
            excluded.append(name)
            continue
        points = subject_points(subject)
        if points <= 0:
            excluded.append(name)
            continue
        counted.append({"name": normalize_subject_name(name), "points": points})

    counted.sort(key=lambda item: item["points"], reverse=True)
    if len(counted) > APS_SUBJECT_COUNT:
        excluded.extend(item["name"] for item in counted[APS_SUBJECT_COUNT:])
        counted = counted[:APS_SUBJECT_COUNT]

    total = sum(item["points"] for item in counted)
    return APSResult(
        total_score=total,
        counted_subjects=counted,
        excluded_subjects=excluded,
        is_valid=len(counted) == APS_SUBJECT_COUNT,
    )


def calculate_aps_total(points_by_subject: dict[str, int]) -> int:
    values = [value for value in (points_by_subject or {}).values() if value and value > 0]
    return sum(values) if len(values) >= APS_SUBJECT_COUNT else 0


def validate_aps_subjects(subjects: list[Any]) -> dict[str, Any]:
    errors: list[str] = []
    warnings: list[str] = []

    names = [str(field_value(s, "name", "") or "").strip() for s in subjects or []]
    normalized = [normalize_subject_name(n) for n in names if n]

    if not any(any(v in n.lower() for v in ENGLISH_VARIANTS) for n in normalized):
        errors.append("An English language subject is required")
    if not any(n in {"Mathematics", "Mathematical Literacy"} for n in normalized):
        errors.append("Mathematics or Mathematical Literacy is required")

    seen: set[str] = set()
    for name in normalized:
        if name in seen:
            errors.append(f"Duplicate subject: {name}")
        seen.add(name)

    for subject in subjects or []:
        marks = field_value(subject, "marks")
        if marks is None:
            continue
        if isinstance(marks, bool) or not isinstance(marks, (int, float)) or not 0 <= marks <= 100:
            errors.append(f"Marks for {field_value(subject, 'name', '?')} must be between 0 and 100")

    aps_subjects = [n for n in normalized if not is_life_orientation(n)]
    if len(aps_subjects) < APS_SUBJECT_COUNT:
        warnings.append(f"Only {len(aps_subjects)} of {APS_SUBJECT_COUNT} APS subjects captured")
    if not any(is_life_orientation(n) for n in normalized):
        warnings.append("Life Orientation not captured")
    for name in normalized:
        if not is_valid_subject_name(name):
            warnings.append(f"Unrecognised subject: {name}")

    score = max(0, 100 - 25 * len(errors) - 5 * len(warnings))
    return {"is_valid": not errors, "score": score, "errors": errors, "warnings": warnings}
