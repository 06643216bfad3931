from __future__ import annotations

import copy
from typing import Any

from aps import calculate_aps
from config import MatchingThresholds
from logic import check_subject_requirements, field_value

# APS 42 is the ceiling of six subjects at 7 points.
MAX_APS = 42
OVERQUALIFIED_MARGIN = 5

_ENGLISH_ANY = {
    "name": "English",
    "level": 4,
    "is_required": True,
    "alternatives": ["English Home Language", "English First Additional Language"],
}

# (keywords, minimum APS, required subjects); first keyword hit wins.
FIELD_REQUIREMENTS: list[tuple[tuple[str, ...], int, list[dict[str, Any]]]] = [
    (
        ("engineering", "engineer"),
        35,
        [
            {"name": "Mathematics", "level": 6, "is_required": True},
            {"name": "Physical Sciences", "level": 6, "is_required": True, "alternatives": ["Physics"]},
            _ENGLISH_ANY,
        ],
    ),
    (
        ("medicine", "medical"),
        40,
        [
            {"name": "Mathematics", "level": 6, "is_required": True},
            {"name": "Physical Sciences", "level": 6, "is_required": True, "alternatives": ["Physics"]},
            {"name": "Life Sciences", "level": 6, "is_required": True, "alternatives": ["Biology"]},
            {"name": "English", "level": 6, "is_required": True, "alternatives": ["English Home Language"]},
        ],
    ),
    (
        ("business", "commerce", "accounting", "economics"),
        30,
        [
            {"name": "Mathematics", "level": 4, "is_required": True, "alternatives": ["Mathematical Literacy"]},
            _ENGLISH_ANY,
        ],
    ),
    (
        ("science", "biology", "chemistry", "physics"),
        32,
        [
            {"name": "Mathematics", "level": 5, "is_required": True},
            {"name": "Physical Sciences", "level": 5, "is_required": True, "alternatives": ["Physics"]},
            _ENGLISH_ANY,
        ],
    ),
    (
        ("law", "legal", "llb"),
        35,
        [{"name": "English", "level": 6, "is_required": True, "alternatives": ["English Home Language"]}],
    ),
    (("education", "teaching"), 28, [_ENGLISH_ANY]),
    (("arts", "humanities", "social", "language", "literature"), 26, [_ENGLISH_ANY]),
]
DEFAULT_MINIMUM_APS = 24


def default_program_requirements(program_name: str) -> dict[str, Any]:
    name = (program_name or "").lower()
    for keywords, minimum_aps, subjects in FIELD_REQUIREMENTS:
        if any(keyword in name for keyword in keywords):
            return {"minimum_aps": minimum_aps, "required_subjects": copy.deepcopy(subjects)}
    return {"minimum_aps": DEFAULT_MINIMUM_APS, "required_subjects": [copy.deepcopy(_ENGLISH_ANY)]}


def program_requirements(program: Any) -> list[dict[str, Any]]:
    stored = field_value(program, "subject_requirements")
    if stored:
        return list(stored)
    return default_program_requirements(field_value(program, "program_name", ""))["required_subjects"]


def _recommendation(meets_aps: bool, aps_gap: int, missing: list[str], low_levels: list[str]) -> str:
    if meets_aps and not missing and not low_levels:
        return "You qualify for this program!"
    subject_gaps = missing + [f"{name} (higher level)" for name in low_levels]
    if not meets_aps and subject_gaps:
        return f"Improve your APS (need {aps_gap} more points) and complete missing subjects: {', '.join(subject_gaps)}"
    if not meets_aps:
        return f"Your subjects match, but you need {aps_gap} more APS points"
    return f"Your APS is sufficient, but you need these subjects: {', '.join(subject_gaps)}"


def evaluate_program(
    program: Any,
    user_subjects: list[Any],
    total_aps: int | None = None,
    thresholds: MatchingThresholds | None = None,
) -> dict[str, Any]:
    if total_aps is None:
        total_aps = calculate_aps(user_subjects).total_score
    aps_required = int(field_value(program, "aps_required", 0) or 0)
    requirements = program_requirements(program)
    subject_check = check_subject_requirements(user_subjects, requirements, thresholds)

    meets_aps = total_aps >= aps_required
    aps_gap = max(0, aps_required - total_aps)
    required_count = len([r for r in requirements if field_value(r, "is_required", True)])
    satisfied = [m.required for m in subject_check.matched_subjects if m.level_valid]
    low_levels = [m.required for m in subject_check.matched_subjects if not m.level_valid]
    missing = [m.name for m in subject_check.missing_subjects]
    match_percentage = round(len(satisfied) / required_count * 100) if required_count else 100

    details = [
        f"APS requirement met: {total_aps}/{aps_required}"
        if meets_aps
        else f"APS too low: need {aps_required}, have {total_aps} (gap: {aps_gap})"
    ]
    for match in subject_check.matched_subjects:
        mark = "✓" if match.level_valid else "✗"
        details.append(f"{mark} {match.required}: {match.matched} ({match.level_reason})")
    for item in subject_check.missing_subjects:
        details.append(f"✗ Missing: {item.name} (level {item.level}+)")

    return {
        "program_code": field_value(program, "program_code"),
        "program_name": field_value(program, "program_name"),
        "university": field_value(program, "university"),
        "abbreviation": field_value(program, "abbreviation"),
        "faculty": field_value(program, "faculty"),
        "aps_required": aps_required,
        "total_aps": total_aps,
        "meets_aps": meets_aps,
        "aps_gap": aps_gap,
        "eligible": meets_aps and subject_check.is_eligible,
        "subject_check": subject_check.as_dict(),
        "satisfied_subjects": satisfied,
        "missing_subjects": missing,
        "match_percentage": match_percentage,
        "recommendation": _recommendation(meets_aps, aps_gap, missing, low_levels),
        "details": details,
    }


def evaluate_programs(
    programs: list[Any],
    user_subjects: list[Any],
    total_aps: int | None = None,
    thresholds: MatchingThresholds | None = None,
) -> dict[str, Any]:
    aps_result = calculate_aps(user_subjects)
    if total_aps is None:
        total_aps = aps_result.total_score

    evaluations = [
        evaluate_program(program, user_subjects, total_aps, thresholds)
        for program in programs
        if field_value(program, "active", True)
    ]
    evaluations.sort(
        key=lambda item: (item["eligible"], item["total_aps"] - item["aps_required"], item["match_percentage"]),
        reverse=True,
    )

    analysis = analyze_degree_eligibility([_program_row(p) for p in programs if field_value(p, "active", True)], total_aps)
    groups = calculate_university_stats(group_programs_by_university(analysis), total_aps)

    return {
        "total_aps": total_aps,
        "aps": aps_result,
        "programs": evaluations,
        "eligible_count": len([e for e in evaluations if e["eligible"]]),
        "universities": groups,
        "stats": calculate_overall_stats(analysis, groups, total_aps),
    }


def _program_row(program: Any) -> dict[str, Any]:
    keys = ("program_code", "program_name", "university", "abbreviation", "location", "faculty", "duration", "description")
    row = {key: field_value(program, key) for key in keys}
    row["aps_required"] = int(field_value(program, "aps_required", 0) or 0)
    return row


def analyze_degree_eligibility(programs: list[dict[str, Any]], total_aps: int) -> list[dict[str, Any]]:
    return [
        {
            **program,
            "eligible": total_aps >= program["aps_required"],
            "aps_gap": max(0, program["aps_required"] - total_aps),
            "overqualified": total_aps > program["aps_required"] + OVERQUALIFIED_MARGIN,
        }
        for program in programs
    ]


def group_programs_by_university(programs: list[dict[str, Any]]) -> list[dict[str, Any]]:
    grouped: dict[str, dict[str, Any]] = {}
    for program in programs:
        key = program.get("abbreviation") or program.get("university") or "Unknown"
        if key not in grouped:
            grouped[key] = {
                "university": program.get("university"),
                "abbreviation": key,
                "location": program.get("location"),
                "programs": [],
                "eligible_programs": 0,
            }
        grouped[key]["programs"].append(program)
    return list(grouped.values())


def calculate_university_stats(universities: list[dict[str, Any]], total_aps: int) -> list[dict[str, Any]]:
    stats = []
    for uni in universities:
        programs = uni["programs"]
        eligible = len([p for p in programs if total_aps >= p["aps_required"]])
        average = round(sum(p["aps_required"] for p in programs) / len(programs)) if programs else 0

        competitiveness = "Accessible"
        if average >= 30:
            competitiveness = "High"
        elif average >= 24:
            competitiveness = "Moderate"

        stats.append({**uni, "eligible_programs": eligible, "average_aps": average, "competitiveness": competitiveness})

    stats.sort(key=lambda item: item["eligible_programs"], reverse=True)
    return stats


def calculate_overall_stats(
    degree_analysis: list[dict[str, Any]],
    universities: list[dict[str, Any]],
    total_aps: int,
) -> dict[str, Any]:
    total_degrees = len(degree_analysis)
    eligible_count = len([d for d in degree_analysis if d["eligible"]]) if total_aps > 0 else 0
    eligibility_rate = round(eligible_count / total_degrees * 100) if total_degrees and total_aps > 0 else 0
    average_requirement = (
        round(sum(d["aps_required"] for d in degree_analysis) / total_degrees) if total_degrees else 0
    )

    return {
        "total_degrees": total_degrees,
        "eligible_count": eligible_count,
        "eligibility_rate": eligibility_rate,
        "top_universities": len([u for u in universities if u.get("eligible_programs", 0) > 0]),
        "average_requirement": average_requirement,
        "performance_percentile": min(100, round(total_aps / MAX_APS * 100)) if total_aps > 0 else 0,
    }


def filter_programs(
    programs: list[dict[str, Any]],
    search_term: str | None = None,
    min_aps: int | None = None,
    max_aps: int | None = None,
    faculty: str | None = None,
    university: str | None = None,
) -> list[dict[str, Any]]:
    term = (search_term or "").strip().lower()
    results = []
    for program in programs:
        haystack = [program.get("program_name"), program.get("university"), program.get("faculty")]
        if term and not any(term in str(value or "").lower() for value in haystack):
            continue
        if min_aps and program["aps_required"] < min_aps:
            continue
        if max_aps and program["aps_required"] > max_aps:
            continue
        if faculty and program.get("faculty") != faculty:
            continue
        if university and program.get("university") != university:
            continue
        results.append(program)
    return results
