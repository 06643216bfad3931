from __future__ import annotations

import logging
import math
import re
from dataclasses import asdict, dataclass, field
from typing import Any

from config import DEFAULT_THRESHOLDS, MatchingThresholds
from subjects import GENERIC_FAMILIES, find_subject_mapping, normalize_subject_name

logger = logging.getLogger(__name__)

MIN_LEVEL = 1
MAX_LEVEL = 7

ENGLISH_VARIANTS = (
    "english",
    "english home language",
    "english hl",
    "english first additional language",
    "english fal",
)
MATH_VARIANTS = ("mathematics", "maths", "math", "mathematical literacy")
_LITERACY = re.compile(r"\blit(eracy)?\b")


@dataclass
class MatchResult:
    is_match: bool
    confidence: int
    reason: str
    alternatives: list[str] = field(default_factory=list)
    excluded: bool = False


@dataclass
class LevelCheck:
    is_valid: bool
    reason: str
    gap: int | None = None


@dataclass
class UserSubject:
    name: str
    level: int
    points: int = 0
    marks: float | None = None


@dataclass
class RequiredSubject:
    name: str
    level: int
    is_required: bool = True
    alternatives: list[str] = field(default_factory=list)


@dataclass
class MatchDetail:
    required: str
    matched: str
    confidence: int
    level_valid: bool
    user_level: int
    required_level: int
    match_reason: str
    level_reason: str
    gap: int | None = None
    fallback: bool = False


@dataclass
class MissingSubject:
    name: str
    level: int
    alternatives: list[str]


@dataclass
class RequirementCheckResult:
    is_eligible: bool
    matched_subjects: list[MatchDetail]
    missing_subjects: list[MissingSubject]
    details: str

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def field_value(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [str(value).strip()]


def _length_ratio(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if not longest:
        return 0.0
    return min(len(a), len(b)) / longest


def _contains_either(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return a in b or b in a


def _family_of(standard: str) -> str | None:
    for family in GENERIC_FAMILIES:
        if standard.lower() == family.lower():
            return family
    return None


def _in_family(family: str, standard: str) -> bool:
    mapping = find_subject_mapping(family)
    members = {m.lower() for m in (mapping.synonyms if mapping else ())}
    return family.lower() in standard.lower() or standard.lower() in members


def match_subjects(
    user_subject: str,
    required_subject: str,
    thresholds: MatchingThresholds = DEFAULT_THRESHOLDS,
) -> MatchResult:
    user_standard = normalize_subject_name(user_subject or "")
    required_standard = normalize_subject_name(required_subject or "")
    user_norm = user_standard.strip().lower()
    required_norm = required_standard.strip().lower()

    if user_norm == required_norm:
        reason = "Exact match" if user_standard == user_subject else f"Normalized match: {user_subject} → {user_standard}"
        return MatchResult(True, 100, reason)

    required_family = _family_of(required_standard)
    if required_family and user_norm and _in_family(required_family, user_standard):
        return MatchResult(True, 95, f"{user_subject} satisfies {required_family} language requirement")

    user_family = _family_of(user_standard)
    if user_family and required_norm and _in_family(user_family, required_standard):
        return MatchResult(True, 90, f"{user_family} language subject satisfies {required_subject} requirement")

    user_mapping = find_subject_mapping(user_standard)
    required_mapping = find_subject_mapping(required_standard)
    required_alternatives = list(required_mapping.synonyms) if required_mapping else []

    if user_mapping and required_mapping:
        if user_mapping.canonical == required_mapping.canonical:
            return MatchResult(True, 95, f"Both are {user_mapping.canonical}")

        if (
            required_mapping.canonical in user_mapping.excluded_canonicals
            or user_mapping.canonical in required_mapping.excluded_canonicals
        ):
            return MatchResult(
                False,
                100,
                f"{user_subject} explicitly cannot substitute for {required_subject}",
                required_alternatives,
                excluded=True,
            )

    if user_mapping and not required_mapping and required_norm:
        if required_norm in (s.lower() for s in user_mapping.synonyms):
            return MatchResult(True, 85, f"{user_subject} includes {required_subject}")
        if required_norm in user_mapping.canonical.lower():
            return MatchResult(True, 75, f"{required_subject} is part of {user_mapping.canonical}")

    if required_mapping and not user_mapping and user_norm:
        if user_norm in (s.lower() for s in required_mapping.synonyms):
            return MatchResult(True, 85, f"{required_subject} includes {user_subject}")
        if user_norm in required_mapping.canonical.lower():
            return MatchResult(True, 75, f"{user_subject} is part of {required_mapping.canonical}")

    user_is_english = any(variant in user_norm for variant in ENGLISH_VARIANTS)
    required_is_english = any(variant in required_norm for variant in ENGLISH_VARIANTS)
    if user_is_english and required_is_english:
        return MatchResult(
            True,
            92,
            f'English language subject match: "{user_subject}" satisfies "{required_subject}" requirement',
        )

    user_is_math = any(variant in user_norm for variant in MATH_VARIANTS)
    required_is_math = any(variant in required_norm for variant in MATH_VARIANTS)
    if user_is_math and required_is_math:
        required_is_literacy = bool(_LITERACY.search(required_norm))
        if bool(_LITERACY.search(user_norm)) != required_is_literacy:
            return MatchResult(
                False,
                100,
                f"{user_subject} cannot substitute for {required_subject} - different math types",
                ["Mathematical Literacy"] if required_is_literacy else ["Mathematics"],
                excluded=True,
            )
        return MatchResult(
            True,
            94,
            f'Mathematics subject match: "{user_subject}" satisfies "{required_subject}" requirement',
        )

    if _contains_either(user_norm, required_norm):
        # Length guard keeps "Math" from riding on "Mathematical Literacy".
        if _length_ratio(user_norm, required_norm) > thresholds.partial_length_ratio:
            return MatchResult(
                True,
                thresholds.partial_confidence,
                "Partial match - please verify this is correct",
                required_alternatives,
            )

    return MatchResult(False, 100, f"{user_subject} does not match {required_subject}", required_alternatives)


def relaxed_match(
    user_subject: str,
    required_subject: str,
    strict: MatchResult,
    thresholds: MatchingThresholds = DEFAULT_THRESHOLDS,
) -> MatchResult:
    """Permissive second opinion for weak or negative strict results.

    Works on the raw lowercase names. Hard negatives from exclusion rules are
    final and returned untouched.
    """
    if strict.excluded:
        return strict
    if strict.is_match and strict.confidence >= thresholds.relaxed_below:
        return strict

    user_lower = (user_subject or "").strip().lower()
    required_lower = (required_subject or "").strip().lower()
    if not user_lower or not required_lower:
        return strict

    user_is_english = any(variant in user_lower for variant in ENGLISH_VARIANTS)
    required_is_english = any(variant in required_lower for variant in ENGLISH_VARIANTS)
    if user_is_english and required_is_english:
        return MatchResult(True, 95, f"English language match: {user_subject} satisfies {required_subject}")

    if required_lower in {"mathematics", "maths"} and user_lower in {"mathematics", "maths", "math"}:
        return MatchResult(True, 98, f"Mathematics match: {user_subject} satisfies {required_subject}")

    if required_lower in {"physical sciences", "physics"} and user_lower in {"physical sciences", "physics"}:
        return MatchResult(True, 98, f"Physical Sciences match: {user_subject} satisfies {required_subject}")

    if required_lower in {"life sciences", "biology"} and user_lower in {"life sciences", "biology"}:
        return MatchResult(True, 98, f"Life Sciences match: {user_subject} satisfies {required_subject}")

    if user_lower == required_lower:
        return MatchResult(True, 100, f"Exact match (case insensitive): {user_subject} = {required_subject}")

    if _contains_either(user_lower, required_lower):
        confidence = max(thresholds.relaxed_partial_floor, _length_ratio(user_lower, required_lower) * 100)
        return MatchResult(True, math.floor(confidence), f"Partial match: {user_subject} contains {required_subject}")

    return strict


def validate_subject_level(user_level: Any, required_level: Any, subject_name: str) -> LevelCheck:
    logger.debug("Level validation for %s: user=%s required=%s", subject_name, user_level, required_level)

    if not all(isinstance(v, int) and not isinstance(v, bool) for v in (user_level, required_level)) or not (
        MIN_LEVEL <= user_level <= MAX_LEVEL and MIN_LEVEL <= required_level <= MAX_LEVEL
    ):
        return LevelCheck(
            False,
            f"Invalid level values for {subject_name} (levels must be {MIN_LEVEL}-{MAX_LEVEL}). "
            f"User: {user_level}, Required: {required_level}",
        )

    if user_level >= required_level:
        return LevelCheck(True, f"{subject_name} Level {user_level} meets requirement (Level {required_level})")

    gap = required_level - user_level
    return LevelCheck(
        False,
        f"{subject_name} Level {user_level} is below requirement (Level {required_level}). "
        f"Need {gap} more level{'s' if gap > 1 else ''}.",
        gap,
    )


def _detail(required: Any, user_subject: Any, result: MatchResult, fallback: bool = False) -> MatchDetail:
    required_name = str(field_value(required, "name") or "")
    user_level = _as_int(field_value(user_subject, "level"))
    required_level = _as_int(field_value(required, "level"))
    level = validate_subject_level(user_level, required_level, required_name)
    return MatchDetail(
        required=required_name,
        matched=str(field_value(user_subject, "name") or ""),
        confidence=result.confidence,
        level_valid=level.is_valid,
        user_level=user_level,
        required_level=required_level,
        match_reason=result.reason,
        level_reason=level.reason,
        gap=level.gap,
        fallback=fallback,
    )


def _accepted_names(required: Any) -> list[str]:
    names = [str(field_value(required, "name") or "")]
    for alt in _as_list(field_value(required, "alternatives")):
        if alt not in names:
            names.append(alt)
    return names


def _best_match(
    required: Any,
    user_subjects: list[Any],
    thresholds: MatchingThresholds,
) -> MatchDetail | None:
    best: MatchDetail | None = None
    best_confidence = 0
    for name in _accepted_names(required):
        for user_subject in user_subjects:
            user_name = str(field_value(user_subject, "name") or "")
            strict = match_subjects(user_name, name, thresholds)
            result = relaxed_match(user_name, name, strict, thresholds)
            logger.debug(
                "Checking %r vs %r: match=%s confidence=%s reason=%s",
                user_name,
                name,
                result.is_match,
                result.confidence,
                result.reason,
            )
            if result.is_match and result.confidence > best_confidence:
                best = _detail(required, user_subject, result)
                best_confidence = result.confidence
    return best


def _fallback_match(
    required: Any,
    user_subjects: list[Any],
    thresholds: MatchingThresholds,
) -> MatchDetail | None:
    for name in _accepted_names(required):
        for user_subject in user_subjects:
            result = match_subjects(str(field_value(user_subject, "name") or ""), name, thresholds)
            if result.is_match and result.confidence >= thresholds.fallback_min_confidence:
                return _detail(required, user_subject, result, fallback=True)
    return None


def _missing(required: Any) -> MissingSubject:
    name = str(field_value(required, "name") or "")
    alternatives = find_subject_mapping(name)
    options = list(alternatives.synonyms) if alternatives else []
    for alt in _as_list(field_value(required, "alternatives")):
        if alt not in options:
            options.append(alt)
    return MissingSubject(name=name, level=_as_int(field_value(required, "level")), alternatives=options)


def _is_required(required: Any) -> bool:
    value = field_value(required, "is_required", True)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def check_subject_requirements(
    user_subjects: list[Any],
    required_subjects: list[Any],
    thresholds: MatchingThresholds | None = None,
) -> RequirementCheckResult:
    thresholds = thresholds or DEFAULT_THRESHOLDS
    user_subjects = list(user_subjects or [])
    required = [r for r in (required_subjects or []) if _is_required(r)]

    matched: list[MatchDetail] = []
    missing: list[MissingSubject] = []

    for requirement in required:
        detail = _best_match(requirement, user_subjects, thresholds)
        if detail is None:
            detail = _fallback_match(requirement, user_subjects, thresholds)
        if detail is None:
            missing.append(_missing(requirement))
            logger.debug("No match for required subject %s", field_value(requirement, "name"))
            continue
        logger.debug(
            "Required %s matched by %s (confidence %s, level valid %s)",
            detail.required,
            detail.matched,
            detail.confidence,
            detail.level_valid,
        )
        matched.append(detail)

    valid_matches = [m for m in matched if m.level_valid]
    is_eligible = not missing and len(valid_matches) == len(required)

    if is_eligible:
        details = "All subject requirements met"
    else:
        issues: list[str] = []
        if missing:
            issues.append("Missing: " + ", ".join(f"{m.name} (Level {m.level})" for m in missing))
        # A failed check without a gap means the level data itself was out of range.
        low_levels = [m for m in matched if not m.level_valid and m.gap is not None]
        bad_levels = [m for m in matched if not m.level_valid and m.gap is None]
        for label, items in (("Insufficient levels", low_levels), ("Invalid level data", bad_levels)):
            if items:
                issues.append(
                    f"{label}: "
                    + ", ".join(f"{m.required} (need Level {m.required_level}, have Level {m.user_level})" for m in items)
                )
        details = "; ".join(issues)

    logger.debug(
        "Subject requirements: eligible=%s matched=%d valid=%d missing=%d",
        is_eligible,
        len(matched),
        len(valid_matches),
        len(missing),
    )
    return RequirementCheckResult(is_eligible, matched, missing, details)
